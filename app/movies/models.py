from pydantic import BaseModel, ConfigDict
from typing import Generic, List, Optional, TypeVar

from app.genres.models import Genre

T = TypeVar("T")

class Movie(BaseModel):
    """Summary record as returned by TMDB list endpoints. Never mutated."""
    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    overview: str = ""
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    release_date: str = ""
    vote_average: float = 0.0
    vote_count: int = 0
    popularity: float = 0.0
    genre_ids: List[int] = []
    adult: bool = False
    original_language: str = ""
    original_title: str = ""
    video: bool = False

class ProductionCompany(BaseModel):
    id: int
    logo_path: Optional[str] = None
    name: str
    origin_country: str = ""

class ProductionCountry(BaseModel):
    iso_3166_1: str
    name: str

class SpokenLanguage(BaseModel):
    english_name: str = ""
    iso_639_1: str
    name: str = ""

class MovieDetails(Movie):
    runtime: Optional[int] = None
    genres: List[Genre] = []
    budget: int = 0
    revenue: int = 0
    homepage: Optional[str] = None
    imdb_id: Optional[str] = None
    production_companies: List[ProductionCompany] = []
    production_countries: List[ProductionCountry] = []
    spoken_languages: List[SpokenLanguage] = []
    status: str = ""
    tagline: Optional[str] = None

class CastMember(BaseModel):
    id: int
    name: str
    character: str = ""
    profile_path: Optional[str] = None
    order: int = 0

class CrewMember(BaseModel):
    id: int
    name: str
    job: str = ""
    department: str = ""
    profile_path: Optional[str] = None

class Credits(BaseModel):
    id: int
    cast: List[CastMember] = []
    crew: List[CrewMember] = []

class PagedResponse(BaseModel, Generic[T]):
    page: int
    results: List[T]
    total_pages: int = 0
    total_results: int = 0
