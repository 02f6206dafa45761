from typing import Any, Dict, Optional

import httpx

from app.genres.models import GenreList
from .models import Credits, Movie, MovieDetails, PagedResponse
from ..core.config import settings

PLACEHOLDER_IMAGE = "/placeholder-movie.jpg"
DEFAULT_IMAGE_SIZE = "w500"


def get_image_url(path: Optional[str], size: str = DEFAULT_IMAGE_SIZE,
                  image_base_url: str = settings.TMDB_IMAGE_URL) -> str:
    """Build an absolute TMDB image URL, or the local placeholder for a missing path"""
    if not path:
        return PLACEHOLDER_IMAGE

    clean_path = path if path.startswith("/") else f"/{path}"
    return f"{image_base_url}/{size}{clean_path}"


class TMDBClient:
    """Read-only TMDB client. Transport and HTTP status errors propagate to the caller."""

    def __init__(
        self,
        api_key: str = settings.TMDB_API_KEY,
        base_url: str = settings.TMDB_BASE_URL,
        image_base_url: str = settings.TMDB_IMAGE_URL,
        language: str = settings.TMDB_LANGUAGE,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.image_base_url = image_base_url
        self.language = language
        self._transport = transport

    def get_image_url(self, path: Optional[str], size: str = DEFAULT_IMAGE_SIZE) -> str:
        return get_image_url(path, size, self.image_base_url)

    async def request(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        # Credential and locale always take precedence over caller params
        query: Dict[str, Any] = {
            "api_key": self.api_key,
            "language": self.language
        }
        for key, value in (params or {}).items():
            if key not in query:
                query[key] = value

        headers = {"accept": "application/json"}

        async with httpx.AsyncClient(transport=self._transport) as client:
            response = await client.get(
                f"{self.base_url}{endpoint}",
                headers=headers,
                params=query
            )
            response.raise_for_status()
            return response.json()

    async def get_popular_movies(self, page: int = 1) -> PagedResponse[Movie]:
        data = await self.request("/movie/popular", {"page": page})
        return PagedResponse[Movie].model_validate(data)

    async def get_now_playing_movies(self, page: int = 1) -> PagedResponse[Movie]:
        data = await self.request("/movie/now_playing", {"page": page})
        return PagedResponse[Movie].model_validate(data)

    async def get_movie_details(self, movie_id: int) -> MovieDetails:
        data = await self.request(f"/movie/{movie_id}")
        return MovieDetails.model_validate(data)

    async def get_movie_credits(self, movie_id: int) -> Credits:
        data = await self.request(f"/movie/{movie_id}/credits")
        return Credits.model_validate(data)

    async def get_similar_movies(self, movie_id: int, page: int = 1) -> PagedResponse[Movie]:
        data = await self.request(f"/movie/{movie_id}/similar", {"page": page})
        return PagedResponse[Movie].model_validate(data)

    async def search_movies(self, query: str, page: int = 1) -> PagedResponse[Movie]:
        """Search for movies by title"""
        data = await self.request("/search/movie", {"query": query, "page": page})
        return PagedResponse[Movie].model_validate(data)

    async def get_genres(self) -> GenreList:
        data = await self.request("/genre/movie/list")
        return GenreList.model_validate(data)

    async def discover_movies_by_genre(self, genre_id: int, page: int = 1) -> PagedResponse[Movie]:
        """Popular movies for one genre, most popular first"""
        data = await self.request("/discover/movie", {
            "with_genres": genre_id,
            "page": page,
            "sort_by": "popularity.desc"
        })
        return PagedResponse[Movie].model_validate(data)
