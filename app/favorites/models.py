from datetime import datetime
from typing import List

from pydantic import BaseModel, Field, field_validator, model_validator

from app.movies.models import Movie

class FavoritesBackup(BaseModel):
    ids: List[int]
    movies: List[Movie] = []
    export_date: datetime = Field(default_factory=datetime.now)

    @field_validator("ids")
    @classmethod
    def ids_must_be_unique(cls, ids: List[int]) -> List[int]:
        if len(set(ids)) != len(ids):
            raise ValueError("favorite ids must be unique")
        return ids

    @model_validator(mode="after")
    def movies_must_match_ids(self) -> "FavoritesBackup":
        if [movie.id for movie in self.movies] != self.ids:
            raise ValueError("favorite movies must match favorite ids in the same order")
        return self

class FavoritesSummary(BaseModel):
    count: int
    ids: List[int]
    movies: List[Movie]
