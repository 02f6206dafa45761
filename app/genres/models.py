from pydantic import BaseModel, ConfigDict
from typing import List

class Genre(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str

class GenreList(BaseModel):
    genres: List[Genre]
