"""Shared fakes for the unit tests: a scripted TMDB endpoint and storage doubles."""
import asyncio
from typing import Callable, Dict, List, Union

import httpx

from app.core.errors import StorageError
from app.core.storage import MemoryStorage
from app.movies.client import TMDBClient

BASE_URL = "https://api.themoviedb.org/3"
IMAGE_URL = "https://image.tmdb.org/t/p"
API_KEY = "test-api-key"


def movie_payload(movie_id: int, **extra) -> dict:
    payload = {
        "id": movie_id,
        "title": f"Movie {movie_id}",
        "overview": "",
        "poster_path": f"/poster-{movie_id}.jpg",
        "backdrop_path": None,
        "release_date": "2024-01-01",
        "vote_average": 7.5,
        "vote_count": 100,
        "popularity": 50.0,
        "genre_ids": [18],
        "adult": False,
        "original_language": "en",
        "original_title": f"Movie {movie_id}",
        "video": False
    }
    payload.update(extra)
    return payload


def details_payload(movie_id: int, **extra) -> dict:
    payload = movie_payload(movie_id)
    payload.pop("genre_ids")
    payload.update({
        "runtime": 120,
        "genres": [{"id": 18, "name": "Drama"}],
        "budget": 1000,
        "revenue": 5000,
        "status": "Released",
        "tagline": "A tagline"
    })
    payload.update(extra)
    return payload


def paged_payload(ids: List[int], page: int = 1) -> dict:
    return {
        "page": page,
        "results": [movie_payload(movie_id) for movie_id in ids],
        "total_pages": 10,
        "total_results": 200
    }


Route = Union[dict, int, Callable[[httpx.Request], Union[dict, int, httpx.Response]]]


class FakeTMDB:
    """Answers requests by path; each route is a payload, a status code or a callable"""

    def __init__(self):
        self.routes: Dict[str, Route] = {}
        self.requests: List[httpx.Request] = []

    def add(self, path: str, route: Route):
        self.routes[path] = route

    def calls(self, path: str) -> int:
        return sum(1 for request in self.requests if self._path(request) == path)

    @staticmethod
    def _path(request: httpx.Request) -> str:
        return request.url.path[len("/3"):]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        # Yield once so overlapping calls really overlap
        await asyncio.sleep(0)
        self.requests.append(request)

        route = self.routes.get(self._path(request))
        if route is None:
            return httpx.Response(404, json={"status_message": "not found"})
        if callable(route):
            route = route(request)
        if isinstance(route, httpx.Response):
            return route
        if isinstance(route, int):
            return httpx.Response(route, json={"status_message": "error"})
        return httpx.Response(200, json=route)

    def client(self) -> TMDBClient:
        return TMDBClient(
            api_key=API_KEY,
            base_url=BASE_URL,
            image_base_url=IMAGE_URL,
            language="pt-BR",
            transport=httpx.MockTransport(self.handler)
        )


class FailingStorage(MemoryStorage):
    """Memory storage whose writes can be switched to fail"""

    def __init__(self, fail_writes: bool = True):
        super().__init__()
        self.fail_writes = fail_writes

    def set_item(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageError(f"disk full while writing {key}")
        super().set_item(key, value)
