"""Client-side cache of TMDB movie lists and per-movie details.

Each cache slot (popular, now playing, search, one entry per movie detail)
moves independently between ``empty``, ``loading``, ``populated`` and
``error``. Fetches short-circuit on a cache hit unless ``force_refresh`` is
set. Failed fetches leave cached data untouched, record a message in the
shared ``error`` field and re-raise to the caller.

Concurrent identical calls are not merged unless the store is built with
``dedupe_in_flight=True``, in which case they await one shared request.
"""
import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Hashable, List, Optional

from .client import TMDBClient
from .models import Movie, MovieDetails

logger = logging.getLogger(__name__)

PAGE_SIZE = 20


class SlotState(str, Enum):
    EMPTY = "empty"
    LOADING = "loading"
    POPULATED = "populated"
    ERROR = "error"


class CacheSlot(str, Enum):
    POPULAR = "popular"
    NOW_PLAYING = "now_playing"
    SEARCH = "search"


class InFlightRequests:
    """Lets concurrent identical calls await one shared task"""

    def __init__(self):
        self._pending: Dict[Hashable, asyncio.Future] = {}

    def __len__(self) -> int:
        return len(self._pending)

    async def run(self, key: Hashable, factory: Callable[[], Awaitable[Any]]) -> Any:
        pending = self._pending.get(key)
        if pending is not None:
            return await asyncio.shield(pending)

        task = asyncio.ensure_future(factory())
        self._pending[key] = task
        try:
            return await task
        finally:
            self._pending.pop(key, None)


def merge_unique(existing: List[Movie], incoming: List[Movie]) -> List[Movie]:
    """Append incoming movies whose id is not cached yet, keeping server order"""
    seen = {movie.id for movie in existing}
    merged = list(existing)
    for movie in incoming:
        if movie.id not in seen:
            seen.add(movie.id)
            merged.append(movie)
    return merged


def paginate(movies: List[Movie], page: int, page_size: int = PAGE_SIZE) -> List[Movie]:
    start = max(page - 1, 0) * page_size
    return movies[start:start + page_size]


class MovieStore:
    def __init__(self, client: TMDBClient, dedupe_in_flight: bool = False):
        self.client = client
        self._in_flight = InFlightRequests() if dedupe_in_flight else None
        self._reset_state()

    def _reset_state(self):
        self.popular_movies: List[Movie] = []
        self.now_playing_movies: List[Movie] = []
        self.movie_details: Dict[int, MovieDetails] = {}
        self.search_results: List[Movie] = []

        self.is_loading_popular = False
        self.is_loading_now_playing = False
        self.is_loading_details = False
        self.is_searching = False

        self.popular_page = 0
        self.now_playing_page = 0
        self.search_page = 0
        self.search_query = ""

        self.error: Optional[str] = None

        self._failed_slots: set = set()
        self._loading_details: set = set()
        self._failed_details: set = set()

    # Getters

    @property
    def has_popular_movies(self) -> bool:
        return len(self.popular_movies) > 0

    @property
    def has_now_playing_movies(self) -> bool:
        return len(self.now_playing_movies) > 0

    @property
    def is_loading(self) -> bool:
        return (self.is_loading_popular or self.is_loading_now_playing
                or self.is_loading_details or self.is_searching)

    def get_movie_by_id(self, movie_id: int) -> Optional[MovieDetails]:
        return self.movie_details.get(movie_id)

    def is_movie_loaded(self, movie_id: int) -> bool:
        return movie_id in self.movie_details

    def popular_movies_paginated(self, page: int) -> List[Movie]:
        return paginate(self.popular_movies, page)

    def now_playing_movies_paginated(self, page: int) -> List[Movie]:
        return paginate(self.now_playing_movies, page)

    def slot_state(self, slot: CacheSlot) -> SlotState:
        slot = CacheSlot(slot)
        loading, movies = {
            CacheSlot.POPULAR: (self.is_loading_popular, self.popular_movies),
            CacheSlot.NOW_PLAYING: (self.is_loading_now_playing, self.now_playing_movies),
            CacheSlot.SEARCH: (self.is_searching, self.search_results),
        }[slot]
        if loading:
            return SlotState.LOADING
        if slot in self._failed_slots:
            return SlotState.ERROR
        return SlotState.POPULATED if movies else SlotState.EMPTY

    def detail_state(self, movie_id: int) -> SlotState:
        if movie_id in self._loading_details:
            return SlotState.LOADING
        if movie_id in self._failed_details:
            return SlotState.ERROR
        return SlotState.POPULATED if movie_id in self.movie_details else SlotState.EMPTY

    # Actions

    async def _dedupe(self, key: Hashable, factory: Callable[[], Awaitable[Any]]) -> Any:
        if self._in_flight is None:
            return await factory()
        return await self._in_flight.run(key, factory)

    async def fetch_popular(self, page: int = 1, force_refresh: bool = False) -> List[Movie]:
        if not force_refresh and self.popular_page >= page and self.has_popular_movies:
            return self.popular_movies_paginated(page)
        return await self._dedupe(("popular", page), lambda: self._fetch_popular(page))

    async def _fetch_popular(self, page: int) -> List[Movie]:
        self.is_loading_popular = True
        self.error = None

        try:
            response = await self.client.get_popular_movies(page)

            if page == 1:
                self.popular_movies = list(response.results)
            else:
                self.popular_movies = merge_unique(self.popular_movies, response.results)

            self.popular_page = max(self.popular_page, page)
            self._failed_slots.discard(CacheSlot.POPULAR)
            return response.results

        except Exception as e:
            self.error = f"Error fetching popular movies: {str(e)}"
            self._failed_slots.add(CacheSlot.POPULAR)
            logger.error(f"Error fetching popular movies page {page}: {str(e)}")
            raise
        finally:
            self.is_loading_popular = False

    async def load_more_popular(self) -> List[Movie]:
        """Fetch the page after the highest one cached"""
        return await self.fetch_popular(self.popular_page + 1)

    async def fetch_now_playing(self, page: int = 1, force_refresh: bool = False) -> List[Movie]:
        if not force_refresh and self.now_playing_page >= page and self.has_now_playing_movies:
            return self.now_playing_movies_paginated(page)
        return await self._dedupe(("now_playing", page), lambda: self._fetch_now_playing(page))

    async def _fetch_now_playing(self, page: int) -> List[Movie]:
        self.is_loading_now_playing = True
        self.error = None

        try:
            response = await self.client.get_now_playing_movies(page)

            if page == 1:
                self.now_playing_movies = list(response.results)
            else:
                self.now_playing_movies = merge_unique(self.now_playing_movies, response.results)

            self.now_playing_page = max(self.now_playing_page, page)
            self._failed_slots.discard(CacheSlot.NOW_PLAYING)
            return response.results

        except Exception as e:
            self.error = f"Error fetching now playing movies: {str(e)}"
            self._failed_slots.add(CacheSlot.NOW_PLAYING)
            logger.error(f"Error fetching now playing movies page {page}: {str(e)}")
            raise
        finally:
            self.is_loading_now_playing = False

    async def fetch_movie_details(self, movie_id: int, force_refresh: bool = False) -> MovieDetails:
        if not force_refresh and self.is_movie_loaded(movie_id):
            return self.movie_details[movie_id]
        return await self._dedupe(("details", movie_id), lambda: self._fetch_movie_details(movie_id))

    async def _fetch_movie_details(self, movie_id: int) -> MovieDetails:
        self.is_loading_details = True
        self._loading_details.add(movie_id)
        self.error = None

        try:
            details = await self.client.get_movie_details(movie_id)
            self.movie_details[movie_id] = details
            self._failed_details.discard(movie_id)
            return details

        except Exception as e:
            self.error = f"Error fetching movie details: {str(e)}"
            self._failed_details.add(movie_id)
            logger.error(f"Error fetching details for movie {movie_id}: {str(e)}")
            raise
        finally:
            self._loading_details.discard(movie_id)
            self.is_loading_details = bool(self._loading_details)

    async def search_movies(self, query: str, page: int = 1) -> List[Movie]:
        # A new query invalidates pagination of the previous one
        if query != self.search_query:
            self.search_results = []
            self.search_page = 0
        return await self._dedupe(("search", query, page), lambda: self._search_movies(query, page))

    async def _search_movies(self, query: str, page: int) -> List[Movie]:
        self.is_searching = True
        self.error = None
        self.search_query = query

        try:
            response = await self.client.search_movies(query, page)

            if page == 1:
                self.search_results = list(response.results)
            else:
                self.search_results = merge_unique(self.search_results, response.results)

            self.search_page = max(self.search_page, page)
            self._failed_slots.discard(CacheSlot.SEARCH)
            return response.results

        except Exception as e:
            self.error = f"Search failed: {str(e)}"
            self._failed_slots.add(CacheSlot.SEARCH)
            logger.error(f"Error searching movies for '{query}': {str(e)}")
            raise
        finally:
            self.is_searching = False

    def clear_search(self):
        self.search_results = []
        self.search_query = ""
        self.search_page = 0
        self._failed_slots.discard(CacheSlot.SEARCH)

    def reset(self):
        self._reset_state()

    def clear_error(self):
        self.error = None
