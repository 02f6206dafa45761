"""Bookmarked movies for one client.

``favorite_ids`` is the authoritative, ordered list and the only part that is
persisted. ``favorite_movies`` holds denormalized snapshots in the same order;
after a reload it is rebuilt by :meth:`FavoritesStore.load_favorite_movies_details`.
"""
import json
import logging
from datetime import datetime
from typing import List, Optional, Union

from .models import FavoritesBackup
from ..core.errors import CacheConsistencyError
from ..core.events import SESSION_ENDED, SessionEvents
from ..core.storage import FAVORITES_KEY, Storage
from ..movies.models import Movie
from ..movies.store import MovieStore

logger = logging.getLogger(__name__)


class FavoritesStore:
    def __init__(
        self,
        storage: Storage,
        movies: MovieStore,
        events: Optional[SessionEvents] = None,
        client_side: bool = True
    ):
        self.storage = storage
        self.movies = movies
        self.client_side = client_side

        self.favorite_ids: List[int] = []
        self.favorite_movies: List[Movie] = []
        self.is_loading = False
        self.error: Optional[str] = None

        if events is not None:
            events.subscribe(SESSION_ENDED, self.clear_all_favorites)

    @property
    def favorites_count(self) -> int:
        return len(self.favorite_ids)

    @property
    def has_favorites(self) -> bool:
        return len(self.favorite_ids) > 0

    @property
    def favorites_sorted(self) -> List[Movie]:
        """Most recently added first"""
        return list(reversed(self.favorite_movies))

    def is_favorite(self, movie_id: int) -> bool:
        return movie_id in self.favorite_ids

    def initialize(self):
        if not self.client_side:
            return
        try:
            stored = self.storage.get_item(FAVORITES_KEY)
            if stored:
                ids = json.loads(stored)
                self.favorite_ids = list(dict.fromkeys(int(movie_id) for movie_id in ids))
        except Exception as e:
            logger.error(f"Error loading favorites from storage: {str(e)}")
            self.favorite_ids = []

    def persist_favorites(self):
        """Write the id list to durable storage; raises StorageError on failure"""
        if not self.client_side:
            return
        self.storage.set_item(FAVORITES_KEY, json.dumps(self.favorite_ids))

    def add_to_favorites(self, movie: Movie):
        if self.is_favorite(movie.id):
            return

        try:
            self._append_durably(movie)
            self.error = None
        except CacheConsistencyError as e:
            self.error = f"Error adding favorite: {str(e)}"
            logger.error(str(e))

    def _append_durably(self, movie: Movie):
        # ids and snapshots must never diverge, so both appends are undone together
        self.favorite_ids.append(movie.id)
        self.favorite_movies.append(movie)
        try:
            self.persist_favorites()
        except Exception as e:
            self.favorite_ids = [movie_id for movie_id in self.favorite_ids if movie_id != movie.id]
            self.favorite_movies = [m for m in self.favorite_movies if m.id != movie.id]
            raise CacheConsistencyError(f"Rolled back favorite {movie.id}: {str(e)}") from e

    def remove_from_favorites(self, movie_id: int):
        if not self.is_favorite(movie_id):
            return

        self.favorite_ids = [favorite_id for favorite_id in self.favorite_ids if favorite_id != movie_id]
        self.favorite_movies = [movie for movie in self.favorite_movies if movie.id != movie_id]

        try:
            self.persist_favorites()
            self.error = None
        except Exception as e:
            self.error = f"Error removing favorite: {str(e)}"
            logger.error(f"Error persisting removal of favorite {movie_id}: {str(e)}")

    def toggle_favorite(self, movie: Movie):
        if self.is_favorite(movie.id):
            self.remove_from_favorites(movie.id)
        else:
            self.add_to_favorites(movie)

    async def load_favorite_movies_details(self) -> List[Movie]:
        """Resolve every bookmarked id, cache first; ids that fail are skipped"""
        if not self.favorite_ids:
            return self.favorite_movies

        self.is_loading = True
        self.error = None

        try:
            favorite_movies: List[Movie] = []

            for movie_id in list(self.favorite_ids):
                try:
                    movie = self.movies.get_movie_by_id(movie_id)
                    if movie is None:
                        movie = await self.movies.fetch_movie_details(movie_id)
                    if movie is not None:
                        favorite_movies.append(movie)
                except Exception as e:
                    logger.warning(f"Could not load details for movie {movie_id}: {str(e)}")

            self.favorite_movies = favorite_movies
            return favorite_movies
        finally:
            self.is_loading = False

    def clear_all_favorites(self):
        self.favorite_ids = []
        self.favorite_movies = []
        try:
            self.persist_favorites()
        except Exception as e:
            self.error = f"Error saving favorites: {str(e)}"
            logger.error(f"Error persisting cleared favorites: {str(e)}")

    def clear_error(self):
        self.error = None

    def export_favorites(self) -> FavoritesBackup:
        # Snapshots may still lag the ids until details are loaded
        return FavoritesBackup.model_construct(
            ids=list(self.favorite_ids),
            movies=list(self.favorite_movies),
            export_date=datetime.now()
        )

    def import_favorites(self, backup: Union[FavoritesBackup, dict]):
        """Replace favorites wholesale; persistence failures propagate and restore the previous set"""
        if isinstance(backup, FavoritesBackup):
            backup = backup.model_dump()
        backup = FavoritesBackup.model_validate(backup)
        previous_ids, previous_movies = self.favorite_ids, self.favorite_movies
        try:
            self.favorite_ids = list(backup.ids)
            self.favorite_movies = list(backup.movies)
            self.persist_favorites()
            self.error = None
        except Exception as e:
            self.favorite_ids, self.favorite_movies = previous_ids, previous_movies
            self.error = f"Error importing favorites: {str(e)}"
            logger.error(f"Error importing favorites: {str(e)}")
            raise
