import logging
from collections import OrderedDict
from typing import Callable, Optional

from .auth.store import AuthStore
from .core.config import Settings, settings as default_settings
from .core.events import SessionEvents
from .core.storage import Storage, build_storage_factory
from .favorites.store import FavoritesStore
from .movies.client import TMDBClient
from .movies.store import MovieStore

logger = logging.getLogger(__name__)


class ClientContext:
    """All state owned by one client device"""

    def __init__(self, client_id: str, storage: Storage, client: TMDBClient,
                 settings: Settings = default_settings, client_side: bool = True):
        self.client_id = client_id
        self.storage = storage
        self.events = SessionEvents()
        self.movies = MovieStore(client, dedupe_in_flight=settings.DEDUPE_IN_FLIGHT_REQUESTS)
        self.favorites = FavoritesStore(storage, self.movies, self.events, client_side=client_side)
        self.auth = AuthStore(
            storage,
            self.events,
            client_side=client_side,
            login_delay=settings.LOGIN_DELAY_SECONDS,
            refresh_delay=settings.REFRESH_DELAY_SECONDS,
            max_login_attempts=settings.MAX_LOGIN_ATTEMPTS,
            token_ttl=settings.TOKEN_TTL_SECONDS
        )

    def initialize(self):
        # Auth first: an invalid stored session also wipes stored favorites
        self.auth.initialize()
        self.favorites.initialize()


class ContextRegistry:
    def __init__(self, client: TMDBClient, storage_factory: Callable[[str], Storage],
                 settings: Settings = default_settings):
        self.client = client
        self.storage_factory = storage_factory
        self.settings = settings
        self.max_contexts = settings.MAX_CLIENT_CONTEXTS
        self.contexts: "OrderedDict[str, ClientContext]" = OrderedDict()

    @classmethod
    def from_settings(cls, settings: Settings = default_settings,
                      client: Optional[TMDBClient] = None) -> "ContextRegistry":
        client = client or TMDBClient(
            api_key=settings.TMDB_API_KEY,
            base_url=settings.TMDB_BASE_URL,
            image_base_url=settings.TMDB_IMAGE_URL,
            language=settings.TMDB_LANGUAGE
        )
        storage_factory = build_storage_factory(settings.STORAGE_BACKEND, settings.STORAGE_DIR_ABSOLUTE)
        return cls(client, storage_factory, settings)

    def get(self, client_id: str) -> ClientContext:
        """Return the client's context, creating it on first use.

        Only the most recently used contexts are kept in memory; an evicted
        client is rebuilt from its durable storage on its next request.
        """
        context = self.contexts.get(client_id)
        if context is not None:
            self.contexts.move_to_end(client_id)
            return context

        logger.info(f"Creating context for client {client_id}")
        context = ClientContext(client_id, self.storage_factory(client_id), self.client, self.settings)
        context.initialize()
        self.contexts[client_id] = context

        while len(self.contexts) > self.max_contexts:
            evicted_id, _ = self.contexts.popitem(last=False)
            logger.info(f"Evicted context for client {evicted_id}")
        return context
