from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .auth.router import router as auth_router
from .context import ContextRegistry
from .core.config import settings
from .core.log import configure_logging
from .favorites.router import router as favorites_router
from .genres.router import router as genres_router
from .movies.router import router as movies_router
from .user.router import router as user_router


def create_app(registry: Optional[ContextRegistry] = None) -> FastAPI:
    app = FastAPI()
    app.state.registry = registry or ContextRegistry.from_settings(settings)

    @app.get("/")
    def read_root():
        return {"message": "Welcome to the Movie Portal API"}

    app.include_router(movies_router)
    app.include_router(genres_router)
    app.include_router(auth_router)
    app.include_router(user_router)
    app.include_router(favorites_router)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return app


configure_logging(settings.LOG_LEVEL, settings.LOG_FILE)
app = create_app()
