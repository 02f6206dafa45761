from fastapi import APIRouter, Depends, HTTPException

from .models import FavoritesBackup, FavoritesSummary
from ..auth.dependencies import require_login
from ..context import ClientContext
from ..movies.models import Movie

router = APIRouter(prefix="/favorites", tags=["favorites"])


def _summary(context: ClientContext) -> FavoritesSummary:
    favorites = context.favorites
    return FavoritesSummary(
        count=favorites.favorites_count,
        ids=favorites.favorite_ids,
        movies=favorites.favorite_movies
    )


@router.get("/", response_model=FavoritesSummary)
async def list_favorites(context: ClientContext = Depends(require_login)):
    return _summary(context)


@router.post("/", response_model=FavoritesSummary)
async def add_favorite(movie: Movie, context: ClientContext = Depends(require_login)):
    context.favorites.add_to_favorites(movie)
    if not context.favorites.is_favorite(movie.id):
        raise HTTPException(status_code=500, detail=context.favorites.error)
    return _summary(context)


@router.delete("/{movie_id}", response_model=FavoritesSummary)
async def remove_favorite(movie_id: int, context: ClientContext = Depends(require_login)):
    context.favorites.remove_from_favorites(movie_id)
    return _summary(context)


@router.post("/toggle")
async def toggle_favorite(movie: Movie, context: ClientContext = Depends(require_login)):
    context.favorites.toggle_favorite(movie)
    return {
        "movie_id": movie.id,
        "is_favorite": context.favorites.is_favorite(movie.id),
        "error": context.favorites.error
    }


@router.post("/load", response_model=FavoritesSummary)
async def load_favorites(context: ClientContext = Depends(require_login)):
    """Resolve bookmarked ids into full movie records, skipping any that fail"""
    await context.favorites.load_favorite_movies_details()
    return _summary(context)


@router.delete("/", response_model=FavoritesSummary)
async def clear_favorites(context: ClientContext = Depends(require_login)):
    context.favorites.clear_all_favorites()
    return _summary(context)


@router.get("/export")
async def export_favorites(context: ClientContext = Depends(require_login)):
    return context.favorites.export_favorites()


@router.post("/import", response_model=FavoritesSummary)
async def import_favorites(backup: FavoritesBackup, context: ClientContext = Depends(require_login)):
    try:
        context.favorites.import_favorites(backup)
    except Exception as e:
        raise HTTPException(status_code=500, detail=context.favorites.error or str(e))
    return _summary(context)
