import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query

from ..context import ClientContext
from ..dependencies import get_context

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/movies", tags=["movies"])


def _upstream_error(e: Exception, detail: str) -> HTTPException:
    if isinstance(e, httpx.HTTPStatusError):
        return HTTPException(status_code=e.response.status_code, detail=detail)
    return HTTPException(status_code=500, detail=detail)


@router.get("/popular")
async def popular_movies(
    page: int = Query(1, ge=1),
    force_refresh: bool = False,
    context: ClientContext = Depends(get_context)
):
    """Popular movies, served from the client cache when the page is already known"""
    try:
        results = await context.movies.fetch_popular(page, force_refresh)
    except Exception as e:
        raise _upstream_error(e, context.movies.error or str(e))
    return {"page": page, "results": results}


@router.get("/popular/more")
async def more_popular_movies(context: ClientContext = Depends(get_context)):
    try:
        results = await context.movies.load_more_popular()
    except Exception as e:
        raise _upstream_error(e, context.movies.error or str(e))
    return {"page": context.movies.popular_page, "results": results}


@router.get("/now-playing")
async def now_playing_movies(
    page: int = Query(1, ge=1),
    force_refresh: bool = False,
    context: ClientContext = Depends(get_context)
):
    try:
        results = await context.movies.fetch_now_playing(page, force_refresh)
    except Exception as e:
        raise _upstream_error(e, context.movies.error or str(e))
    return {"page": page, "results": results}


@router.get("/search")
async def search_movies_route(
    query: str = Query(..., min_length=1),
    page: int = Query(1, ge=1),
    context: ClientContext = Depends(get_context)
):
    """Search for movies by title"""
    try:
        await context.movies.search_movies(query, page)
    except Exception as e:
        raise _upstream_error(e, context.movies.error or str(e))
    return {
        "query": context.movies.search_query,
        "page": context.movies.search_page,
        "results": context.movies.search_results
    }


@router.delete("/search")
async def clear_search(context: ClientContext = Depends(get_context)):
    context.movies.clear_search()
    return {"status": "success"}


@router.get("/discover")
async def discover_movies(
    genre_id: int = Query(...),
    page: int = Query(1, ge=1),
    context: ClientContext = Depends(get_context)
):
    """Popular movies of one genre. Not cached."""
    try:
        return await context.movies.client.discover_movies_by_genre(genre_id, page)
    except Exception as e:
        logger.error(f"Error discovering movies for genre {genre_id}: {str(e)}")
        raise _upstream_error(e, "Failed to fetch movies from TMDB")


@router.get("/image-url")
async def image_url(path: Optional[str] = None, size: str = "w500", context: ClientContext = Depends(get_context)):
    return {"url": context.movies.client.get_image_url(path, size)}


@router.get("/{movie_id}")
async def movie_details(
    movie_id: int,
    force_refresh: bool = False,
    context: ClientContext = Depends(get_context)
):
    try:
        return await context.movies.fetch_movie_details(movie_id, force_refresh)
    except Exception as e:
        raise _upstream_error(e, context.movies.error or str(e))


@router.get("/{movie_id}/credits")
async def movie_credits(movie_id: int, context: ClientContext = Depends(get_context)):
    """Cast and crew, always fetched fresh"""
    try:
        return await context.movies.client.get_movie_credits(movie_id)
    except Exception as e:
        logger.error(f"Error fetching credits for movie {movie_id}: {str(e)}")
        raise _upstream_error(e, "Failed to fetch credits from TMDB")


@router.get("/{movie_id}/similar")
async def similar_movies(
    movie_id: int,
    page: int = Query(1, ge=1),
    context: ClientContext = Depends(get_context)
):
    try:
        return await context.movies.client.get_similar_movies(movie_id, page)
    except Exception as e:
        logger.error(f"Error fetching movies similar to {movie_id}: {str(e)}")
        raise _upstream_error(e, "Failed to fetch similar movies from TMDB")
