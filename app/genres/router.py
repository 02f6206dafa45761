import httpx
from fastapi import APIRouter, Depends, HTTPException

from ..context import ClientContext
from ..dependencies import get_context

router = APIRouter(prefix="/genres", tags=["genres"])

@router.get("/")
async def get_genres(context: ClientContext = Depends(get_context)):
    """Fetch all available genres from TMDB"""
    try:
        genre_list = await context.movies.client.get_genres()
        return {"genres": genre_list.genres}
    except httpx.HTTPStatusError as e:
        raise HTTPException(status_code=e.response.status_code,
                            detail="Failed to fetch genres from TMDB")
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
