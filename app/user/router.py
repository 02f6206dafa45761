from fastapi import APIRouter, Depends, HTTPException

from app.user.models import PreferencesUpdate, UserPreferences
from ..auth.dependencies import require_login
from ..context import ClientContext
from ..dependencies import get_context

router = APIRouter(prefix="/user", tags=["user"])

@router.get("/preferences", response_model=UserPreferences)
async def get_preferences(context: ClientContext = Depends(get_context)):
    """Preferences of the logged in user, or the defaults for visitors"""
    return context.auth.user_preferences

@router.patch("/preferences", response_model=UserPreferences)
async def update_preferences(update: PreferencesUpdate, context: ClientContext = Depends(require_login)):
    preferences = context.auth.update_preferences(**update.model_dump(exclude_none=True))
    if context.auth.error:
        raise HTTPException(status_code=500, detail=context.auth.error)
    return preferences
