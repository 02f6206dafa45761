from fastapi import APIRouter, Depends, HTTPException

from .models import LoginRequest, SessionResponse
from .store import LOCKED_OUT_MESSAGE, AuthStore
from ..context import ClientContext
from ..dependencies import get_context

router = APIRouter(prefix="/auth", tags=["auth"])


def session_response(auth: AuthStore) -> SessionResponse:
    return SessionResponse(
        is_logged_in=auth.is_logged_in,
        state=auth.state.value,
        user=auth.current_user,
        token=auth.token,
        display_name=auth.display_name,
        avatar=auth.user_avatar,
        login_attempts=auth.login_attempts,
        last_login_at=auth.last_login_at,
        error=auth.error
    )


@router.post("/login", response_model=SessionResponse)
async def login(credentials: LoginRequest, context: ClientContext = Depends(get_context)):
    if not await context.auth.login(credentials.email, credentials.password):
        status_code = 429 if context.auth.error == LOCKED_OUT_MESSAGE else 401
        raise HTTPException(status_code=status_code, detail=context.auth.error)
    return session_response(context.auth)


@router.post("/logout", response_model=SessionResponse)
async def logout(context: ClientContext = Depends(get_context)):
    context.auth.logout()
    return session_response(context.auth)


@router.post("/refresh", response_model=SessionResponse)
async def refresh(context: ClientContext = Depends(get_context)):
    """Reissue the session token with a fresh expiry"""
    if not await context.auth.refresh_token():
        raise HTTPException(status_code=401, detail=context.auth.error or "Not logged in")
    return session_response(context.auth)


@router.get("/me", response_model=SessionResponse)
async def me(context: ClientContext = Depends(get_context)):
    return session_response(context.auth)
