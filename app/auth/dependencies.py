from urllib.parse import urlencode

from fastapi import Depends, HTTPException, Request, status

from ..context import ClientContext
from ..dependencies import get_context

LOGIN_PATH = "/login"
LOGIN_REQUIRED_MESSAGE = "You need to be logged in to access this page."


def require_login(request: Request, context: ClientContext = Depends(get_context)) -> ClientContext:
    """Route guard: redirect anonymous clients to the login view with a return target"""
    auth = context.auth
    if not auth.is_authenticated:
        auth.initialize()

    if not auth.is_logged_in:
        target = request.url.path
        if request.url.query:
            target = f"{target}?{request.url.query}"
        query = urlencode({"redirect": target, "message": LOGIN_REQUIRED_MESSAGE})
        raise HTTPException(
            status_code=status.HTTP_307_TEMPORARY_REDIRECT,
            detail=LOGIN_REQUIRED_MESSAGE,
            headers={"Location": f"{LOGIN_PATH}?{query}"}
        )
    return context
