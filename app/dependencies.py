from fastapi import Header, Request

from .context import ClientContext


def get_context(request: Request, x_client_id: str = Header("default")) -> ClientContext:
    """Resolve the state container of the calling client"""
    return request.app.state.registry.get(x_client_id)
