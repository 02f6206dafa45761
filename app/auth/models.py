from datetime import datetime
from pydantic import BaseModel
from typing import Optional

from app.user.models import User

class LoginRequest(BaseModel):
    email: str
    password: str

class SessionResponse(BaseModel):
    is_logged_in: bool
    state: str
    user: Optional[User] = None
    token: Optional[str] = None
    display_name: str
    avatar: str
    login_attempts: int
    last_login_at: Optional[datetime] = None
    error: Optional[str] = None
