from enum import Enum
from pydantic import BaseModel
from typing import Optional

class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"

class UserPreferences(BaseModel):
    language: str = "pt-BR"
    theme: Theme = Theme.LIGHT
    notifications: bool = True

class User(BaseModel):
    id: int
    name: str
    email: str
    avatar: Optional[str] = None
    preferences: UserPreferences = UserPreferences()

class PreferencesUpdate(BaseModel):
    language: Optional[str] = None
    theme: Optional[Theme] = None
    notifications: Optional[bool] = None
