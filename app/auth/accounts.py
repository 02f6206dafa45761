# Simulated account directory. Any password of MIN_PASSWORD_LENGTH or more is accepted.
from typing import Optional

from app.user.models import Theme, User, UserPreferences

MIN_PASSWORD_LENGTH = 3

DEFAULT_AVATAR = "https://i.pravatar.cc/150?img=0"

KNOWN_USERS = [
    User(
        id=1,
        name="João Silva",
        email="joao@email.com",
        avatar="https://i.pravatar.cc/150?img=1",
        preferences=UserPreferences(language="pt-BR", theme=Theme.LIGHT, notifications=True)
    ),
    User(
        id=2,
        name="Maria Santos",
        email="maria@email.com",
        avatar="https://i.pravatar.cc/150?img=2",
        preferences=UserPreferences(language="pt-BR", theme=Theme.DARK, notifications=False)
    ),
]


def find_user(email: str) -> Optional[User]:
    return next((user for user in KNOWN_USERS if user.email == email), None)
