"""Simulated authentication for one client.

Login checks the in-memory account directory after an artificial delay and
issues an unsigned JWT-shaped token valid for 24 hours. After
``max_login_attempts`` consecutive failures every further login is refused
until the process restarts. Logout announces ``session-ended`` so that
favorites are dropped along with the session.
"""
import asyncio
import logging
from datetime import datetime
from enum import Enum
from typing import Optional

from .accounts import DEFAULT_AVATAR, MIN_PASSWORD_LENGTH, find_user
from .token import TOKEN_TTL_SECONDS, generate_token, is_valid_token
from app.user.models import User, UserPreferences
from ..core.errors import CredentialsError
from ..core.events import SESSION_ENDED, SessionEvents
from ..core.storage import AUTH_TOKEN_KEY, AUTH_USER_KEY, FAVORITES_KEY, LAST_LOGIN_KEY, Storage

logger = logging.getLogger(__name__)

MAX_LOGIN_ATTEMPTS = 5
LOCKED_OUT_MESSAGE = "Too many login attempts. Please try again later."
INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


class AuthState(str, Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    LOCKED_OUT = "locked_out"


class AuthStore:
    def __init__(
        self,
        storage: Storage,
        events: SessionEvents,
        client_side: bool = True,
        login_delay: float = 1.0,
        refresh_delay: float = 0.5,
        max_login_attempts: int = MAX_LOGIN_ATTEMPTS,
        token_ttl: int = TOKEN_TTL_SECONDS
    ):
        self.storage = storage
        self.events = events
        self.client_side = client_side
        self.login_delay = login_delay
        self.refresh_delay = refresh_delay
        self.max_login_attempts = max_login_attempts
        self.token_ttl = token_ttl

        self.user: Optional[User] = None
        self.token: Optional[str] = None
        self.is_authenticated = False
        self.is_loading = False
        self.error: Optional[str] = None
        self.login_attempts = 0
        self.last_login_at: Optional[datetime] = None

    # Getters

    @property
    def current_user(self) -> Optional[User]:
        return self.user

    @property
    def is_logged_in(self) -> bool:
        return self.is_authenticated and bool(self.token)

    @property
    def display_name(self) -> str:
        return self.user.name if self.user else "Visitor"

    @property
    def user_avatar(self) -> str:
        return (self.user.avatar if self.user else None) or DEFAULT_AVATAR

    @property
    def user_preferences(self) -> UserPreferences:
        return self.user.preferences if self.user else UserPreferences()

    @property
    def can_attempt_login(self) -> bool:
        return self.login_attempts < self.max_login_attempts

    @property
    def has_valid_token(self) -> bool:
        return is_valid_token(self.token)

    @property
    def state(self) -> AuthState:
        if self.is_logged_in:
            return AuthState.AUTHENTICATED
        if self.is_loading:
            return AuthState.AUTHENTICATING
        if not self.can_attempt_login:
            return AuthState.LOCKED_OUT
        return AuthState.ANONYMOUS

    # Actions

    def initialize(self):
        """Restore a stored session if its token has not expired, otherwise log out"""
        if not self.client_side:
            return

        try:
            token = self.storage.get_item(AUTH_TOKEN_KEY)
            user_data = self.storage.get_item(AUTH_USER_KEY)

            if token and user_data and self.is_valid_token(token):
                self.token = token
                self.user = User.model_validate_json(user_data)
                self.is_authenticated = True
                last_login = self.storage.get_item(LAST_LOGIN_KEY)
                self.last_login_at = datetime.fromisoformat(last_login) if last_login else datetime.now()
                logger.info(f"Restored session for {self.user.email}")
            else:
                self.logout()
        except Exception as e:
            logger.error(f"Error initializing auth: {str(e)}")
            self.logout()

    async def login(self, email: str, password: str) -> bool:
        if not self.can_attempt_login:
            self.error = LOCKED_OUT_MESSAGE
            logger.info(f"Login refused for {email}: attempt limit reached")
            return False

        self.is_loading = True
        self.error = None
        self.login_attempts += 1

        try:
            await asyncio.sleep(self.login_delay)

            user = find_user(email)
            if user is None or len(password) < MIN_PASSWORD_LENGTH:
                raise CredentialsError(INVALID_CREDENTIALS_MESSAGE)

            self.user = user.model_copy(deep=True)
            self.token = generate_token(user, self.token_ttl)
            self.is_authenticated = True
            self.last_login_at = datetime.now()
            self.login_attempts = 0

            self.persist_auth()
            logger.info(f"User {user.email} logged in")
            return True

        except CredentialsError as e:
            self.error = str(e)
            logger.info(f"Login rejected for {email} (attempt {self.login_attempts})")
            return False
        except Exception as e:
            self._clear_session()
            self.error = f"Login failed: {str(e)}"
            logger.error(f"Login failed for {email}: {str(e)}")
            return False
        finally:
            self.is_loading = False

    def logout(self):
        self._clear_session()
        self.error = None

        if self.client_side:
            for key in (AUTH_TOKEN_KEY, AUTH_USER_KEY, LAST_LOGIN_KEY):
                self._remove_key(key)

        # Favorites clear their state first; only then is their key dropped
        self.events.emit(SESSION_ENDED)

        if self.client_side:
            self._remove_key(FAVORITES_KEY)

    async def refresh_token(self) -> bool:
        """Reissue the token without re-checking credentials"""
        if self.user is None:
            return False

        self.is_loading = True
        try:
            await asyncio.sleep(self.refresh_delay)
            self.token = generate_token(self.user, self.token_ttl)
            self.persist_auth()
            return True
        except Exception as e:
            logger.error(f"Error refreshing session: {str(e)}")
            self.logout()
            self.error = f"Error refreshing session: {str(e)}"
            return False
        finally:
            self.is_loading = False

    def update_preferences(self, **changes) -> Optional[UserPreferences]:
        if self.user is None:
            return None

        changes = {key: value for key, value in changes.items() if value is not None}
        try:
            preferences = UserPreferences.model_validate({**self.user.preferences.model_dump(), **changes})
            self.user = self.user.model_copy(update={"preferences": preferences})
            self.persist_auth()
            self.error = None
        except Exception as e:
            self.error = f"Error saving preferences: {str(e)}"
            logger.error(f"Error saving preferences: {str(e)}")
        return self.user.preferences

    def is_valid_token(self, token: Optional[str]) -> bool:
        return is_valid_token(token)

    def persist_auth(self):
        if self.client_side and self.user and self.token:
            self.storage.set_item(AUTH_TOKEN_KEY, self.token)
            self.storage.set_item(AUTH_USER_KEY, self.user.model_dump_json())
            self.storage.set_item(LAST_LOGIN_KEY, self.last_login_at.isoformat() if self.last_login_at else "")

    def clear_error(self):
        self.error = None

    def reset_login_attempts(self):
        self.login_attempts = 0

    def _clear_session(self):
        self.user = None
        self.token = None
        self.is_authenticated = False
        self.last_login_at = None

    def _remove_key(self, key: str):
        try:
            self.storage.remove_item(key)
        except Exception as e:
            logger.error(f"Error removing {key} from storage: {str(e)}")
