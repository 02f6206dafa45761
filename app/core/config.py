from pydantic_settings import BaseSettings
from dotenv import load_dotenv
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent.parent.parent

load_dotenv(Path(ROOT_DIR) / '.env')

class Settings(BaseSettings):
    TMDB_BASE_URL: str = "https://api.themoviedb.org/3"
    TMDB_IMAGE_URL: str = "https://image.tmdb.org/t/p"
    TMDB_API_KEY: str = ""
    TMDB_LANGUAGE: str = "pt-BR"

    STORAGE_BACKEND: str = "file"  # memory | file | firestore
    STORAGE_DIR: str = ".storage"
    FIREBASE_CREDS_PATH: str = ""

    LOGIN_DELAY_SECONDS: float = 1.0
    REFRESH_DELAY_SECONDS: float = 0.5
    MAX_LOGIN_ATTEMPTS: int = 5
    TOKEN_TTL_SECONDS: int = 24 * 60 * 60

    DEDUPE_IN_FLIGHT_REQUESTS: bool = False
    MAX_CLIENT_CONTEXTS: int = 1000

    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "app.log"

    @property
    def FIREBASE_CREDS_PATH_ABSOLUTE(self) -> Path:
        """Returns absolute path to Firebase credentials file"""
        return ROOT_DIR / self.FIREBASE_CREDS_PATH

    @property
    def STORAGE_DIR_ABSOLUTE(self) -> Path:
        return ROOT_DIR / self.STORAGE_DIR

    class Config:
        env_file = ".env"
        extra = "ignore"

settings = Settings()
