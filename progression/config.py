from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Dict, List


class Settings(BaseSettings):
    # App
    APP_NAME: str = "Character Progression Service"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./progression.db"

    # Mastery defaults (used when a team has no goals row)
    DEFAULT_WINDOW_SIZE: int = 10  # sessions averaged
    DEFAULT_MASTERY_THRESHOLD: int = 85  # overall score, inclusive

    # Ordered practice chain, position 0 is always open
    CHARACTER_CHAIN: List[str] = ["Megan", "David", "Linda"]

    # Embedding host
    CORS_ORIGINS: List[str] = ["https://app.trainedbyai.com"]

    # Polling client
    POLL_INTERVAL_SECONDS: float = 5.0
    REQUEST_TIMEOUT_SECONDS: float = 10.0

    # External session launcher, one entry URL per character
    SESSION_LAUNCH_URLS: Dict[str, str] = {}

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    return Settings()
