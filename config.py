from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # Control Plane Configuration
    ADMIN_API_URL: str
    REQUEST_TIMEOUT: int = 15

    # Release Source
    GITHUB_REPO: str
    GITHUB_TOKEN: str = ""  # Empty for public repos (lower rate limits)
    GITHUB_API_URL: str = "https://api.github.com"

    # Installation Info
    SITE_URL: str = "http://localhost"
    THEME_SLUG: str = "barebones"
    THEME_VERSION: str = "1.0.0"
    PLATFORM_VERSION: str = "6.5"
    ACTIVE_PLUGINS: List[str] = []

    # Database
    DATABASE_URL: str = "sqlite:///./theme_manager.db"

    # Schedule Configuration
    REGISTRATION_RETRY_HOURS: int = 12
    RELEASE_CACHE_HOURS: int = 6
    HEALTH_REPORT_INTERVAL_HOURS: int = 24
    HEALTH_REPORT_FIRST_RUN_DELAY_SECONDS: int = 30

    # Pending registration notice
    PENDING_NOTICE_HOURS: int = 24

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    class Config:
        env_file = ".env"

    @property
    def admin_api_root(self) -> str:
        """Base URL with exactly one trailing slash."""
        return self.ADMIN_API_URL.rstrip("/") + "/"

@lru_cache()
def get_settings() -> Settings:
    return Settings()
