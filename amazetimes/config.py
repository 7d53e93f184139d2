"""Application configuration loaded from environment variables."""

import os
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment."""

    def __init__(self):
        self.database_url: str = os.getenv(
            "DATABASE_URL", "sqlite+aiosqlite:///./amazetimes.db"
        )
        self.auth_api_url: str = os.getenv("AUTH_API_URL", "").rstrip("/")
        self.auth_api_key: str = os.getenv("AUTH_API_KEY", "")
        self.auth_login_url: str = os.getenv("AUTH_LOGIN_URL", "")
        self.session_cookie_name: str = os.getenv(
            "SESSION_COOKIE_NAME", "amazetimes-session"
        )
        self.language_cookie_name: str = os.getenv(
            "LANGUAGE_COOKIE_NAME", "amazetimes-language"
        )
        self.adsense_client_id: str = os.getenv(
            "ADSENSE_CLIENT_ID", "ca-pub-6592137877448044"
        )
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
        self.seed_parties: bool = os.getenv("SEED_PARTIES", "true").lower() in (
            "1", "true", "yes"
        )

    @property
    def adsense_script_url(self) -> str:
        return (
            "https://pagead2.googlesyndication.com/pagead/js/adsbygoogle.js"
            f"?client={self.adsense_client_id}"
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
