"""Configuration management for fitness_connect."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _get_int_env(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


class Config:
    """Application configuration."""

    # Base paths
    BASE_DIR = Path(__file__).parent.parent
    DATA_DIR = BASE_DIR / "data"
    LOGS_DIR = BASE_DIR / "logs"
    DOWNLOADS_DIR = BASE_DIR / "downloads"

    # Persisted cookie stores, one file per session identifier
    SESSION_DIR = Path(os.environ.get("FITNESS_SESSION_DIR") or DATA_DIR / "sessions")

    # Database
    DATABASE_PATH = DATA_DIR / "fitness.db"

    # Security
    ENCRYPTION_KEY = os.environ.get("FITNESS_ENCRYPTION_KEY")

    # Logging
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # HTTP
    REQUEST_TIMEOUT = _get_int_env("FITNESS_REQUEST_TIMEOUT", 30)  # seconds
    USER_AGENT = os.environ.get(
        "FITNESS_USER_AGENT",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0 Safari/537.36",
    )

    # SSO endpoints
    SSO_LOGIN_URL = "https://sso.garmin.com/sso/login"
    SSO_SERVICE_URL = "https://connect.garmin.com/post-auth/login"
    SSO_CLIENT_ID = "GarminConnect"

    # Data endpoints
    CONNECT_BASE_URL = "https://connect.garmin.com"

    @classmethod
    def ensure_directories(cls):
        """Ensure all required directories exist."""
        cls.DATA_DIR.mkdir(parents=True, exist_ok=True)
        cls.LOGS_DIR.mkdir(parents=True, exist_ok=True)
        cls.DOWNLOADS_DIR.mkdir(parents=True, exist_ok=True)
        cls.SESSION_DIR.mkdir(parents=True, exist_ok=True)

    def __repr__(self):
        return f"Config(BASE_DIR={self.BASE_DIR}, SESSION_DIR={self.SESSION_DIR})"
