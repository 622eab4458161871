import os
from datetime import timedelta

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _database_url(default: str) -> str:
    url = os.environ.get("DATABASE_URL", default)
    # Heroku/Render style URLs are rejected by SQLAlchemy 1.4+
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    return url


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-change-me-0123456789abcdef")
    SQLALCHEMY_DATABASE_URI = _database_url("sqlite:///khandeshwar.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_SORT_KEYS = False

    # JWT Configuration
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", SECRET_KEY)
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=int(os.environ.get("JWT_ACCESS_TOKEN_MINUTES", "720")))
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(days=int(os.environ.get("JWT_REFRESH_TOKEN_DAYS", "7")))

    # Flask-Limiter; failed logins per client address
    RATELIMIT_STORAGE_URI = os.environ.get("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_HEADERS_ENABLED = True
    LOGIN_RATE_LIMIT = os.environ.get("LOGIN_RATE_LIMIT", "5 per 15 minutes")

    API_PREFIX = "/api"
    SERVICE_NAME = "khandeshwar-backend"

    # Reports
    TEMPLE_NAME = os.environ.get("TEMPLE_NAME", "Shree Kshetra Khandeshar Devasthan Kusalamb")
    PDF_UNICODE_FONT = os.environ.get("PDF_UNICODE_FONT")  # path to a Devanagari-capable .ttf

    # Secrets that must come from the environment
    REQUIRED_ENV = ()


class DevelopmentConfig(Config):
    DEBUG = True


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SECRET_KEY = "testing-secret-key-0123456789abcdef"
    JWT_SECRET_KEY = "testing-jwt-secret-key-0123456789abcdef"
    PDF_UNICODE_FONT = None


class ProductionConfig(Config):
    REQUIRED_ENV = ("SECRET_KEY", "DATABASE_URL")


def check_required_env(config) -> None:
    """Raise ValueError when a config class declares env vars that are missing."""
    missing = [name for name in getattr(config, "REQUIRED_ENV", ()) if not os.environ.get(name)]
    if missing:
        raise ValueError(f"{', '.join(missing)} environment variable must be set")
