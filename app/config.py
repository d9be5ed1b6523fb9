import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _resolve_database_url() -> str:
    database_url = os.getenv("DATABASE_URL")
    if database_url:
        return database_url

    environment = os.getenv("ENVIRONMENT", "").strip().lower()
    if environment == "development":
        return "postgresql+psycopg://localhost:5434/expiry_tracker"

    raise ValueError(
        "DATABASE_URL is not set. Set DATABASE_URL for non-development "
        "environments or set ENVIRONMENT=development for local defaults."
    )


@dataclass(frozen=True)
class Settings:
    database_url: str = _resolve_database_url()
    db_pool_size: int = int(os.getenv("DB_POOL_SIZE", "5"))
    db_max_overflow: int = int(os.getenv("DB_MAX_OVERFLOW", "10"))
    db_pool_timeout: int = int(os.getenv("DB_POOL_TIMEOUT", "30"))
    db_pool_recycle: int = int(os.getenv("DB_POOL_RECYCLE", "1800"))

    # OTP auth provider (Supabase GoTrue API)
    auth_provider_url: str = os.getenv("SUPABASE_URL", "")
    auth_provider_key: str = os.getenv("SUPABASE_ANON_KEY", "")
    session_ttl_seconds: int = int(os.getenv("SESSION_TTL_SECONDS", "604800"))

    # Calendar used for "today" when classifying expiry dates
    app_timezone: str = os.getenv("APP_TIMEZONE", "UTC")

    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    log_format: str = os.getenv("LOG_FORMAT", "plain").lower()

    # Branding
    brand_name: str = os.getenv("BRAND_NAME", "ExpiryTracker")
    brand_tagline: str = os.getenv(
        "BRAND_TAGLINE", "Track your important document expiry dates"
    )


settings = Settings()
