# medstock/core/config.py

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal

class Settings(BaseSettings):
    # App
    ENV: str = "development"
    DEBUG: bool = False

    # Security (signs object upload URLs)
    SECRET_KEY: str

    # Database
    DATABASE_URL: str

    # Email transport
    EMAIL_TRANSPORT: Literal["auto", "smtp", "relay", "log"] = "auto"

    SMTP_HOST: str | None = None
    SMTP_PORT: int = 587
    SMTP_USERNAME: str | None = None
    SMTP_PASSWORD: str | None = None
    SMTP_USE_TLS: bool = True
    SMTP_USE_SSL: bool = False

    # Email (Resend-compatible relay)
    RESEND_API_KEY: str | None = None
    RESEND_API_URL: str = "https://api.resend.com/emails"

    EMAIL_FROM: str = "inventaris@example.org"
    EMAIL_FROM_NAME: str = "Medische Inventaris"

    # Rate limiting for email and upload endpoints
    RATE_LIMIT_ENABLED: bool = True

    # Read cache (seconds)
    CACHE_TTL_POSTS: int = 5 * 60
    CACHE_TTL_CABINETS: int = 10 * 60
    CACHE_TTL_CONTACTS: int = 10 * 60
    CACHE_TTL_CABINET_ORDER: int = 15 * 60

    # Duplicate item locations: "none", "cabinet" or "drawer"
    ITEM_LOCATION_UNIQUENESS: Literal["none", "cabinet", "drawer"] = "drawer"

    # Object storage
    OBJECT_STORAGE_DIR: str = "./uploads"
    UPLOAD_URL_EXPIRE_SECONDS: int = 15 * 60

    # Frontend
    CORS_ORIGINS: list[str] = [
        "http://localhost:5000",
        "http://127.0.0.1:5000",
    ]


    model_config = SettingsConfigDict(
        env_file=".env",
        extra="forbid",  
    )


settings = Settings()
