# backend/app/core/config.py
"""
Configuration using pydantic-settings.

Security considerations:
- SECRET_KEY left at its default is refused in production
- CORS_ORIGINS parsed from comma-separated env var, never defaults to "*"
- Database URLs normalized for async drivers automatically
"""
from functools import lru_cache
from typing import List

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SECRET_KEY = "INSECURE_DEV_KEY_CHANGE_IN_PRODUCTION"
DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./snapshelf.db"

# Backends with INSERT ... ON CONFLICT DO NOTHING, which tag creation relies on
SUPPORTED_DATABASE_BACKENDS = ("postgresql", "sqlite")


class Settings(BaseSettings):
    """
    Strictly typed application settings.

    Priority for loading:
    1. Environment variables (highest priority)
    2. .env file (via pydantic-settings)
    3. Default values (lowest priority, dev-safe only)
    """

    # ─────────────────────────────────────────────────────────────
    # Application metadata
    # ─────────────────────────────────────────────────────────────
    PROJECT_NAME: str = "Snapshelf"
    PROJECT_VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"

    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # ─────────────────────────────────────────────────────────────
    # Session tokens (JWT)
    # SECRET_KEY MUST be set in production via environment variable
    # ─────────────────────────────────────────────────────────────
    SECRET_KEY: str = DEFAULT_SECRET_KEY
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Cookie carrying the token. Its own lifetime is long on purpose,
    # the token inside expires after ACCESS_TOKEN_EXPIRE_MINUTES.
    SESSION_COOKIE_NAME: str = "token"
    SESSION_COOKIE_MAX_AGE_DAYS: int = 100
    SESSION_COOKIE_SECURE: bool = False

    # ─────────────────────────────────────────────────────────────
    # Catalog passwords
    # "pbkdf2"      -> salted passlib hash (default)
    # "md5-legacy"  -> base64(md5(password)), exact-match lookup
    # ─────────────────────────────────────────────────────────────
    PASSWORD_SCHEME: str = "pbkdf2"

    # ─────────────────────────────────────────────────────────────
    # Database Configuration
    # Priority: DATABASE_URL env var → SQLite fallback for local dev
    # ─────────────────────────────────────────────────────────────
    DATABASE_URL: str = DEFAULT_DATABASE_URL
    DATABASE_ECHO: bool = False

    # Upper bound for a single store transaction, in seconds
    DB_TIMEOUT_SECONDS: float = 5.0

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """
        Normalize database URLs for async SQLAlchemy compatibility.

        Conversions:
        - postgres://     → postgresql+asyncpg://
        - postgresql://   → postgresql+asyncpg://
        - sqlite:///      → sqlite+aiosqlite:///
        """
        if v is None:
            return DEFAULT_DATABASE_URL

        url = v.strip()

        if url.startswith("postgres://"):
            return url.replace("postgres://", "postgresql+asyncpg://", 1)

        if url.startswith("postgresql://") and "+asyncpg" not in url:
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)

        if url.startswith("sqlite:///") and "+aiosqlite" not in url:
            return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)

        return url

    @field_validator("DATABASE_URL")
    @classmethod
    def check_database_backend(cls, v: str) -> str:
        backend = v.split(":", 1)[0].split("+", 1)[0].lower()
        if backend not in SUPPORTED_DATABASE_BACKENDS:
            raise ValueError(
                f"Unsupported database {backend!r}; use one of {', '.join(SUPPORTED_DATABASE_BACKENDS)}"
            )
        return v

    @field_validator("PASSWORD_SCHEME")
    @classmethod
    def check_password_scheme(cls, v: str) -> str:
        scheme = v.strip().lower()
        if scheme not in ("pbkdf2", "md5-legacy"):
            raise ValueError(f"Unknown PASSWORD_SCHEME {v!r}")
        return scheme

    @model_validator(mode="after")
    def refuse_default_secret_in_production(self) -> "Settings":
        if self.is_production and self.uses_default_secret:
            raise ValueError(
                "SECRET_KEY is still the development default; "
                "set SECRET_KEY before running with ENVIRONMENT=production"
            )
        return self

    # ─────────────────────────────────────────────────────────────
    # CORS Configuration
    # Empty string → empty list (NOT "*")
    # ─────────────────────────────────────────────────────────────
    CORS_ORIGINS: str = "http://localhost:5173,http://127.0.0.1:5173"

    @property
    def BACKEND_CORS_ORIGINS(self) -> List[str]:
        """Parse CORS_ORIGINS into a list of allowed origins."""
        if not self.CORS_ORIGINS or not self.CORS_ORIGINS.strip():
            return []

        return [
            origin.strip()
            for origin in self.CORS_ORIGINS.split(",")
            if origin.strip()
        ]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT.lower() == "production"

    @property
    def is_sqlite(self) -> bool:
        """Check if using SQLite database (local development)."""
        return "sqlite" in self.DATABASE_URL.lower()

    @property
    def uses_default_secret(self) -> bool:
        return self.SECRET_KEY == DEFAULT_SECRET_KEY


@lru_cache()
def get_settings() -> Settings:
    """
    Cached settings instance.

    Settings are loaded once per process and never mutated afterwards.
    """
    return Settings()


settings = get_settings()
