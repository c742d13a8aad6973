"""Application configuration management."""
from pydantic import model_validator, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from sqlalchemy.engine.url import make_url, URL
from typing import Optional
import logging

SQLITE_LOCAL_URL = "sqlite+aiosqlite:///./tapvote.db"
DEFAULT_SECRET_KEY = "dev-secret-key-change-in-production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = SQLITE_LOCAL_URL
    db_pool_size: int = 5
    db_max_overflow: int = 10

    # Application
    environment: str = "development"
    frontend_url: str = "http://localhost:8081"
    secret_key: str = DEFAULT_SECRET_KEY
    jwt_algorithm: str = "HS256"  # Use HS256 for symmetric signing
    access_token_exp_minutes: int = 120
    access_token_cookie_name: str = "tapvote_access_token"

    # Surveys
    require_survey_owner: bool = True  # Pre-auth deployments may create ownerless surveys
    max_title_length: int = 200

    # Tag payloads
    web_domain: str = "localhost:8081"
    tag_url_scheme: str = "https"  # Scheme used when writing new tags
    app_url_scheme: str = "nfcsurvey"  # Custom scheme handled by the mobile app

    # Device identity
    device_id_cookie_name: str = "tapvote_device_id"
    device_id_cookie_days: int = 365 * 2

    @field_validator("web_domain", mode="before")
    @classmethod
    def strip_web_domain(cls, value):
        """Accept domains configured with or without a scheme prefix."""
        if value is None:
            return cls.model_fields["web_domain"].default
        value = str(value).strip()
        for prefix in ("https://", "http://"):
            if value.lower().startswith(prefix):
                value = value[len(prefix):]
        return value.rstrip("/")

    @field_validator("app_url_scheme", "tag_url_scheme", mode="before")
    @classmethod
    def normalize_scheme(cls, value):
        """Schemes are compared case-insensitively; store them lower-cased without '://'."""
        value = str(value).strip().lower()
        if value.endswith("://"):
            value = value[:-3]
        if not value:
            raise ValueError("URL scheme must not be empty")
        return value

    @model_validator(mode="after")
    def validate_all_config(self):
        """Validate security configuration and normalize Postgres URLs."""
        logger = logging.getLogger(__name__)

        # Security validation
        if self.environment == "production":
            if self.secret_key == DEFAULT_SECRET_KEY:
                raise ValueError("secret_key must be changed from default value in production")

        # Validate JWT algorithm
        if self.jwt_algorithm not in ["HS256", "HS384", "HS512"]:
            raise ValueError(f"Unsupported JWT algorithm: {self.jwt_algorithm}. Use HS256, HS384, or HS512.")

        if self.access_token_exp_minutes < 1 or self.access_token_exp_minutes > 1440:  # 1 min to 24 hours
            raise ValueError("access_token_exp_minutes must be between 1 and 1440 (24 hours)")

        if self.device_id_cookie_days < 1:
            raise ValueError("device_id_cookie_days must be at least 1 day")

        # Database URL normalization
        url = self.database_url
        if not url:
            logger.warning("Empty DATABASE_URL, using SQLite fallback")
            self.database_url = SQLITE_LOCAL_URL
            return self

        parsed: Optional[URL] = None
        try:
            parsed = make_url(url)
        except Exception as e:
            logger.error(f"Failed to parse DATABASE_URL: {e}")
            logger.warning(f"Invalid DATABASE_URL; falling back to default sqlite database.")
            self.database_url = SQLITE_LOCAL_URL
            return self

        drivername = parsed.drivername
        if drivername.startswith("postgres") and "+asyncpg" not in drivername:
            parsed = parsed.set(drivername="postgresql+asyncpg")
            logger.info(f"Driver normalized: {drivername} -> {parsed.drivername}")
        # Use render_as_string to properly re-encode special characters in password
        self.database_url = parsed.render_as_string(hide_password=False)

        return self

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
