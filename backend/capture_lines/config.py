"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - The core never reads Settings; it receives an immutable IssuanceConfig

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

from capture_lines.core.domain_types import OverflowMode
from capture_lines.core.issuance_config import (
    DEFAULT_CONCEPT_CODES, DEFAULT_ENTITY_CODES, IssuanceConfig,
)


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://capture:capture@db:5432/capture_lines"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting providers hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Issuance
    timezone: str = "America/Mexico_City"
    default_entity_code: str = Field("09", pattern=r"^\d{2}$")
    default_concept_code: str = Field("01", pattern=r"^\d{2}$")
    entity_codes: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_ENTITY_CODES),
    )
    concept_codes: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_CONCEPT_CODES),
    )
    validity_days: int = Field(15, ge=0)           # calendar days, embedded in the code
    expiry_business_days: int = Field(15, ge=0)    # weekdays, persisted expiry_date
    max_batch_size: int = Field(100, ge=1)
    max_issue_attempts: int = Field(5, ge=1)
    overflow_mode: OverflowMode = OverflowMode.TRUNCATE

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"

    def issuance_config(self) -> IssuanceConfig:
        """Freeze the issuance-related settings into the core's config value."""
        return IssuanceConfig(
            entity_codes=self.entity_codes,
            concept_codes=self.concept_codes,
            default_entity_code=self.default_entity_code,
            default_concept_code=self.default_concept_code,
            validity_days=self.validity_days,
            expiry_business_days=self.expiry_business_days,
            max_batch_size=self.max_batch_size,
            max_issue_attempts=self.max_issue_attempts,
            overflow_mode=self.overflow_mode,
            timezone=self.timezone,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
