"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from loguru import logger
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ledger_history.config.constants import MIN_NFT_TOKEN_ID


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str
    database_echo: bool = False
    database_pool_size: int = Field(
        default=10, ge=1, description="Connections kept in the pool"
    )
    database_max_overflow: int = Field(
        default=20, ge=0, description="Connections allowed beyond pool size"
    )

    # Application
    environment: str = "production"
    debug: bool = False
    log_level: str = "INFO"
    log_file: str | None = None

    # Pagination
    default_page_limit: int = Field(
        default=25, ge=1, description="Page size when the caller gives none"
    )
    max_page_limit: int = Field(
        default=100, ge=1, description="Upper bound for a history page"
    )

    # Request deadline applied to every exposed operation
    request_timeout_seconds: float = Field(
        default=10.0, gt=0, description="Per-request store deadline in seconds"
    )

    # Tokens
    min_nft_token_id: int = Field(
        default=MIN_NFT_TOKEN_ID,
        gt=0,
        description="Token ids at or above this value are NFTs",
    )
    token_cache_ttl_seconds: int = Field(
        default=0,
        ge=0,
        description="Token symbol cache lifetime, 0 means refresh explicitly",
    )

    # Filter index backfill
    backfill_chunk_size: int = Field(
        default=100, ge=1, description="Blocks per backfill chunk"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator('database_url')
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL."""
        if not v.startswith(('postgresql://', 'postgresql+asyncpg://')):
            raise ValueError(
                'DATABASE_URL must start with postgresql:// or postgresql+asyncpg://'
            )
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize log level name."""
        level = v.upper()
        if level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f'Unknown LOG_LEVEL: {v}')
        return level

    @model_validator(mode='after')
    def validate_page_limits(self) -> 'Settings':
        """Default page size must fit under the maximum."""
        if self.default_page_limit > self.max_page_limit:
            raise ValueError(
                'DEFAULT_PAGE_LIMIT must not exceed MAX_PAGE_LIMIT'
            )
        return self

    @model_validator(mode='after')
    def validate_production(self) -> 'Settings':
        """Validate production-specific requirements."""
        if self.environment == 'production':
            if self.debug:
                raise ValueError(
                    'DEBUG must be False in production environment. '
                    'Set DEBUG=false in your .env file.'
                )
            if self.database_echo:
                logger.warning(
                    'DATABASE_ECHO is enabled in production, '
                    'every statement will be logged.'
                )
        return self

    @property
    def async_database_url(self) -> str:
        """Database URL with the asyncpg driver selected."""
        if self.database_url.startswith('postgresql://'):
            return self.database_url.replace(
                'postgresql://', 'postgresql+asyncpg://', 1
            )
        return self.database_url

    def clamp_limit(self, limit: int | None) -> int:
        """Bring a caller supplied page size into the allowed range."""
        if limit is None:
            return self.default_page_limit
        return max(1, min(limit, self.max_page_limit))


# Global settings instance
settings = Settings()
