"""
Configuration settings for the ArbitrageEdge API.
Uses pydantic-settings for validation and environment variable loading.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class OddsAPISettings(BaseSettings):
    """The Odds API connection settings (ODDS_ prefix, e.g. ODDS_API_KEY)."""

    model_config = SettingsConfigDict(
        env_prefix="ODDS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_key: str = Field(default="", description="The Odds API key")
    base_url: str = "https://api.the-odds-api.com/v4"

    # Request parameters
    regions: str = "us,uk,eu"
    markets: str = "h2h"  # Moneyline / 1X2 only
    odds_format: str = "decimal"

    request_timeout_seconds: float = 15.0

    # Matches quoted by fewer bookmakers have nothing to hedge against
    min_bookmakers: int = 2


class CacheSettings(BaseSettings):
    """Opportunity cache settings (CACHE_ prefix)."""

    model_config = SettingsConfigDict(env_prefix="CACHE_", extra="ignore")

    ttl_seconds: float = 30 * 60  # 30 minutes


class ServerSettings(BaseSettings):
    """HTTP server settings (SERVER_ prefix)."""

    model_config = SettingsConfigDict(env_prefix="SERVER_", extra="ignore")

    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: str = Field(default="*", description="Comma-separated list of allowed origins")

    @property
    def cors_origin_list(self) -> list[str]:
        if self.cors_origins.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


class OpportunitySettings(BaseSettings):
    """Request defaults (OPPORTUNITY_ prefix)."""

    model_config = SettingsConfigDict(env_prefix="OPPORTUNITY_", extra="ignore")

    default_sport: str = "soccer"
    default_stake: float = 100.0
    default_min_profit: float = 0.0

    @field_validator("default_stake")
    @classmethod
    def stake_must_be_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("default_stake must be positive")
        return v


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore"
    )

    api_name: str = "ArbitrageEdge"
    version: str = "2.0.0"

    # Debug settings
    debug: bool = False
    log_level: str = "INFO"

    # Sub-settings
    odds_api: OddsAPISettings = Field(default_factory=OddsAPISettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    opportunities: OpportunitySettings = Field(default_factory=OpportunitySettings)


# Global settings instance
settings = Settings()
