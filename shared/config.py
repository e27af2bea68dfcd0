"""
Shared configuration management for the pricing engine.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PricingSettings(BaseSettings):
    """Pricing engine settings, read from PRICING_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PRICING_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Cart
    default_currency: str = Field(default="EUR", min_length=1)

    # Rules
    rules_file: Optional[str] = Field(default=None, description="JSON file with pricing rule definitions")

    # Observability
    enable_metrics: bool = Field(default=True)


def get_settings(**overrides) -> PricingSettings:
    """Get pricing settings, applying explicit overrides over the environment."""
    return PricingSettings(**overrides)
