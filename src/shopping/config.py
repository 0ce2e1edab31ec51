"""Settings for the shopping context.

Values come from ``SHOPPING_*`` environment variables or a local ``.env``
file. Monetary amounts are in the smallest currency subunit; rates are
fractions (``0.09`` is 9%).
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ShoppingSettings(BaseSettings):
    # Pricing rules
    tax_rate: Decimal = Field(default=Decimal("0.09"), ge=0, le=1)
    shipping_fee: int = Field(default=200_000, ge=0)
    free_shipping_threshold: int = Field(default=1_000_000, ge=0)
    bulk_discount_min_quantity: int = Field(default=5, ge=1)
    bulk_discount_rate: Decimal = Field(default=Decimal("0.10"), ge=0, le=1)

    # Cart lifecycle
    anonymous_cart_retention_days: int = Field(default=7, ge=7, le=30)

    # Collaborators
    promotion_cache_ttl_seconds: int = Field(default=300, ge=0)
    catalogue_base_url: str | None = None
    catalogue_timeout_seconds: float = Field(default=5.0, gt=0)

    # Logging
    log_level: str | None = None
    log_dir: str = "logs"
    log_to_file: bool = False

    model_config = SettingsConfigDict(
        env_prefix="SHOPPING_",
        env_file=".env",
        extra="ignore",
    )


@lru_cache
def get_settings() -> ShoppingSettings:
    """Return the process-wide settings, loaded once."""
    return ShoppingSettings()
