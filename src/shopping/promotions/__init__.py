"""Promotion catalog factory.

Provides get_promotion_catalog() / set_promotion_catalog() to swap the
catalog consulted by pricing.
"""

from shopping.config import get_settings
from shopping.promotions.cache import MemoryTTLCache, PromotionCache
from shopping.promotions.catalog import CachingPromotionCatalog, StaticPromotionCatalog, default_promotions
from shopping.promotions.port import PromotionCatalog, PromotionCatalogUnavailable
from shopping.promotions.rule import PromotionKind, PromotionRule


def build_promotion_catalog(settings, inner=None, cache=None) -> PromotionCatalog:
    """Wrap ``inner`` (the seeded static catalog by default) in a TTL cache."""
    ttl = settings.promotion_cache_ttl_seconds
    inner = inner if inner is not None else StaticPromotionCatalog()
    cache = cache if cache is not None else MemoryTTLCache(default_ttl=ttl)
    return CachingPromotionCatalog(inner, cache, ttl=ttl)


_current_catalog: PromotionCatalog | None = None


def get_promotion_catalog() -> PromotionCatalog:
    global _current_catalog
    if _current_catalog is None:
        _current_catalog = build_promotion_catalog(get_settings())
    return _current_catalog


def set_promotion_catalog(catalog: PromotionCatalog) -> None:
    global _current_catalog
    _current_catalog = catalog


def reset_promotion_catalog() -> None:
    global _current_catalog
    _current_catalog = None


__all__ = [
    "CachingPromotionCatalog",
    "MemoryTTLCache",
    "PromotionCache",
    "PromotionCatalog",
    "PromotionCatalogUnavailable",
    "PromotionKind",
    "PromotionRule",
    "StaticPromotionCatalog",
    "build_promotion_catalog",
    "default_promotions",
    "get_promotion_catalog",
    "reset_promotion_catalog",
    "set_promotion_catalog",
]
