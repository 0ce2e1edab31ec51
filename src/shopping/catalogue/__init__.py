"""Product snapshot provider factory.

Provides get_catalogue() / set_catalogue() to swap implementations:
- InMemoryProductCatalogue for development and testing
- HttpProductCatalogue when ``SHOPPING_CATALOGUE_BASE_URL`` is configured
"""

from shopping.catalogue.fake_adapter import InMemoryProductCatalogue
from shopping.catalogue.http_adapter import HttpProductCatalogue
from shopping.catalogue.port import ProductSnapshot, ProductSnapshotProvider
from shopping.config import get_settings

_current_catalogue: ProductSnapshotProvider | None = None


def build_catalogue(settings) -> ProductSnapshotProvider:
    """Return the catalogue adapter configured by ``settings``."""
    if settings.catalogue_base_url:
        return HttpProductCatalogue(settings.catalogue_base_url, timeout=settings.catalogue_timeout_seconds)
    return InMemoryProductCatalogue()


def get_catalogue() -> ProductSnapshotProvider:
    """Return the current catalogue, building it from settings on first use."""
    global _current_catalogue
    if _current_catalogue is None:
        _current_catalogue = build_catalogue(get_settings())
    return _current_catalogue


def set_catalogue(catalogue: ProductSnapshotProvider) -> None:
    """Override the active catalogue (useful for tests)."""
    global _current_catalogue
    _current_catalogue = catalogue


def reset_catalogue() -> None:
    """Close the active catalogue and go back to the configured default."""
    global _current_catalogue
    if _current_catalogue is not None:
        _current_catalogue.close()
    _current_catalogue = None


__all__ = [
    "HttpProductCatalogue",
    "InMemoryProductCatalogue",
    "ProductSnapshot",
    "ProductSnapshotProvider",
    "build_catalogue",
    "get_catalogue",
    "reset_catalogue",
    "set_catalogue",
]
