"""Product snapshot provider port (abstract interface).

The cart never owns product data. It asks the catalogue for a read-only
snapshot of a product whenever it needs a price, a display name or the stock
level. Adapters implement ``ProductSnapshotProvider``; they return ``None``
for unknown products and raise ``CatalogueUnavailable`` when the catalogue
itself cannot be reached.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

from shopping.cart.cart import LineItem

_SAFE_THUMBNAIL = re.compile(r"^(https?://|/|data:image/)")


def sanitize_thumbnail(url):
    """Keep http(s), root-relative and inline image URLs; drop anything else."""
    if not url or not _SAFE_THUMBNAIL.match(url):
        return ""
    return url


@dataclass(frozen=True)
class ProductSnapshot:
    """Current catalogue view of one product. Prices are in whole subunits."""

    id: str
    name: str
    price: int
    discount_price: int | None = None
    stock: int = 0
    thumbnail: str = ""
    category: str | None = None

    def __post_init__(self):
        if self.price < 0:
            raise ValueError(f"Product {self.id} has a negative price: {self.price}")
        if self.discount_price is not None and self.discount_price < 0:
            raise ValueError(f"Product {self.id} has a negative discount price: {self.discount_price}")
        if self.stock < 0:
            raise ValueError(f"Product {self.id} has negative stock: {self.stock}")

    @property
    def effective_price(self) -> int:
        """The price a new cart line is snapshotted at."""
        return self.discount_price if self.discount_price is not None else self.price

    def to_line_item(self, quantity) -> LineItem:
        return LineItem(
            product_id=str(self.id),
            display_name=self.name,
            quantity=quantity,
            unit_price=self.effective_price,
            thumbnail=sanitize_thumbnail(self.thumbnail),
            category=self.category,
        )


class ProductSnapshotProvider(ABC):
    """Abstract product catalogue interface."""

    @abstractmethod
    def get_product(self, product_id: str) -> ProductSnapshot | None:
        """Return the current snapshot of a product, or None if it does not exist."""
        ...

    def close(self) -> None:
        """Release any connection the provider holds. Nothing to do by default."""
