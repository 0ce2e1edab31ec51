"""In-memory product catalogue for development and testing.

Holds product snapshots in a dict and can be switched offline at runtime to
simulate an unreachable catalogue. Every lookup is recorded in ``calls``.
"""

from shopping.catalogue.port import ProductSnapshot, ProductSnapshotProvider
from shopping.exceptions import CatalogueUnavailable


class InMemoryProductCatalogue(ProductSnapshotProvider):
    """Configurable in-memory catalogue."""

    def __init__(self, products=None) -> None:
        self.products: dict[str, ProductSnapshot] = {}
        self.available: bool = True
        self.unavailable_ids: set[str] = set()
        self.calls: list[str] = []
        for product in products or []:
            self.add(product)

    def add(self, product: ProductSnapshot) -> ProductSnapshot:
        self.products[str(product.id)] = product
        return product

    def remove(self, product_id: str) -> None:
        self.products.pop(str(product_id), None)

    def configure(self, available: bool, unavailable_ids=None) -> None:
        """Take the whole catalogue, or only some products, offline."""
        self.available = available
        self.unavailable_ids = {str(pid) for pid in unavailable_ids or []}

    def get_product(self, product_id: str) -> ProductSnapshot | None:
        product_id = str(product_id)
        self.calls.append(product_id)

        if not self.available or product_id in self.unavailable_ids:
            raise CatalogueUnavailable(f"Product catalogue unavailable while resolving {product_id}")
        return self.products.get(product_id)
