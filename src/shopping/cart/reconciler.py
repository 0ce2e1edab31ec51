"""Line-item reconciler: add, set, remove and clear lines against a product snapshot.

The reconciler owns the stock and quantity policy. It resolves products
through the product snapshot provider but never persists anything; the
command handlers save the cart once the reconciler has returned.

Every check happens before the cart is touched, so a rejected operation
leaves the cart exactly as it was.
"""

from shopping.cart.cart import validate_quantity
from shopping.catalogue.port import ProductSnapshotProvider
from shopping.exceptions import InsufficientStock, ProductNotFound
from shopping.utils.logging import get_logger

logger = get_logger(__name__)

# Thresholds above which an operation is logged as suspicious. Nothing is rejected.
SUSPICIOUS_QUANTITY = 20
SUSPICIOUS_LINE_COUNT = 50
SUSPICIOUS_TOTAL_ITEMS = 100


class LineItemReconciler:
    def __init__(self, products: ProductSnapshotProvider) -> None:
        self.products = products

    def resolve(self, product_id):
        """Fetch the product snapshot, raising ``ProductNotFound`` when it does not exist.

        ``CatalogueUnavailable`` propagates: a product that cannot be resolved
        cannot be added.
        """
        product = self.products.get_product(str(product_id))
        if product is None:
            raise ProductNotFound(product_id)
        return product

    def upsert_item(self, cart, product_id, quantity, now=None):
        """Add ``quantity`` of a product, creating its line or incrementing the existing one."""
        validate_quantity(quantity)
        product = self.resolve(product_id)

        existing = cart.find_item(product_id)
        resulting_quantity = quantity + (existing.quantity if existing else 0)
        if resulting_quantity > product.stock:
            raise InsufficientStock(product_id, requested=resulting_quantity, available=product.stock)

        if existing:
            item = cart.increment_item(product_id, quantity, now=now)
        else:
            item = cart.append_item(product.to_line_item(quantity), now=now)

        self._flag_suspicious(cart, quantity)
        return item

    def set_quantity(self, cart, product_id, quantity, now=None):
        """Replace the quantity of an existing line, re-validated against current stock."""
        validate_quantity(quantity)
        cart.require_item(product_id)
        product = self.resolve(product_id)

        if quantity > product.stock:
            raise InsufficientStock(product_id, requested=quantity, available=product.stock)

        item = cart.set_item_quantity(product_id, quantity, now=now)
        self._flag_suspicious(cart, quantity)
        return item

    def remove_item(self, cart, product_id, now=None):
        """Remove the line for ``product_id``. Removing an absent line is a no-op."""
        return cart.remove_item(product_id, now=now)

    def clear(self, cart, now=None):
        cart.clear(now=now)

    @staticmethod
    def _flag_suspicious(cart, quantity):
        if (
            quantity > SUSPICIOUS_QUANTITY
            or len(cart.items) > SUSPICIOUS_LINE_COUNT
            or cart.total_item_count > SUSPICIOUS_TOTAL_ITEMS
        ):
            logger.warning(
                "Suspicious cart activity",
                owner=cart.owner.key,
                quantity=quantity,
                line_count=len(cart.items),
                total_item_count=cart.total_item_count,
            )
