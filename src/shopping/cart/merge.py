"""Cart merge: fold an anonymous cart's lines into an account cart at login.

Conflict policy, per anonymous line:

- the account cart already has the product: quantities are summed and the
  account line keeps its own unit price; the anonymous price snapshot is
  discarded;
- otherwise the product is resolved again (the anonymous snapshot may be
  stale) and appended with the current price and display data;
- products that no longer resolve, or cannot be resolved right now, are
  skipped so that login is never blocked by the catalogue.

Summed quantities are not re-validated against stock. Stock is checked again
when the order is placed.
"""

from dataclasses import dataclass, field

from shopping.cart.events import CartsMerged
from shopping.catalogue.port import ProductSnapshotProvider
from shopping.exceptions import CatalogueUnavailable
from shopping.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class MergeResult:
    merged: list[str] = field(default_factory=list)
    added: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.merged or self.added)

    def to_dict(self):
        return {"merged": self.merged, "added": self.added, "skipped": self.skipped}


class CartMerger:
    def __init__(self, products: ProductSnapshotProvider) -> None:
        self.products = products

    def merge(self, account_cart, anonymous_items, source_session="", now=None) -> MergeResult:
        result = MergeResult()

        for anonymous_item in anonymous_items:
            product_id = str(anonymous_item.product_id)

            if account_cart.find_item(product_id) is not None:
                account_cart.increment_item(product_id, anonymous_item.quantity, now=now)
                result.merged.append(product_id)
                continue

            try:
                product = self.products.get_product(product_id)
            except CatalogueUnavailable as exc:
                logger.warning(
                    "Skipping line during merge: catalogue unavailable", product_id=product_id, error=str(exc)
                )
                result.skipped.append(product_id)
                continue

            if product is None:
                logger.info("Skipping line during merge: product no longer exists", product_id=product_id)
                result.skipped.append(product_id)
                continue

            account_cart.append_item(product.to_line_item(anonymous_item.quantity), now=now)
            result.added.append(product_id)

        account_cart.recalculate()
        account_cart.raise_(
            CartsMerged(
                cart_id=str(account_cart.id),
                owner=account_cart.owner.key,
                source_session=source_session,
                lines_merged=len(result.merged),
                lines_added=len(result.added),
                lines_skipped=len(result.skipped),
            )
        )
        return result
