"""Repository for the Cart aggregate.

Carts are looked up by owner rather than by identity. An anonymous cart past
its expiry is treated as gone: it is deleted on first sight and never handed
back to a caller.
"""

from datetime import UTC, datetime

from protean import UnitOfWork
from protean.exceptions import ObjectNotFoundError

from shopping.cart.cart import Cart, LineItem, OwnerKind
from shopping.domain import shopping
from shopping.exceptions import CartNotFound
from shopping.utils.logging import get_logger

logger = get_logger(__name__)


@shopping.repository(part_of=Cart)
class CartRepository:
    def for_owner(self, owner, now=None) -> Cart | None:
        """The owner's live cart, or None."""
        try:
            if owner.kind == OwnerKind.ACCOUNT:
                cart = self.find_by(account_id=owner.account_id)
            else:
                cart = self.find_by(session_token=owner.session_token)
        except ObjectNotFoundError:
            return None

        if cart.is_expired(now or datetime.now(UTC)):
            logger.info("Discarding expired anonymous cart", owner=owner.key)
            self.remove(cart)
            return None
        return cart

    def require(self, owner, now=None) -> Cart:
        cart = self.for_owner(owner, now)
        if cart is None:
            raise CartNotFound(owner.key)
        return cart

    def remove(self, cart) -> None:
        """Delete a cart together with its line items."""
        with UnitOfWork():
            line_items = self._domain.repository_for(LineItem)._dao
            for item in list(cart.items):
                line_items.delete(item)
            self._dao.delete(cart)

    def purge_expired(self, as_of) -> int:
        """Delete every anonymous cart whose expiry is at or before ``as_of``."""
        anonymous_carts = self.query.filter(session_token__isnull=False).limit(None).all().items
        expired = [cart for cart in anonymous_carts if cart.is_expired(as_of)]
        for cart in expired:
            self.remove(cart)
        return len(expired)
