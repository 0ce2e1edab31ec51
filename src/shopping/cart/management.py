"""Cart management: login merge command and handler.

When a visitor signs in, the anonymous cart kept under their session token is
folded into the account's cart and then deleted. Both writes belong to the
handler's unit of work: either the account cart holds the merged lines and
the anonymous cart is gone, or nothing changed at all.
"""

from dataclasses import dataclass

from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from shopping.cart.cart import Cart, CartOwner
from shopping.cart.merge import CartMerger, MergeResult
from shopping.catalogue import get_catalogue
from shopping.config import get_settings
from shopping.domain import shopping
from shopping.utils.logging import get_logger

logger = get_logger(__name__)


@shopping.command(part_of="Cart")
class MergeOnLogin:
    """Merge the session's anonymous cart into the account's cart."""

    account_id = String(required=True, max_length=255)
    session_token = String(required=True, max_length=255)


@dataclass
class LoginMerge:
    cart: Cart | None
    result: MergeResult | None = None

    @property
    def merged(self) -> bool:
        return self.result is not None


@shopping.command_handler(part_of=Cart)
class MergeOnLoginHandler:
    @handle(MergeOnLogin)
    def merge_on_login(self, command):
        account = CartOwner.account(command.account_id)
        anonymous = CartOwner.session(command.session_token)
        now = current_domain.clock.now()
        repo = current_domain.repository_for(Cart)

        anonymous_cart = repo.for_owner(anonymous, now)
        if anonymous_cart is None:
            logger.debug("No anonymous cart to merge", account=account.key)
            return LoginMerge(cart=repo.for_owner(account, now))

        if anonymous_cart.is_empty:
            repo.remove(anonymous_cart)
            logger.info("Discarded empty anonymous cart at login", account=account.key)
            return LoginMerge(cart=repo.for_owner(account, now))

        account_cart = repo.for_owner(account, now) or Cart.create(
            account, now=now, retention_days=get_settings().anonymous_cart_retention_days
        )
        result = CartMerger(get_catalogue()).merge(
            account_cart,
            anonymous_cart.lines,
            source_session=anonymous.session_token,
            now=now,
        )

        repo.add(account_cart)
        repo.remove(anonymous_cart)

        logger.info(
            "Merged anonymous cart into account cart",
            account=account.key,
            merged=len(result.merged),
            added=len(result.added),
            skipped=len(result.skipped),
        )
        return LoginMerge(cart=account_cart, result=result)
