"""Cart promotion code management: commands and handler."""

from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from shopping.cart.cart import Cart, CartOwner
from shopping.cart.checkout import price_cart
from shopping.domain import shopping
from shopping.utils.logging import get_logger

logger = get_logger(__name__)


@shopping.command(part_of="Cart")
class ApplyPromotionCode:
    """Store a promotion code on the cart if it applies to the cart as it is now."""

    account_id = String(max_length=255)
    session_token = String(max_length=255)
    code = String(required=True, max_length=50)


@shopping.command(part_of="Cart")
class RemovePromotionCode:
    account_id = String(max_length=255)
    session_token = String(max_length=255)


@shopping.command_handler(part_of=Cart)
class PromotionCodeHandler:
    @handle(ApplyPromotionCode)
    def apply_code(self, command):
        now = current_domain.clock.now()
        repo = current_domain.repository_for(Cart)
        cart = repo.require(CartOwner.for_command(command), now)

        priced = price_cart(cart, promotion_code=command.code)
        outcome = priced.breakdown.promotion
        if outcome.applied:
            cart.apply_promotion_code(outcome.code, now=now)
            repo.add(cart)
        else:
            logger.info(
                "Promotion code not stored", owner=cart.owner.key, code=outcome.code, reason=outcome.failure.value
            )
        return priced

    @handle(RemovePromotionCode)
    def remove_code(self, command):
        now = current_domain.clock.now()
        repo = current_domain.repository_for(Cart)
        cart = repo.require(CartOwner.for_command(command), now)

        if cart.remove_promotion_code(now=now):
            repo.add(cart)
        return cart
