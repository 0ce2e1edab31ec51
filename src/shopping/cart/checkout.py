"""Priced cart query for checkout.

Read only: the cart is priced as stored and nothing is written back.
"""

from dataclasses import dataclass

from protean import handle
from protean.fields import Boolean, String
from protean.utils.globals import current_domain

from shopping.cart.cart import Cart, CartOwner
from shopping.config import get_settings
from shopping.domain import shopping
from shopping.pricing.breakdown import PriceBreakdown, PricingOptions
from shopping.pricing.engine import PricingEngine
from shopping.promotions import get_promotion_catalog


@shopping.command(part_of="Cart")
class GetPricedCart:
    """Price the owner's cart.

    ``promotion_code`` overrides the code stored on the cart for this one
    request; leave it unset to price with the stored code, if any.
    """

    account_id = String(max_length=255)
    session_token = String(max_length=255)
    promotion_code = String(max_length=50)
    apply_discounts = Boolean(default=True)
    apply_bulk_discount = Boolean(default=True)


@dataclass
class PricedCart:
    cart: Cart
    breakdown: PriceBreakdown

    def to_payload(self):
        return {"cart": self.cart.to_payload(), "breakdown": self.breakdown.to_dict()}


def pricing_engine() -> PricingEngine:
    return PricingEngine(get_settings(), get_promotion_catalog())


def price_cart(cart, promotion_code=None, apply_discounts=True, apply_bulk_discount=True) -> PricedCart:
    options = PricingOptions(
        apply_discounts=apply_discounts,
        apply_bulk_discount=apply_bulk_discount,
        promotion_code=promotion_code or cart.applied_promotion_code,
    )
    breakdown = pricing_engine().price(cart.lines, options, now=current_domain.clock.now())
    return PricedCart(cart=cart, breakdown=breakdown)


@shopping.command_handler(part_of=Cart)
class PricedCartHandler:
    @handle(GetPricedCart)
    def get_priced_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.require(CartOwner.for_command(command), current_domain.clock.now())
        return price_cart(
            cart,
            promotion_code=command.promotion_code,
            apply_discounts=command.apply_discounts,
            apply_bulk_discount=command.apply_bulk_discount,
        )
