"""FastAPI routes for the Shopping domain: carts, pricing and login merge.

A cart is addressed by its owner: ``/carts/account/{account_id}`` for a
signed-in customer, ``/carts/session/{session_token}`` for an anonymous
visitor.
"""

from fastapi import APIRouter
from protean.utils.globals import current_domain

from shopping.api.schemas import (
    AddToCartRequest,
    ApplyPromotionRequest,
    CartResponse,
    MergeCartsRequest,
    MergeCartsResponse,
    PricedCartResponse,
    PurgeExpiredRequest,
    PurgeExpiredResponse,
    SetQuantityRequest,
)
from shopping.cart.cart import Cart, CartOwner, OwnerKind
from shopping.cart.checkout import GetPricedCart
from shopping.cart.coupons import ApplyPromotionCode, RemovePromotionCode
from shopping.cart.dispatch import process
from shopping.cart.expiry import PurgeExpiredCarts
from shopping.cart.items import AddToCart, ClearCart, RemoveFromCart, SetCartItemQuantity
from shopping.cart.management import MergeOnLogin

router = APIRouter(prefix="/carts", tags=["carts"])


def _owner(kind: OwnerKind, owner_id: str) -> dict:
    if kind == OwnerKind.ACCOUNT:
        return {"account_id": owner_id}
    return {"session_token": owner_id}


def _cart_response(cart) -> CartResponse:
    return CartResponse.model_validate(cart.to_payload())


# ---------------------------------------------------------------------------
# Maintenance and login merge
# ---------------------------------------------------------------------------
@router.post("/maintenance/purge-expired", response_model=PurgeExpiredResponse)
def purge_expired_carts(body: PurgeExpiredRequest | None = None) -> PurgeExpiredResponse:
    """Delete anonymous carts past their retention window. Intended for a scheduler."""
    as_of = body.as_of if body else None
    purged = process(PurgeExpiredCarts(as_of=as_of))
    return PurgeExpiredResponse(purged_count=purged)


@router.post("/merge", response_model=MergeCartsResponse)
def merge_carts(body: MergeCartsRequest) -> MergeCartsResponse:
    outcome = process(MergeOnLogin(account_id=body.account_id, session_token=body.session_token))
    result = outcome.result.to_dict() if outcome.result else {}
    return MergeCartsResponse(
        cart=_cart_response(outcome.cart) if outcome.cart else None,
        **result,
    )


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
@router.get("/{kind}/{owner_id}", response_model=CartResponse)
def get_cart(kind: OwnerKind, owner_id: str) -> CartResponse:
    cart = current_domain.repository_for(Cart).require(CartOwner.of(kind, owner_id), current_domain.clock.now())
    return _cart_response(cart)


@router.delete("/{kind}/{owner_id}", response_model=CartResponse)
def clear_cart(kind: OwnerKind, owner_id: str) -> CartResponse:
    cart = process(ClearCart(**_owner(kind, owner_id)))
    return _cart_response(cart)


@router.post("/{kind}/{owner_id}/items", response_model=CartResponse)
def add_cart_item(kind: OwnerKind, owner_id: str, body: AddToCartRequest) -> CartResponse:
    command = AddToCart(
        **_owner(kind, owner_id),
        product_id=body.product_id,
        quantity=body.quantity,
    )
    return _cart_response(process(command))


@router.put("/{kind}/{owner_id}/items/{product_id}", response_model=CartResponse)
def set_cart_item_quantity(kind: OwnerKind, owner_id: str, product_id: str, body: SetQuantityRequest) -> CartResponse:
    command = SetCartItemQuantity(
        **_owner(kind, owner_id),
        product_id=product_id,
        quantity=body.quantity,
    )
    return _cart_response(process(command))


@router.delete("/{kind}/{owner_id}/items/{product_id}", response_model=CartResponse)
def remove_cart_item(kind: OwnerKind, owner_id: str, product_id: str) -> CartResponse:
    command = RemoveFromCart(**_owner(kind, owner_id), product_id=product_id)
    return _cart_response(process(command))


# ---------------------------------------------------------------------------
# Pricing and promotion codes
# ---------------------------------------------------------------------------
@router.get("/{kind}/{owner_id}/pricing", response_model=PricedCartResponse)
def get_priced_cart(
    kind: OwnerKind,
    owner_id: str,
    promotion_code: str | None = None,
    apply_discounts: bool = True,
    apply_bulk_discount: bool = True,
) -> PricedCartResponse:
    command = GetPricedCart(
        **_owner(kind, owner_id),
        promotion_code=promotion_code,
        apply_discounts=apply_discounts,
        apply_bulk_discount=apply_bulk_discount,
    )
    return PricedCartResponse.model_validate(process(command).to_payload())


@router.post("/{kind}/{owner_id}/promotion", response_model=PricedCartResponse)
def apply_promotion_code(kind: OwnerKind, owner_id: str, body: ApplyPromotionRequest) -> PricedCartResponse:
    """Apply a promotion code. A code that does not apply is reported, not stored."""
    priced = process(ApplyPromotionCode(**_owner(kind, owner_id), code=body.code))
    return PricedCartResponse.model_validate(priced.to_payload())


@router.delete("/{kind}/{owner_id}/promotion", response_model=CartResponse)
def remove_promotion_code(kind: OwnerKind, owner_id: str) -> CartResponse:
    cart = process(RemovePromotionCode(**_owner(kind, owner_id)))
    return _cart_response(cart)
