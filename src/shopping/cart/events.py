"""Domain events for the Cart aggregate.

Every event carries the cart's identity and its owner key
(``account:<id>`` or ``session:<token>``).
"""

from protean.fields import Identifier, Integer, String

from shopping.domain import shopping


@shopping.event(part_of="Cart")
class CartItemAdded:
    """A product was added to the cart, or its quantity was incremented."""

    __version__ = "v1"

    cart_id = Identifier(required=True)
    owner = String(required=True)
    product_id = String(required=True)
    quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    unit_price = Integer(required=True)


@shopping.event(part_of="Cart")
class CartQuantityUpdated:
    """The quantity of a line was replaced outright."""

    __version__ = "v1"

    cart_id = Identifier(required=True)
    owner = String(required=True)
    product_id = String(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@shopping.event(part_of="Cart")
class CartItemRemoved:
    __version__ = "v1"

    cart_id = Identifier(required=True)
    owner = String(required=True)
    product_id = String(required=True)


@shopping.event(part_of="Cart")
class CartCleared:
    __version__ = "v1"

    cart_id = Identifier(required=True)
    owner = String(required=True)
    removed_line_count = Integer(required=True)


@shopping.event(part_of="Cart")
class CartsMerged:
    """An anonymous cart's lines were folded into an account cart."""

    __version__ = "v1"

    cart_id = Identifier(required=True)
    owner = String(required=True)
    source_session = String(required=True)
    lines_merged = Integer(required=True)
    lines_added = Integer(required=True)
    lines_skipped = Integer(required=True)


@shopping.event(part_of="Cart")
class PromotionCodeApplied:
    __version__ = "v1"

    cart_id = Identifier(required=True)
    owner = String(required=True)
    code = String(required=True, max_length=50)


@shopping.event(part_of="Cart")
class PromotionCodeRemoved:
    __version__ = "v1"

    cart_id = Identifier(required=True)
    owner = String(required=True)
    code = String(required=True, max_length=50)
