"""Error taxonomy for the shopping context.

Structural errors abort a cart mutation and leave the stored cart untouched.
Each error carries a stable ``code``, a human-readable ``message`` and optional
``details``; ``status_code`` is the HTTP status the API layer answers with.

Promotion failures are deliberately absent from this module: they are soft
outcomes carried on the price breakdown (see ``shopping.pricing.breakdown``).
"""


class CartError(Exception):
    """Base class for every error raised by the cart and pricing engine."""

    code = "CartError"
    status_code = 400

    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self):
        return {"error": self.code, "message": self.message, "details": self.details}


class InvalidOwner(CartError):
    code = "InvalidOwner"
    status_code = 422


class InvalidQuantity(CartError):
    code = "InvalidQuantity"
    status_code = 422

    def __init__(self, quantity):
        super().__init__(
            f"Quantity must be a whole number of at least 1, got {quantity!r}",
            {"quantity": quantity},
        )
        self.quantity = quantity


class ProductNotFound(CartError):
    code = "ProductNotFound"
    status_code = 404

    def __init__(self, product_id):
        super().__init__(f"Product {product_id} not found", {"product_id": str(product_id)})
        self.product_id = product_id


class InsufficientStock(CartError):
    code = "InsufficientStock"
    status_code = 409

    def __init__(self, product_id, requested, available):
        super().__init__(
            f"Only {available} items available in stock",
            {"product_id": str(product_id), "requested": requested, "available": available},
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class CartNotFound(CartError):
    code = "CartNotFound"
    status_code = 404

    def __init__(self, owner):
        super().__init__(f"Cart not found for {owner}", {"owner": str(owner)})
        self.owner = owner


class ItemNotInCart(CartError):
    code = "ItemNotInCart"
    status_code = 404

    def __init__(self, product_id):
        super().__init__(f"Product {product_id} not found in cart", {"product_id": str(product_id)})
        self.product_id = product_id


class ConcurrentCartUpdate(CartError):
    """The stored cart changed between read and write."""

    code = "ConcurrentCartUpdate"
    status_code = 409

    def __init__(self, owner):
        super().__init__(f"Cart for {owner} was modified concurrently", {"owner": str(owner)})
        self.owner = owner


class CatalogueUnavailable(CartError):
    """The product snapshot provider could not be reached."""

    code = "CatalogueUnavailable"
    status_code = 503
