"""Shopping bounded context: carts, login merge and pricing.

Handles anonymous and account carts (CQRS aggregate), merging a visitor's
anonymous cart into their account cart at login, and pricing a cart with
bulk discounts, promotion codes, shipping and tax.
"""

from protean.domain import Domain

shopping = Domain(name="shopping")
