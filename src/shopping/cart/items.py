"""Cart item management: commands and handler."""

from protean import handle
from protean.fields import Integer, String
from protean.utils.globals import current_domain

from shopping.cart.cart import Cart, CartOwner
from shopping.cart.reconciler import LineItemReconciler
from shopping.catalogue import get_catalogue
from shopping.config import get_settings
from shopping.domain import shopping


@shopping.command(part_of="Cart")
class AddToCart:
    account_id = String(max_length=255)
    session_token = String(max_length=255)
    product_id = String(required=True, sanitize=False)
    quantity = Integer(default=1)


@shopping.command(part_of="Cart")
class SetCartItemQuantity:
    account_id = String(max_length=255)
    session_token = String(max_length=255)
    product_id = String(required=True, sanitize=False)
    quantity = Integer(required=True)


@shopping.command(part_of="Cart")
class RemoveFromCart:
    account_id = String(max_length=255)
    session_token = String(max_length=255)
    product_id = String(required=True, sanitize=False)


@shopping.command(part_of="Cart")
class ClearCart:
    account_id = String(max_length=255)
    session_token = String(max_length=255)


@shopping.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        owner = CartOwner.for_command(command)
        now = current_domain.clock.now()
        repo = current_domain.repository_for(Cart)

        cart = repo.for_owner(owner, now)
        if cart is None:
            cart = Cart.create(owner, now=now, retention_days=get_settings().anonymous_cart_retention_days)

        LineItemReconciler(get_catalogue()).upsert_item(cart, command.product_id, command.quantity, now=now)
        repo.add(cart)
        return cart

    @handle(SetCartItemQuantity)
    def set_quantity(self, command):
        now = current_domain.clock.now()
        repo = current_domain.repository_for(Cart)
        cart = repo.require(CartOwner.for_command(command), now)

        LineItemReconciler(get_catalogue()).set_quantity(cart, command.product_id, command.quantity, now=now)
        repo.add(cart)
        return cart

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        now = current_domain.clock.now()
        repo = current_domain.repository_for(Cart)
        cart = repo.require(CartOwner.for_command(command), now)

        if LineItemReconciler(get_catalogue()).remove_item(cart, command.product_id, now=now):
            repo.add(cart)
        return cart

    @handle(ClearCart)
    def clear_cart(self, command):
        now = current_domain.clock.now()
        repo = current_domain.repository_for(Cart)
        cart = repo.require(CartOwner.for_command(command), now)

        LineItemReconciler(get_catalogue()).clear(cart, now=now)
        repo.add(cart)
        return cart
