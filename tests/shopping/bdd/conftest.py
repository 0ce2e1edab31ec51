"""Shared BDD fixtures and step definitions for the shopping domain."""

from dataclasses import replace

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, then

from shopping.cart.cart import Cart, CartOwner
from shopping.cart.items import AddToCart
from shopping.exceptions import CartError

ACCOUNT_ID = "cust-001"
SESSION_TOKEN = "sess-guest-0001"

_OWNERS = {
    "account": {"account_id": ACCOUNT_ID},
    "guest": {"session_token": SESSION_TOKEN},
}


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _find_cart(who):
    owner = CartOwner.build(**_OWNERS[who])
    return current_domain.repository_for(Cart).for_owner(owner, current_domain.clock.now())


def _add_to_cart(who, product_id, quantity):
    return _process(AddToCart(product_id=product_id, quantity=quantity, **_OWNERS[who]))


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def _collaborators(clock, products, promotions):
    """Every scenario runs against the fake clock, catalogue and promotions."""


@pytest.fixture()
def process():
    return _process


@pytest.fixture()
def add_to_cart():
    return _add_to_cart


@pytest.fixture()
def error():
    """Container for the cart error a When step captured."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('the {who} cart holds {qty:d} of "{product_id}"'))
def cart_holds(who, qty, product_id):
    _add_to_cart(who, product_id, qty)


@given(parsers.cfparse('the catalogue has {stock:d} of "{product_id}" in stock'))
def catalogue_stock(products, stock, product_id):
    products.add(replace(products.products[product_id], stock=stock))


@given(parsers.cfparse('"{product_id}" is no longer sold'))
def product_withdrawn(products, product_id):
    products.remove(product_id)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the {who} cart has {qty:d} of "{product_id}"'))
def cart_has_quantity(who, qty, product_id):
    item = _find_cart(who).find_item(product_id)
    assert item is not None, f"No line for {product_id}"
    assert item.quantity == qty


@then(parsers.cfparse('the {who} cart has no "{product_id}"'))
def cart_lacks_product(who, product_id):
    cart = _find_cart(who)
    assert cart is None or cart.find_item(product_id) is None


@then(parsers.cfparse("the {who} cart totals {amount:d}"))
def cart_totals(who, amount):
    cart = _find_cart(who)
    assert cart.total_price == amount
    assert cart.totals_are_consistent()


@then(parsers.cfparse("the {who} cart does not exist"))
def cart_gone(who):
    assert _find_cart(who) is None


@then(parsers.cfparse("the request is rejected with {code}"))
def request_rejected(error, code):
    assert isinstance(error["exc"], CartError), f"Expected {code}, got {error['exc']!r}"
    assert error["exc"].code == code
