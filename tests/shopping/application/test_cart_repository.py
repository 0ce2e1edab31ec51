"""Tests for the cart repository: owner lookups, expiry, versions and line syncing."""

import pytest
from protean import current_domain
from protean.exceptions import ExpectedVersionError, ValidationError

from shopping.cart.cart import Cart, CartOwner, LineItem
from shopping.exceptions import CartNotFound

ACCOUNT = CartOwner.account("cust-001")
SESSION = CartOwner.session("sess-guest-0001")


@pytest.fixture()
def repo(clock):
    return current_domain.repository_for(Cart)


def _new_cart(owner=ACCOUNT, *items):
    cart = Cart.create(owner, now=current_domain.clock.now())
    for item in items:
        cart.append_item(item)
    return cart


def _line(product_id, quantity=1, unit_price=1_000, **extra):
    return LineItem(
        product_id=product_id,
        display_name=product_id.title(),
        quantity=quantity,
        unit_price=unit_price,
        **extra,
    )


def _find(repo, owner):
    return repo.for_owner(owner, current_domain.clock.now())


class TestAddAndFind:
    def test_round_trip(self, repo):
        cart = _new_cart(ACCOUNT, _line("b", 2, 500, category="Oil"), _line("a", 1, 1_000, thumbnail="/a.png"))
        repo.add(cart)

        loaded = _find(repo, ACCOUNT)

        assert loaded.owner == ACCOUNT
        assert [item.to_payload() for item in loaded.lines] == [item.to_payload() for item in cart.lines]
        assert loaded.total_item_count == 3
        assert loaded.total_price == 2_000
        assert loaded.created_at == cart.created_at

    def test_missing_cart(self, repo):
        assert _find(repo, ACCOUNT) is None

    def test_require_raises_for_missing_cart(self, repo):
        with pytest.raises(CartNotFound) as exc:
            repo.require(ACCOUNT, current_domain.clock.now())
        assert exc.value.details == {"owner": "account:cust-001"}

    def test_account_and_session_carts_are_separate(self, repo):
        repo.add(_new_cart(ACCOUNT, _line("a")))
        repo.add(_new_cart(SESSION, _line("b")))

        assert [i.product_id for i in _find(repo, ACCOUNT).lines] == ["a"]
        assert [i.product_id for i in _find(repo, SESSION).lines] == ["b"]

    def test_lines_are_synced_on_add(self, repo):
        repo.add(_new_cart(ACCOUNT, _line("a"), _line("b"), _line("c")))
        version = _find(repo, ACCOUNT)._version

        cart = _find(repo, ACCOUNT)
        cart.remove_item("b")
        cart.set_item_quantity("c", 4)
        cart.append_item(_line("d", 2))
        repo.add(cart)

        loaded = _find(repo, ACCOUNT)
        assert [(i.product_id, i.quantity) for i in loaded.lines] == [("a", 1), ("c", 4), ("d", 2)]
        assert loaded.total_item_count == 7
        assert loaded._version == version + 1

    def test_stored_promotion_code(self, repo):
        cart = _new_cart(ACCOUNT, _line("a"))
        cart.apply_promotion_code("WELCOME15")
        repo.add(cart)
        assert _find(repo, ACCOUNT).applied_promotion_code == "WELCOME15"


class TestOneCartPerOwner:
    def test_second_fresh_cart_for_same_owner_is_rejected(self, repo):
        repo.add(_new_cart(ACCOUNT, _line("a")))

        with pytest.raises(ValidationError):
            repo.add(_new_cart(ACCOUNT, _line("b")))

        assert [i.product_id for i in _find(repo, ACCOUNT).lines] == ["a"]

    def test_stale_write_is_rejected(self, repo):
        repo.add(_new_cart(ACCOUNT, _line("a")))
        first = _find(repo, ACCOUNT)
        second = _find(repo, ACCOUNT)

        first.increment_item("a", 1)
        repo.add(first)

        second.append_item(_line("b"))
        with pytest.raises(ExpectedVersionError):
            repo.add(second)

        loaded = _find(repo, ACCOUNT)
        assert [(i.product_id, i.quantity) for i in loaded.lines] == [("a", 2)]


class TestRemove:
    def test_remove_deletes_cart_and_lines(self, repo):
        repo.add(_new_cart(SESSION, _line("a"), _line("b")))

        repo.remove(_find(repo, SESSION))

        assert _find(repo, SESSION) is None
        line_items = current_domain.repository_for(LineItem)._dao
        assert line_items.query.all().total == 0


class TestExpiry:
    def test_expired_anonymous_cart_is_never_returned(self, repo, clock):
        repo.add(_new_cart(SESSION, _line("a")))
        clock.advance(days=7, seconds=1)

        assert _find(repo, SESSION) is None

    def test_anonymous_cart_within_retention(self, repo, clock):
        repo.add(_new_cart(SESSION, _line("a")))
        clock.advance(days=6, hours=23)
        assert _find(repo, SESSION) is not None

    def test_account_carts_do_not_expire(self, repo, clock):
        repo.add(_new_cart(ACCOUNT, _line("a")))
        clock.advance(days=400)
        assert _find(repo, ACCOUNT) is not None

    def test_expired_cart_slot_can_be_reused(self, repo, clock):
        repo.add(_new_cart(SESSION, _line("a")))
        clock.advance(days=8)
        assert _find(repo, SESSION) is None

        repo.add(_new_cart(SESSION, _line("b")))

        assert [i.product_id for i in _find(repo, SESSION).lines] == ["b"]

    def test_purge_expired(self, repo, clock):
        repo.add(_new_cart(SESSION, _line("a")))
        repo.add(_new_cart(CartOwner.session("sess-guest-0002"), _line("a")))
        repo.add(_new_cart(ACCOUNT, _line("a")))
        clock.advance(days=3)
        repo.add(_new_cart(CartOwner.session("sess-guest-0003"), _line("a")))

        clock.advance(days=5)

        assert repo.purge_expired(clock.now()) == 2
        assert _find(repo, CartOwner.session("sess-guest-0003")) is not None
        assert _find(repo, ACCOUNT) is not None
