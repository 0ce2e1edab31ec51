"""Tests for the Cart aggregate, its owner identity and line items."""

from datetime import UTC, datetime, timedelta

import pytest
from protean.exceptions import ValidationError

from shopping.cart.cart import Cart, CartOwner, LineItem, OwnerKind, validate_quantity
from shopping.cart.events import CartCleared, CartItemAdded, CartItemRemoved, CartQuantityUpdated
from shopping.exceptions import InvalidOwner, InvalidQuantity, ItemNotInCart

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _make_cart(owner=None):
    return Cart.create(owner or CartOwner.account("cust-001"), now=NOW)


def _item(product_id="prod-001", quantity=1, unit_price=10_000, **overrides):
    return LineItem(
        product_id=product_id,
        display_name=overrides.pop("display_name", f"Product {product_id}"),
        quantity=quantity,
        unit_price=unit_price,
        **overrides,
    )


class TestCartOwner:
    def test_account_owner(self):
        owner = CartOwner.account("cust-001")
        assert owner.kind == OwnerKind.ACCOUNT
        assert owner.value == "cust-001"
        assert owner.is_anonymous is False
        assert owner.key == "account:cust-001"

    def test_session_owner(self):
        owner = CartOwner.session("sess-guest-0001")
        assert owner.kind == OwnerKind.SESSION
        assert owner.is_anonymous is True
        assert str(owner) == "session:sess-guest-0001"

    def test_of_builds_from_kind_string(self):
        assert CartOwner.of("account", "cust-001") == CartOwner.account("cust-001")
        assert CartOwner.of(OwnerKind.SESSION, "sess-guest-0001") == CartOwner.session("sess-guest-0001")

    def test_both_identifiers_rejected(self):
        with pytest.raises(InvalidOwner):
            CartOwner.build(account_id="cust-001", session_token="sess-guest-0001")

    def test_neither_identifier_rejected(self):
        with pytest.raises(InvalidOwner) as exc:
            CartOwner.build()
        assert exc.value.message == "A cart must belong to exactly one account or one session token"

    def test_value_object_invariant_raises_validation_error(self):
        with pytest.raises(ValidationError) as exc:
            CartOwner(account_id="cust-001", session_token="sess-guest-0001")
        assert "owner" in exc.value.messages

    @pytest.mark.parametrize("token", ["short", "has spaces in it", "semi;colon-token", "x" * 101])
    def test_malformed_session_token_rejected(self, token):
        with pytest.raises(InvalidOwner) as exc:
            CartOwner.session(token)
        assert exc.value.message == "Invalid session ID format"

    def test_overlong_account_id_rejected(self):
        with pytest.raises(InvalidOwner):
            CartOwner.account("a" * 65)


class TestQuantityValidation:
    def test_accepts_positive_integers(self):
        assert validate_quantity(1) == 1
        assert validate_quantity(25) == 25

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, "2", None, True])
    def test_rejects_everything_else(self, quantity):
        with pytest.raises(InvalidQuantity):
            validate_quantity(quantity)

    def test_line_item_rejects_zero_quantity(self):
        with pytest.raises(ValidationError) as exc:
            _item(quantity=0)
        assert "quantity" in exc.value.messages

    def test_line_item_rejects_negative_price(self):
        with pytest.raises(ValidationError) as exc:
            _item(unit_price=-1)
        assert "unit_price" in exc.value.messages

    def test_line_item_keeps_product_text_verbatim(self):
        item = _item(display_name="Nuts & Bolts <M8>")
        assert item.display_name == "Nuts & Bolts <M8>"


class TestCartCreation:
    def test_account_cart_never_expires(self):
        cart = _make_cart()
        assert cart.expires_at is None
        assert cart.is_expired(NOW + timedelta(days=365)) is False

    def test_anonymous_cart_expires_after_retention(self):
        cart = Cart.create(CartOwner.session("sess-guest-0001"), now=NOW, retention_days=7)
        assert cart.expires_at == NOW + timedelta(days=7)
        assert cart.is_expired(NOW + timedelta(days=6)) is False
        assert cart.is_expired(NOW + timedelta(days=7)) is True

    def test_starts_empty_and_unpersisted(self):
        cart = _make_cart()
        assert cart.is_empty
        assert cart.total_item_count == 0
        assert cart.total_price == 0
        assert cart.state_.is_persisted is False


class TestCartItems:
    def test_append_recomputes_totals(self):
        cart = _make_cart()
        cart.append_item(_item("prod-001", quantity=2, unit_price=10_000))
        cart.append_item(_item("prod-002", quantity=1, unit_price=5_500))

        assert cart.total_item_count == 3
        assert cart.total_price == 25_500
        assert cart.totals_are_consistent()

    def test_lines_keep_insertion_order(self):
        cart = _make_cart()
        for product_id in ("prod-003", "prod-001", "prod-002"):
            cart.append_item(_item(product_id))
        assert [item.product_id for item in cart.lines] == ["prod-003", "prod-001", "prod-002"]

    def test_append_rejects_duplicate_product(self):
        cart = _make_cart()
        cart.append_item(_item("prod-001"))
        with pytest.raises(ValueError):
            cart.append_item(_item("prod-001"))

    def test_increment_keeps_snapshotted_price(self):
        cart = _make_cart()
        cart.append_item(_item("prod-001", quantity=2, unit_price=10_000))
        cart.increment_item("prod-001", 3)

        item = cart.find_item("prod-001")
        assert item.quantity == 5
        assert item.unit_price == 10_000
        assert cart.total_price == 50_000

    def test_set_quantity_replaces(self):
        cart = _make_cart()
        cart.append_item(_item("prod-001", quantity=2))
        cart.set_item_quantity("prod-001", 7)
        assert cart.find_item("prod-001").quantity == 7
        assert cart.total_item_count == 7

    def test_set_quantity_on_missing_line(self):
        cart = _make_cart()
        with pytest.raises(ItemNotInCart):
            cart.set_item_quantity("prod-404", 1)

    def test_remove_item_is_idempotent(self):
        cart = _make_cart()
        cart.append_item(_item("prod-001", quantity=2))
        cart.append_item(_item("prod-002"))

        assert cart.remove_item("prod-001") is True
        snapshot = [item.to_payload() for item in cart.lines], cart.total_item_count, cart.total_price

        assert cart.remove_item("prod-001") is False
        assert ([item.to_payload() for item in cart.lines], cart.total_item_count, cart.total_price) == snapshot

    def test_clear_zeroes_totals_but_keeps_promotion_code(self):
        cart = _make_cart()
        cart.append_item(_item("prod-001", quantity=2))
        cart.apply_promotion_code("WELCOME15")
        cart.clear()

        assert len(cart.items) == 0
        assert cart.total_item_count == 0
        assert cart.total_price == 0
        assert cart.applied_promotion_code == "WELCOME15"


class TestCartEvents:
    def test_mutations_raise_events(self):
        cart = _make_cart()
        cart.append_item(_item("prod-001", quantity=2))
        cart.increment_item("prod-001", 1)
        cart.set_item_quantity("prod-001", 4)
        cart.remove_item("prod-001")
        cart.clear()

        events = cart._events
        assert [type(e) for e in events] == [
            CartItemAdded,
            CartItemAdded,
            CartQuantityUpdated,
            CartItemRemoved,
            CartCleared,
        ]
        assert events[1].new_quantity == 3
        assert events[2].previous_quantity == 3

    def test_has_changes_tracks_pending_events(self):
        cart = _make_cart()
        assert not cart.has_changes
        cart.append_item(_item())
        assert cart.has_changes

    def test_noop_remove_raises_nothing(self):
        cart = _make_cart()
        cart.remove_item("prod-404")
        assert cart._events == []

    def test_event_payload(self):
        cart = _make_cart()
        cart.append_item(_item("prod-001", quantity=2, unit_price=10_000))
        event = cart._events[0]
        assert event.cart_id == str(cart.id)
        assert event.owner == "account:cust-001"
        assert event.unit_price == 10_000
        assert CartItemAdded.__version__ == "v1"


class TestCartPayload:
    def test_payload_shape(self):
        cart = Cart.create(CartOwner.session("sess-guest-0001"), now=NOW)
        cart.append_item(_item("prod-001", quantity=2, unit_price=10_000))

        payload = cart.to_payload()
        assert payload["owner"] == {"kind": "session", "id": "sess-guest-0001"}
        assert payload["items"][0]["line_total"] == 20_000
        assert payload["total_price"] == 20_000
        assert payload["expires_at"] == (NOW + timedelta(days=7)).isoformat()
