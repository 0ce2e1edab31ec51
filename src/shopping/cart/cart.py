"""Cart aggregate (CQRS): owner identity, line items and derived totals.

A cart belongs to exactly one owner, either a signed-in account or an
anonymous session token, and holds at most one line per product. Its totals
are derived data: every mutation recomputes them from the full item list
instead of patching the previous values.

Anonymous carts expire a fixed retention window after they were created.
Account carts never expire.
"""

import re
from datetime import UTC, datetime, timedelta
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Integer, String

from shopping.cart.events import (
    CartCleared,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
    PromotionCodeApplied,
    PromotionCodeRemoved,
)
from shopping.domain import shopping
from shopping.exceptions import InvalidOwner, InvalidQuantity, ItemNotInCart
from shopping.shared.money import line_total

SESSION_TOKEN_PATTERN = re.compile(r"^[A-Za-z0-9_-]{10,100}$")
ACCOUNT_ID_MAX_LENGTH = 64


class OwnerKind(Enum):
    ACCOUNT = "account"
    SESSION = "session"


def validate_quantity(quantity):
    """Reject anything that is not an integer of at least 1. Never clamps."""
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise InvalidQuantity(quantity)
    return quantity


def as_utc(value):
    """SQL stores hand datetimes back naive; they were written in UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


@shopping.value_object
class CartOwner:
    """Exactly one of ``account_id`` or ``session_token``."""

    account_id = String(max_length=255)
    session_token = String(max_length=255)

    @invariant.post
    def cart_must_have_exactly_one_owner(self):
        if bool(self.account_id) == bool(self.session_token):
            raise ValidationError({"owner": ["A cart must belong to exactly one account or one session token"]})

    @invariant.post
    def session_token_must_be_well_formed(self):
        if self.session_token and not SESSION_TOKEN_PATTERN.match(self.session_token):
            raise ValidationError({"session_token": ["Invalid session ID format"]})

    @invariant.post
    def account_id_must_fit(self):
        if self.account_id and len(self.account_id) > ACCOUNT_ID_MAX_LENGTH:
            raise ValidationError(
                {"account_id": [f"Account ID must be at most {ACCOUNT_ID_MAX_LENGTH} characters"]}
            )

    @classmethod
    def build(cls, account_id=None, session_token=None):
        """Construct an owner, reporting a malformed one as ``InvalidOwner``."""
        try:
            return cls(account_id=account_id or None, session_token=session_token or None)
        except ValidationError as exc:
            messages = [message for field_messages in exc.messages.values() for message in field_messages]
            raise InvalidOwner(
                messages[0] if messages else "Invalid cart owner",
                {"account_id": account_id, "session_token": session_token},
            ) from exc

    @classmethod
    def account(cls, account_id):
        return cls.build(account_id=str(account_id))

    @classmethod
    def session(cls, session_token):
        return cls.build(session_token=session_token)

    @classmethod
    def of(cls, kind, value):
        if OwnerKind(kind) == OwnerKind.ACCOUNT:
            return cls.account(value)
        return cls.session(value)

    @classmethod
    def for_command(cls, command):
        return cls.build(account_id=command.account_id, session_token=command.session_token)

    @property
    def kind(self) -> OwnerKind:
        return OwnerKind.ACCOUNT if self.account_id else OwnerKind.SESSION

    @property
    def value(self) -> str:
        return self.account_id or self.session_token

    @property
    def is_anonymous(self) -> bool:
        return self.kind == OwnerKind.SESSION

    @property
    def key(self) -> str:
        return f"{self.kind.value}:{self.value}"

    def __str__(self):
        return self.key


@shopping.entity(part_of="Cart")
class LineItem:
    """One product in a cart with its own quantity and price snapshot."""

    product_id = String(required=True, max_length=255, sanitize=False)
    display_name = String(required=True, max_length=255, sanitize=False)
    quantity = Integer(required=True, min_value=1)
    unit_price = Integer(required=True, min_value=0)
    thumbnail = String(max_length=2048, default="", sanitize=False)
    category = String(max_length=255, sanitize=False)
    position = Integer(default=0)

    @property
    def line_total(self) -> int:
        return line_total(self.quantity, self.unit_price)

    def to_payload(self):
        return {
            "product_id": self.product_id,
            "display_name": self.display_name,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "thumbnail": self.thumbnail or "",
            "category": self.category,
            "line_total": self.line_total,
        }


@shopping.aggregate
class Cart:
    account_id = String(max_length=ACCOUNT_ID_MAX_LENGTH, unique=True, sanitize=False)
    session_token = String(max_length=100, unique=True, sanitize=False)
    items = HasMany(LineItem)
    total_item_count = Integer(default=0, min_value=0)
    total_price = Integer(default=0, min_value=0)
    applied_promotion_code = String(max_length=50)
    expires_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, owner, now=None, retention_days=7):
        """Start an empty cart. Only anonymous carts get an expiry."""
        now = now or datetime.now(UTC)
        return cls(
            account_id=owner.account_id,
            session_token=owner.session_token,
            expires_at=now + timedelta(days=retention_days) if owner.is_anonymous else None,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def owner(self) -> CartOwner:
        return CartOwner.build(account_id=self.account_id, session_token=self.session_token)

    @property
    def lines(self):
        """Line items in the order they were first added."""
        return sorted(self.items, key=lambda item: item.position or 0)

    def find_item(self, product_id):
        return next((item for item in self.items if item.product_id == str(product_id)), None)

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def has_changes(self) -> bool:
        """True while there are raised events not yet committed."""
        return bool(self._events)

    def is_expired(self, now=None) -> bool:
        if self.expires_at is None:
            return False
        return as_utc(self.expires_at) <= (now or datetime.now(UTC))

    def totals_are_consistent(self) -> bool:
        return self.total_item_count == sum(item.quantity for item in self.items) and self.total_price == sum(
            item.line_total for item in self.items
        )

    # -------------------------------------------------------------------
    # Line mutation
    # -------------------------------------------------------------------
    def append_item(self, item, now=None):
        if self.find_item(item.product_id) is not None:
            raise ValueError(f"Cart already has a line for product {item.product_id}")

        item.position = max((line.position or 0 for line in self.items), default=0) + 1
        self.add_items(item)
        self._changed(now)
        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                owner=self.owner.key,
                product_id=item.product_id,
                quantity=item.quantity,
                new_quantity=item.quantity,
                unit_price=item.unit_price,
            )
        )
        return item

    def increment_item(self, product_id, quantity, now=None):
        """Add ``quantity`` to an existing line; its unit price stays as snapshotted."""
        validate_quantity(quantity)
        item = self.require_item(product_id)
        item.quantity += quantity
        self._changed(now)
        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                owner=self.owner.key,
                product_id=item.product_id,
                quantity=quantity,
                new_quantity=item.quantity,
                unit_price=item.unit_price,
            )
        )
        return item

    def set_item_quantity(self, product_id, quantity, now=None):
        validate_quantity(quantity)
        item = self.require_item(product_id)
        previous_quantity = item.quantity
        item.quantity = quantity
        self._changed(now)
        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                owner=self.owner.key,
                product_id=item.product_id,
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )
        return item

    def remove_item(self, product_id, now=None):
        """Drop the line for ``product_id``. Returns False when there was none."""
        item = self.find_item(product_id)
        if item is None:
            return False

        self.remove_items(item)
        self._changed(now)
        self.raise_(CartItemRemoved(cart_id=str(self.id), owner=self.owner.key, product_id=item.product_id))
        return True

    def clear(self, now=None):
        removed = list(self.items)
        for item in removed:
            self.remove_items(item)
        self._changed(now)
        self.raise_(CartCleared(cart_id=str(self.id), owner=self.owner.key, removed_line_count=len(removed)))

    # -------------------------------------------------------------------
    # Promotion code
    # -------------------------------------------------------------------
    def apply_promotion_code(self, code, now=None):
        self.applied_promotion_code = code
        self.touch(now)
        self.raise_(PromotionCodeApplied(cart_id=str(self.id), owner=self.owner.key, code=code))

    def remove_promotion_code(self, now=None):
        code = self.applied_promotion_code
        if code is None:
            return False

        self.applied_promotion_code = None
        self.touch(now)
        self.raise_(PromotionCodeRemoved(cart_id=str(self.id), owner=self.owner.key, code=code))
        return True

    # -------------------------------------------------------------------
    # Totals and bookkeeping
    # -------------------------------------------------------------------
    def recalculate(self):
        """Recompute both totals from the full item list."""
        self.total_item_count = sum(item.quantity for item in self.items)
        self.total_price = sum(item.line_total for item in self.items)
        return self

    def touch(self, now=None):
        self.updated_at = now or datetime.now(UTC)

    def require_item(self, product_id):
        item = self.find_item(product_id)
        if item is None:
            raise ItemNotInCart(product_id)
        return item

    def to_payload(self):
        expires_at = as_utc(self.expires_at)
        return {
            "owner": {"kind": self.owner.kind.value, "id": self.owner.value},
            "items": [item.to_payload() for item in self.lines],
            "total_item_count": self.total_item_count,
            "total_price": self.total_price,
            "applied_promotion_code": self.applied_promotion_code,
            "expires_at": expires_at.isoformat() if expires_at else None,
        }

    def _changed(self, now):
        self.recalculate()
        self.touch(now)
