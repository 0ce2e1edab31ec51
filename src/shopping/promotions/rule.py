"""Promotion rule definitions, as handed out by the promotion catalog."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum


class PromotionKind(Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"
    FREE_SHIPPING = "free_shipping"


@dataclass(frozen=True)
class PromotionRule:
    """A promotion code and the conditions under which it applies.

    ``value`` is a percentage for ``PERCENTAGE`` rules (``15`` is 15%) and an
    amount in whole subunits for ``FIXED_AMOUNT`` rules. It is ignored for
    ``FREE_SHIPPING``. When ``required_categories`` is set the cart must hold
    lines from at least ``required_category_count`` distinct categories of
    that set (all of them when the count is omitted).
    """

    code: str
    kind: PromotionKind
    value: Decimal = Decimal(0)
    minimum_order_value: int = 0
    expires_at: datetime | None = None
    required_categories: frozenset[str] = field(default_factory=frozenset)
    required_category_count: int | None = None
    description: str = ""

    def __post_init__(self):
        object.__setattr__(self, "code", normalize_code(self.code))
        object.__setattr__(self, "kind", PromotionKind(self.kind))
        object.__setattr__(self, "value", Decimal(str(self.value)))
        object.__setattr__(self, "required_categories", frozenset(self.required_categories))

    @property
    def category_threshold(self) -> int:
        if not self.required_categories:
            return 0
        if self.required_category_count is None:
            return len(self.required_categories)
        return self.required_category_count

    def is_expired(self, now=None) -> bool:
        if self.expires_at is None:
            return False
        now = now or datetime.now(UTC)
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        return expires_at < now


def normalize_code(code: str) -> str:
    return code.strip().upper()
