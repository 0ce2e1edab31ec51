"""Price breakdown: the itemised, transient result of pricing a cart.

All amounts are integers in the smallest currency subunit. A breakdown is
derived on demand and never persisted.
"""

from dataclasses import dataclass, field
from enum import Enum


class DiscountKind(Enum):
    BULK = "bulk_discount"
    PROMOTION = "promotion"
    FREE_SHIPPING = "free_shipping"


class PromotionFailure(Enum):
    """Why a supplied promotion code did not apply. Never raised, only reported."""

    UNKNOWN_CODE = "UnknownCode"
    EXPIRED = "Expired"
    BELOW_MINIMUM = "BelowMinimum"
    MISSING_REQUIRED_CATEGORIES = "MissingRequiredCategories"
    UNAVAILABLE = "Unavailable"


@dataclass(frozen=True)
class PricingOptions:
    apply_discounts: bool = True
    apply_bulk_discount: bool = True
    promotion_code: str | None = None


@dataclass(frozen=True)
class DiscountLine:
    """One applied discount.

    ``FREE_SHIPPING`` lines record the waived shipping fee; they do not reduce
    the goods amount that tax is computed on.
    """

    kind: DiscountKind
    amount: int
    description: str
    product_id: str | None = None
    code: str | None = None

    @property
    def reduces_goods(self) -> bool:
        return self.kind != DiscountKind.FREE_SHIPPING

    def to_dict(self):
        return {
            "kind": self.kind.value,
            "amount": self.amount,
            "description": self.description,
            "product_id": self.product_id,
            "code": self.code,
        }


@dataclass(frozen=True)
class PromotionOutcome:
    code: str
    applied: bool
    failure: PromotionFailure | None = None
    message: str = ""

    def to_dict(self):
        return {
            "code": self.code,
            "applied": self.applied,
            "failure": self.failure.value if self.failure else None,
            "message": self.message,
        }


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal: int
    total_item_count: int
    discount_lines: tuple[DiscountLine, ...] = field(default_factory=tuple)
    net_amount: int = 0
    tax: int = 0
    shipping: int = 0
    total: int = 0
    promotion: PromotionOutcome | None = None

    @property
    def discount_total(self) -> int:
        """Sum of the discounts taken off the goods (excludes waived shipping)."""
        return sum(line.amount for line in self.discount_lines if line.reduces_goods)

    @property
    def shipping_waived(self) -> bool:
        return any(line.kind == DiscountKind.FREE_SHIPPING for line in self.discount_lines)

    @property
    def promotion_failure(self) -> PromotionFailure | None:
        return self.promotion.failure if self.promotion else None

    def to_dict(self):
        return {
            "subtotal": self.subtotal,
            "total_item_count": self.total_item_count,
            "discount_lines": [line.to_dict() for line in self.discount_lines],
            "discount_total": self.discount_total,
            "net_amount": self.net_amount,
            "tax": self.tax,
            "shipping": self.shipping,
            "shipping_waived": self.shipping_waived,
            "total": self.total,
            "promotion": self.promotion.to_dict() if self.promotion else None,
        }
