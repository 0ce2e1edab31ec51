"""Promotion rule evaluation: eligibility checks and discount computation."""

from datetime import datetime

from shopping.pricing.breakdown import DiscountKind, DiscountLine, PromotionFailure
from shopping.promotions.rule import PromotionKind, PromotionRule
from shopping.shared.money import floor_at_zero, percent_of


def check_eligibility(rule: PromotionRule | None, items, subtotal: int, now: datetime):
    """Return ``(failure, message)`` for a rule that does not apply, else ``(None, "")``.

    Checks run in a fixed order: existence, expiry, minimum order value,
    required categories. The minimum is compared against the subtotal before
    any discount.
    """
    if rule is None:
        return PromotionFailure.UNKNOWN_CODE, "Invalid promotion code"

    if rule.is_expired(now):
        return PromotionFailure.EXPIRED, "Promotion has expired"

    if rule.minimum_order_value and subtotal < rule.minimum_order_value:
        return (
            PromotionFailure.BELOW_MINIMUM,
            f"Order must be at least {rule.minimum_order_value:,} to use this code",
        )

    if rule.required_categories:
        present = {item.category for item in items if item.category in rule.required_categories}
        if len(present) < rule.category_threshold:
            return (
                PromotionFailure.MISSING_REQUIRED_CATEGORIES,
                f"This promotion requires items from {rule.category_threshold} different categories: "
                f"{', '.join(sorted(rule.required_categories))}",
            )

    return None, ""


def promotion_discount(rule: PromotionRule, subtotal: int, discounted_so_far: int) -> DiscountLine:
    """Discount line for an eligible rule.

    Percentages apply to the subtotal. Fixed amounts are capped at what is
    left after earlier discounts. Free shipping yields a zero-amount line that
    the engine fills in once the shipping fee is known.
    """
    if rule.kind == PromotionKind.PERCENTAGE:
        return DiscountLine(
            kind=DiscountKind.PROMOTION,
            amount=percent_of(subtotal, rule.value),
            description=rule.description or f"{rule.value:f}% off with {rule.code} promo code",
            code=rule.code,
        )

    if rule.kind == PromotionKind.FIXED_AMOUNT:
        remaining = floor_at_zero(subtotal - discounted_so_far)
        return DiscountLine(
            kind=DiscountKind.PROMOTION,
            amount=min(int(rule.value), remaining),
            description=rule.description or f"{int(rule.value):,} off with {rule.code} promo code",
            code=rule.code,
        )

    return DiscountLine(
        kind=DiscountKind.FREE_SHIPPING,
        amount=0,
        description=rule.description or f"Free shipping with {rule.code} promo code",
        code=rule.code,
    )
