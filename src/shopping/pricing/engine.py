"""Pricing engine: line items in, itemised price breakdown out.

The order of operations is fixed:

1. subtotal and item count
2. bulk discount per qualifying line
3. promotion code (soft failure: priced as if no code was given)
4. net amount = subtotal - discounts; discount lines are trimmed in order
   so together they never exceed the subtotal
5. shipping (flat fee below the free-shipping threshold, waived by a
   free-shipping promotion)
6. tax on the net amount
7. total = net + tax + shipping

Nothing here touches the cart repository. The only I/O is the promotion lookup.
"""

from dataclasses import replace
from datetime import UTC, datetime

from shopping.pricing.breakdown import (
    DiscountKind,
    DiscountLine,
    PriceBreakdown,
    PricingOptions,
    PromotionFailure,
    PromotionOutcome,
)
from shopping.pricing.rules import check_eligibility, promotion_discount
from shopping.promotions.port import PromotionCatalog, PromotionCatalogUnavailable
from shopping.promotions.rule import normalize_code
from shopping.shared.money import apply_rate, to_rate
from shopping.utils.logging import get_logger

logger = get_logger(__name__)


def cap_discounts(lines, subtotal: int):
    """Trim discount lines in order so their sum never exceeds ``subtotal``.

    The first line that would overshoot is cut down to what is left; any
    line after it is kept at zero so the breakdown still lists it.
    """
    remaining = subtotal
    capped = []
    for line in lines:
        amount = min(line.amount, remaining)
        capped.append(line if amount == line.amount else replace(line, amount=amount))
        remaining -= amount
    return capped


class PricingEngine:
    def __init__(self, settings, promotions: PromotionCatalog | None = None) -> None:
        self.promotions = promotions
        self.tax_rate = to_rate(settings.tax_rate)
        self.shipping_fee = settings.shipping_fee
        self.free_shipping_threshold = settings.free_shipping_threshold
        self.bulk_min_quantity = settings.bulk_discount_min_quantity
        self.bulk_rate = to_rate(settings.bulk_discount_rate)

    def price(self, items, options: PricingOptions | None = None, now: datetime | None = None) -> PriceBreakdown:
        options = options or PricingOptions()
        now = now or datetime.now(UTC)
        items = list(items)

        subtotal = sum(item.line_total for item in items)
        total_item_count = sum(item.quantity for item in items)

        discount_lines = []
        if options.apply_discounts and options.apply_bulk_discount:
            discount_lines.extend(self.bulk_discounts(items))

        promotion = None
        waive_shipping = False
        if options.apply_discounts and options.promotion_code:
            promotion, promotion_line = self._apply_promotion(
                options.promotion_code,
                items,
                subtotal,
                sum(line.amount for line in discount_lines),
                now,
            )
            if promotion_line is not None:
                if promotion_line.kind == DiscountKind.FREE_SHIPPING:
                    waive_shipping = True
                else:
                    discount_lines.append(promotion_line)

        discount_lines = cap_discounts(discount_lines, subtotal)
        net_amount = subtotal - sum(line.amount for line in discount_lines)

        shipping = self.shipping_for(net_amount) if items else 0
        if waive_shipping:
            discount_lines.append(
                DiscountLine(
                    kind=DiscountKind.FREE_SHIPPING,
                    amount=shipping,
                    description=promotion_line.description,
                    code=promotion_line.code,
                )
            )
            shipping = 0

        tax = apply_rate(net_amount, self.tax_rate)

        return PriceBreakdown(
            subtotal=subtotal,
            total_item_count=total_item_count,
            discount_lines=tuple(discount_lines),
            net_amount=net_amount,
            tax=tax,
            shipping=shipping,
            total=net_amount + tax + shipping,
            promotion=promotion,
        )

    def bulk_discounts(self, items):
        """One discount line per line item whose quantity reaches the bulk threshold."""
        percent = f"{float(self.bulk_rate * 100):g}"
        return [
            DiscountLine(
                kind=DiscountKind.BULK,
                amount=apply_rate(item.line_total, self.bulk_rate),
                description=f"{percent}% off for buying {self.bulk_min_quantity}+ of {item.display_name}",
                product_id=item.product_id,
            )
            for item in items
            if item.quantity >= self.bulk_min_quantity
        ]

    def shipping_for(self, net_amount: int) -> int:
        return self.shipping_fee if net_amount < self.free_shipping_threshold else 0

    def _apply_promotion(self, code, items, subtotal, discounted_so_far, now):
        code = normalize_code(code)

        if self.promotions is None:
            return self._rejected(code, PromotionFailure.UNKNOWN_CODE, "Invalid promotion code"), None

        try:
            rule = self.promotions.get_promotion(code)
        except PromotionCatalogUnavailable as exc:
            logger.warning("Promotion catalog unavailable", code=code, error=str(exc))
            return self._rejected(code, PromotionFailure.UNAVAILABLE, "Promotions are temporarily unavailable"), None

        failure, message = check_eligibility(rule, items, subtotal, now)
        if failure is not None:
            return self._rejected(code, failure, message), None

        return (
            PromotionOutcome(code=code, applied=True, message=f"Promotion code '{code}' applied successfully"),
            promotion_discount(rule, subtotal, discounted_so_far),
        )

    @staticmethod
    def _rejected(code, failure, message):
        logger.info("Promotion code not applied", code=code, reason=failure.value)
        return PromotionOutcome(code=code, applied=False, failure=failure, message=message)
