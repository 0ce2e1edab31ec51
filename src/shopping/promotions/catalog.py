"""Promotion catalog adapters.

``StaticPromotionCatalog`` serves rules held in memory (seeded with the
storefront's standing promotions). ``CachingPromotionCatalog`` wraps any
catalog with an injected ``PromotionCache``.
"""

from decimal import Decimal

from shopping.promotions.cache import MISSING, PromotionCache
from shopping.promotions.port import PromotionCatalog
from shopping.promotions.rule import PromotionKind, PromotionRule, normalize_code
from shopping.utils.logging import get_logger

logger = get_logger(__name__)


def default_promotions() -> list[PromotionRule]:
    return [
        PromotionRule(
            code="WELCOME15",
            kind=PromotionKind.PERCENTAGE,
            value=Decimal(15),
            minimum_order_value=500_000,
            description="15% off your order",
        ),
        PromotionRule(
            code="FREESHIPPING",
            kind=PromotionKind.FREE_SHIPPING,
            minimum_order_value=800_000,
            description="Free shipping on your order",
        ),
        PromotionRule(
            code="BUNDLE25",
            kind=PromotionKind.PERCENTAGE,
            value=Decimal(25),
            minimum_order_value=1_500_000,
            required_categories=frozenset({"Brakes", "Oil", "Filters"}),
            required_category_count=3,
            description="25% off when ordering car parts bundle",
        ),
    ]


class StaticPromotionCatalog(PromotionCatalog):
    def __init__(self, rules=None) -> None:
        self.rules: dict[str, PromotionRule] = {}
        self.calls: list[str] = []
        for rule in default_promotions() if rules is None else rules:
            self.add(rule)

    def add(self, rule: PromotionRule) -> PromotionRule:
        self.rules[rule.code] = rule
        return rule

    def remove(self, code: str) -> None:
        self.rules.pop(normalize_code(code), None)

    def get_promotion(self, code: str) -> PromotionRule | None:
        code = normalize_code(code)
        self.calls.append(code)
        return self.rules.get(code)


class CachingPromotionCatalog(PromotionCatalog):
    """Serve lookups from ``cache`` first; only known codes are cached."""

    def __init__(self, inner: PromotionCatalog, cache: PromotionCache, ttl: float | None = None) -> None:
        self.inner = inner
        self.cache = cache
        self.ttl = ttl

    def get_promotion(self, code: str) -> PromotionRule | None:
        code = normalize_code(code)
        cached = self.cache.get(code)
        if cached is not MISSING:
            return cached

        rule = self.inner.get_promotion(code)
        if rule is not None:
            self.cache.set(code, rule, self.ttl)
            logger.debug("Cached promotion rule", code=code, ttl=self.ttl)
        return rule

    def invalidate(self, code: str) -> bool:
        return self.cache.evict(normalize_code(code))
