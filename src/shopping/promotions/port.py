"""Promotion catalog port (abstract interface)."""

from abc import ABC, abstractmethod

from shopping.promotions.rule import PromotionRule


class PromotionCatalogUnavailable(Exception):
    """The promotion catalog could not be reached."""


class PromotionCatalog(ABC):
    @abstractmethod
    def get_promotion(self, code: str) -> PromotionRule | None:
        """Return the rule for ``code``, or None when the code is unknown."""
        ...
