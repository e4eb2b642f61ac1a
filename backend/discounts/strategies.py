from abc import ABC, abstractmethod
from decimal import Decimal, ROUND_HALF_UP

from .models import Promotion

CENTS = Decimal("0.01")


class DiscountStrategy(ABC):
    """The interface for a promotion discount calculation."""

    @abstractmethod
    def calculate(self, subtotal: Decimal, promotion: Promotion) -> Decimal:
        pass


class PercentageDiscountStrategy(DiscountStrategy):
    """Percentage of the recomputed subtotal."""

    def calculate(self, subtotal: Decimal, promotion: Promotion) -> Decimal:
        amount = subtotal * Decimal(promotion.discount_value) / Decimal("100")
        return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


class FixedAmountDiscountStrategy(DiscountStrategy):
    """Flat currency amount off the order."""

    def calculate(self, subtotal: Decimal, promotion: Promotion) -> Decimal:
        return Decimal(promotion.discount_value).quantize(CENTS, rounding=ROUND_HALF_UP)


class DiscountStrategyFactory:
    """
    Factory for creating a discount strategy based on the promotion type.
    """

    _strategies = {
        Promotion.DiscountType.PERCENTAGE: PercentageDiscountStrategy,
        Promotion.DiscountType.FIXED: FixedAmountDiscountStrategy,
    }

    @classmethod
    def get_strategy(cls, promotion: Promotion) -> DiscountStrategy:
        strategy_class = cls._strategies.get(promotion.discount_type)
        if strategy_class is None:
            raise ValueError(f"No discount strategy for type '{promotion.discount_type}'")
        return strategy_class()

    @classmethod
    def discount_for(cls, subtotal: Decimal, promotion: Promotion) -> Decimal:
        """Discount amount, clamped to [0, subtotal]."""
        amount = cls.get_strategy(promotion).calculate(subtotal, promotion)
        return max(Decimal("0.00"), min(amount, subtotal))
