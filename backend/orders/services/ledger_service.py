import logging

from django.db import DatabaseError, transaction

from discounts.services import PromotionService
from giftcards.services import GiftCardService
from inventory.services import InventoryService
from loyalty.services import LoyaltyService

logger = logging.getLogger(__name__)


class LedgerService:
    """
    Side effects of an order on the per-tenant counters.

    Each counter is changed by its own service through an atomic database
    primitive. This class only decides what a failure means for the order:

    - promotion cap reached, gift card unusable: raised, the order is rolled back
    - a database error while counting a promotion use, or any error in the
      inventory or loyalty update: logged, the order stands

    Best-effort steps run in a savepoint so a failed statement cannot abort
    the enclosing order transaction.
    """

    @staticmethod
    def consume_promotion(promotion) -> bool:
        """
        Returns:
            True if the use was counted, False if a database error was swallowed

        Raises:
            PromotionExhausted, PromotionNotApplicable
        """
        try:
            with transaction.atomic():
                PromotionService.redeem(promotion)
            return True
        except DatabaseError as e:
            logger.error(f"Failed to count use of promotion {promotion.pk}: {e}")
            return False

    @staticmethod
    def debit_gift_card(order, code):
        """
        Pay what the card covers of the order total. Returns the redemption
        result of GiftCardService.redeem().

        Raises:
            ResourceNotFound, GiftCardUnavailable
        """
        return GiftCardService.redeem(order.tenant, code, order.total, order=order)

    @staticmethod
    def decrement_inventory(order, lines):
        try:
            with transaction.atomic():
                InventoryService.decrement_for_order(order, lines)
        except Exception as e:
            logger.error(f"Inventory update failed for order {order.order_number}: {e}")

    @staticmethod
    def accrue_loyalty(order):
        try:
            with transaction.atomic():
                return LoyaltyService.accrue_for_order(order)
        except Exception as e:
            logger.error(f"Loyalty accrual failed for order {order.order_number}: {e}")
            return None
