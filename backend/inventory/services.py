from collections import defaultdict
import logging

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from core_backend.exceptions import ValidationFault
from .models import InventoryRecord, InventoryLog

logger = logging.getLogger(__name__)


class InventoryService:
    """
    Stock changes for tracked products.

    Every change locks the record row, applies the delta as a database-side
    expression and re-reads the result, so concurrent orders and restocks
    never overwrite each other with a stale value.
    """

    @staticmethod
    def _log_stock_operation(record, change_type, quantity_change, previous_quantity,
                             new_quantity, order=None, reason="", user=None):
        """
        Helper method to write an InventoryLog row.

        Runs in its own savepoint; a failure is logged and does not undo the
        stock change it describes.
        """
        try:
            with transaction.atomic():
                InventoryLog.all_objects.create(
                    tenant_id=record.tenant_id,
                    product_id=record.product_id,
                    change_type=change_type,
                    quantity_change=quantity_change,
                    previous_quantity=previous_quantity,
                    new_quantity=new_quantity,
                    order=order,
                    reason=reason,
                    performed_by=user,
                )
        except Exception as e:
            logger.error(f"Failed to log inventory change for product {record.product_id}: {e}")

    @staticmethod
    def get_or_create_record(product) -> InventoryRecord:
        record, _ = InventoryRecord.all_objects.get_or_create(
            product=product,
            defaults={'tenant_id': product.tenant_id},
        )
        return record

    @staticmethod
    def _apply_delta(record_id, delta):
        """Lock, add delta in the database, return (record, previous, new)."""
        locked = InventoryRecord.all_objects.select_for_update().get(pk=record_id)
        previous_quantity = locked.stock_quantity
        InventoryRecord.all_objects.filter(pk=record_id).update(
            stock_quantity=F('stock_quantity') + delta,
            updated_at=timezone.now(),
        )
        locked.refresh_from_db()
        return locked, previous_quantity, locked.stock_quantity

    @staticmethod
    def _maybe_queue_low_stock_alert(record):
        """
        Queue one alert per dip below threshold.

        The flag flip is itself a conditional update, so only the order that
        actually crossed the threshold queues the task.
        """
        if record.stock_quantity > record.low_stock_threshold:
            return

        flipped = InventoryRecord.all_objects.filter(
            pk=record.pk, low_stock_notified=False
        ).update(low_stock_notified=True)

        if flipped:
            from .tasks import send_low_stock_alert

            record_id = record.pk
            transaction.on_commit(lambda: send_low_stock_alert.delay(record_id))
            logger.info(
                f"Low stock for product {record.product_id}: {record.stock_quantity} "
                f"(threshold {record.low_stock_threshold})"
            )

    @staticmethod
    @transaction.atomic
    def decrement_for_order(order, lines):
        """
        Decrement stock for every tracked product in an order.

        Args:
            order: the Order the stock was consumed by
            lines: iterable of (product_id, qty)

        Stock may go negative; orders are never refused for lack of stock.
        Rows are locked in product id order to keep concurrent orders from
        deadlocking on each other.
        """
        totals = defaultdict(int)
        for product_id, qty in lines:
            totals[product_id] += qty

        records = InventoryRecord.all_objects.filter(
            tenant_id=order.tenant_id,
            product_id__in=totals.keys(),
            track_inventory=True,
        ).order_by('product_id')

        updated = []
        for record in records:
            qty = totals[record.product_id]
            record, previous_quantity, new_quantity = InventoryService._apply_delta(record.pk, -qty)
            InventoryService._log_stock_operation(
                record,
                InventoryLog.ChangeType.ORDER,
                -qty,
                previous_quantity,
                new_quantity,
                order=order,
                reason=f"Order {order.order_number}",
            )
            InventoryService._maybe_queue_low_stock_alert(record)
            updated.append(record)

        return updated

    @staticmethod
    @transaction.atomic
    def restock(product, quantity: int, user=None, reason="") -> InventoryRecord:
        """Add stock. Restocking above the threshold re-arms the low-stock alert."""
        if quantity <= 0:
            raise ValidationFault("Restock quantity must be positive")

        record = InventoryService.get_or_create_record(product)
        record, previous_quantity, new_quantity = InventoryService._apply_delta(record.pk, quantity)

        if record.low_stock_notified and new_quantity > record.low_stock_threshold:
            InventoryRecord.all_objects.filter(pk=record.pk).update(low_stock_notified=False)
            record.low_stock_notified = False

        InventoryService._log_stock_operation(
            record, InventoryLog.ChangeType.RESTOCK, quantity,
            previous_quantity, new_quantity, reason=reason or "Restock", user=user,
        )
        return record

    @staticmethod
    @transaction.atomic
    def adjust(product, new_quantity: int, user=None, reason="") -> InventoryRecord:
        """Set an absolute, non-negative stock level after a manual count."""
        if new_quantity < 0:
            raise ValidationFault("Stock quantity cannot be negative")

        record = InventoryService.get_or_create_record(product)
        locked = InventoryRecord.all_objects.select_for_update().get(pk=record.pk)
        previous_quantity = locked.stock_quantity

        locked.stock_quantity = new_quantity
        if new_quantity > locked.low_stock_threshold:
            locked.low_stock_notified = False
        locked.save(update_fields=['stock_quantity', 'low_stock_notified', 'updated_at'])

        InventoryService._log_stock_operation(
            locked, InventoryLog.ChangeType.ADJUSTMENT, new_quantity - previous_quantity,
            previous_quantity, new_quantity, reason=reason or "Manual adjustment", user=user,
        )
        InventoryService._maybe_queue_low_stock_alert(locked)
        return locked

    @staticmethod
    @transaction.atomic
    def update_settings(product, track_inventory=None, low_stock_threshold=None) -> InventoryRecord:
        record = InventoryService.get_or_create_record(product)
        locked = InventoryRecord.all_objects.select_for_update().get(pk=record.pk)

        if track_inventory is not None:
            locked.track_inventory = track_inventory
        if low_stock_threshold is not None:
            locked.low_stock_threshold = low_stock_threshold
            if locked.stock_quantity > low_stock_threshold:
                locked.low_stock_notified = False

        locked.save(update_fields=['track_inventory', 'low_stock_threshold', 'low_stock_notified', 'updated_at'])
        return locked

    @staticmethod
    def get_stats(records):
        tracked = [r for r in records if r.track_inventory]
        return {
            'tracked': len(tracked),
            'low_stock': sum(1 for r in tracked if r.is_low_stock),
            'out_of_stock': sum(1 for r in tracked if r.is_out_of_stock),
        }
