from celery import shared_task
import logging

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def send_low_stock_alert(self, record_id):
    """
    Notify staff displays that a tracked product dropped to or below its
    low-stock threshold.

    Queued by InventoryService after the order transaction commits.

    Returns:
        dict: Status and details of the alert
    """
    from .models import InventoryRecord
    from orders.services.notification_service import OrderNotificationService

    try:
        record = InventoryRecord.all_objects.select_related('product').get(pk=record_id)
    except InventoryRecord.DoesNotExist:
        logger.error(f"Inventory record {record_id} not found for low-stock alert")
        return {"status": "failed", "error": "Record not found", "record_id": record_id}

    logger.warning(
        f"Low stock: {record.product.name} ({record.product_id}) at {record.stock_quantity}, "
        f"threshold {record.low_stock_threshold}"
    )

    try:
        OrderNotificationService.broadcast_low_stock(record)
    except Exception as exc:
        logger.error(f"Error broadcasting low-stock alert for record {record_id}: {exc}")
        raise self.retry(exc=exc)

    return {
        "status": "sent",
        "record_id": record_id,
        "product_id": record.product_id,
        "stock_quantity": record.stock_quantity,
    }
