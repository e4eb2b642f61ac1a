import json
import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.core.serializers.json import DjangoJSONEncoder
from django.db import transaction

logger = logging.getLogger(__name__)


def tenant_orders_group(tenant_id):
    return f"tenant_{tenant_id}_orders"


def to_primitive(data):
    """UUIDs, Decimals and datetimes to strings, so any channel layer can carry it."""
    return json.loads(json.dumps(data, cls=DjangoJSONEncoder))


class OrderNotificationService:
    """
    Push order changes to the staff displays of a tenant.

    The HTTP poll feed stays the source of truth; a missed push only costs
    latency, so failures here are logged and never raised to the caller.
    """

    @staticmethod
    def _group_send(tenant_id, payload):
        channel_layer = get_channel_layer()
        if not channel_layer:
            logger.warning("Channel layer not available. Cannot broadcast order update.")
            return

        group_name = tenant_orders_group(tenant_id)
        logger.debug(f"Broadcasting {payload['type']} to group: {group_name}")
        async_to_sync(channel_layer.group_send)(group_name, payload)

    @staticmethod
    def broadcast_order_update(order_id):
        """Send the current snapshot of an order, as the poll feed would return it."""
        from orders.models import Order, prefetch_order_lines
        from orders.serializers import OrderSerializer

        try:
            order = prefetch_order_lines(Order.all_objects.all()).get(pk=order_id)
            OrderNotificationService._group_send(
                order.tenant_id,
                {"type": "order_update", "order": to_primitive(OrderSerializer(order).data)},
            )
        except Exception as e:
            logger.error(f"Failed to broadcast update for order {order_id}: {e}")

    @staticmethod
    def schedule_order_update(order):
        """Broadcast once the surrounding transaction has committed."""
        order_id = order.pk
        transaction.on_commit(lambda: OrderNotificationService.broadcast_order_update(order_id))

    @staticmethod
    def broadcast_low_stock(record):
        OrderNotificationService._group_send(
            record.tenant_id,
            {
                "type": "inventory_low_stock",
                "data": to_primitive({
                    "product_id": record.product_id,
                    "product_name": record.product.name,
                    "stock_quantity": record.stock_quantity,
                    "low_stock_threshold": record.low_stock_threshold,
                }),
            },
        )
