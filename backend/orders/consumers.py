import json
import logging

from channels.generic.websocket import AsyncWebsocketConsumer
from django.utils import timezone

from .services.notification_service import tenant_orders_group

logger = logging.getLogger(__name__)


class OrderFeedConsumer(AsyncWebsocketConsumer):
    """
    Push channel for staff order displays.

    Relays every order snapshot broadcast for the connected tenant. The HTTP
    poll feed remains authoritative: a display should still poll with its
    last timestamp after reconnecting.
    """

    async def connect(self):
        # Set by TenantWebSocketMiddleware from a verified staff token
        self.tenant = self.scope.get('tenant')

        if not self.tenant:
            logger.warning("OrderFeedConsumer: No tenant in scope. Closing connection.")
            await self.close(code=4003)
            return

        self.group_name = tenant_orders_group(self.tenant.id)
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()

        logger.info(f"OrderFeedConsumer: display connected for tenant {self.tenant.slug}")
        await self.send(text_data=json.dumps({
            "type": "connection_established",
            "tenant": self.tenant.slug,
            "timestamp": timezone.now().isoformat(),
        }))

    async def disconnect(self, close_code):
        if hasattr(self, "group_name"):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)

    async def receive(self, text_data):
        try:
            data = json.loads(text_data)
        except json.JSONDecodeError:
            logger.error(f"OrderFeedConsumer: invalid JSON from tenant {self.tenant.slug}")
            return

        if data.get("type") == "ping":
            await self.send(text_data=json.dumps({
                "type": "pong",
                "timestamp": timezone.now().isoformat(),
            }))
        else:
            logger.warning(f"OrderFeedConsumer: unknown message type {data.get('type')}")

    # Channel layer event handlers

    async def order_update(self, event):
        await self.send(text_data=json.dumps({"type": "order_update", "order": event["order"]}))

    async def inventory_low_stock(self, event):
        await self.send(text_data=json.dumps({"type": "inventory_low_stock", "data": event["data"]}))
