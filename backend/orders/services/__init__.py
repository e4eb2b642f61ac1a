"""
Orders services package.

- OrderPricingService: catalog validation and server-side pricing
- OrderCreationService: public order intake
- OrderService: staff status lifecycle and table assignment
- LedgerService: promotion, gift card, inventory and loyalty side effects
- ChangeFeedService: "changed since" polling for displays
- OrderNotificationService: websocket push of order changes
"""

from .pricing_service import OrderPricingService, PricedOrder, PricedLine
from .order_service import OrderCreationService, OrderCreationResult, OrderService
from .ledger_service import LedgerService
from .feed_service import ChangeFeedService, FeedPage, merge_feed
from .notification_service import OrderNotificationService

__all__ = [
    'OrderPricingService',
    'PricedOrder',
    'PricedLine',
    'OrderCreationService',
    'OrderCreationResult',
    'OrderService',
    'LedgerService',
    'ChangeFeedService',
    'FeedPage',
    'merge_feed',
    'OrderNotificationService',
]
