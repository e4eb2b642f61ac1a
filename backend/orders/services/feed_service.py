from dataclasses import dataclass
from datetime import datetime, timedelta, timezone as dt_timezone
from typing import List
import logging

from django.conf import settings
from django.db.models import Q
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from core_backend.exceptions import ValidationFault
from orders.models import Order, prefetch_order_lines

logger = logging.getLogger(__name__)


@dataclass
class FeedPage:
    orders: List[Order]
    server_timestamp: datetime
    has_more: bool = False


class ChangeFeedService:
    """
    "What changed since T" for staff displays.

    The timestamp handed back is the `since` of the client's next poll. It
    is taken from the server clock before the query runs and moved back by
    ORDER_FEED_OVERLAP_SECONDS, so a write that committed while this query
    was running is picked up by the next poll.
    Orders may therefore arrive twice; clients merge by id.
    """

    @staticmethod
    def parse_since(value) -> datetime:
        if not value:
            raise ValidationFault("since parameter required")

        try:
            since = parse_datetime(value.replace(" ", "+")) if isinstance(value, str) else value
        except ValueError:
            since = None
        if since is None:
            raise ValidationFault(f"Invalid since timestamp: {value}")
        if timezone.is_naive(since):
            since = timezone.make_aware(since, dt_timezone.utc)
        return since

    @staticmethod
    def poll(tenant, since: datetime, limit: int = None) -> FeedPage:
        limit = limit or settings.ORDER_FEED_PAGE_SIZE
        overlap = timedelta(seconds=settings.ORDER_FEED_OVERLAP_SECONDS)

        server_timestamp = timezone.now() - overlap

        queryset = prefetch_order_lines(
            Order.all_objects.filter(tenant=tenant).filter(
                Q(created_at__gt=since) | Q(updated_at__gt=since)
            )
        ).order_by('updated_at', 'id')

        orders = list(queryset[:limit + 1])
        has_more = len(orders) > limit
        if has_more:
            orders = orders[:limit]
            # Resume just below the last change returned; ties are re-sent, not skipped
            server_timestamp = min(
                server_timestamp,
                orders[-1].updated_at - timedelta(microseconds=1),
            )

        logger.debug(
            f"Feed poll for tenant {tenant.id} since {since.isoformat()}: "
            f"{len(orders)} orders, has_more={has_more}"
        )
        return FeedPage(orders=orders, server_timestamp=server_timestamp, has_more=has_more)


def _as_datetime(value):
    if isinstance(value, str):
        return parse_datetime(value)
    return value


def merge_feed(local: dict, orders) -> dict:
    """
    Upsert polled order snapshots into a display's local state.

    `local` maps order id to the snapshot last seen. A snapshot replaces the
    local one unless the local copy is strictly newer, so re-delivered
    orders are harmless and an older snapshot never overwrites a newer one.
    """
    for snapshot in orders:
        order_id = str(snapshot['id'])
        current = local.get(order_id)
        if current is None or _as_datetime(current['updated_at']) <= _as_datetime(snapshot['updated_at']):
            local[order_id] = snapshot
    return local
