import logging

from django.conf import settings
from django.db import transaction
from django.utils.decorators import method_decorator
from django_ratelimit.decorators import ratelimit
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from core_backend.base import TenantScopedAPIView
from core_backend.exceptions import ResourceNotFound
from .filters import OrderFilter
from .models import Order, prefetch_order_lines
from .serializers import (
    OrderSerializer,
    OrderStatusQuerySerializer,
    OrderUpdateSerializer,
    PublicOrderSerializer,
    PublicOrderSummarySerializer,
)
from .services import ChangeFeedService, OrderCreationService, OrderService

logger = logging.getLogger(__name__)


def public_order_rate(group, request):
    return settings.PUBLIC_ORDER_RATE_LIMIT


@method_decorator(
    ratelimit(key='ip', rate=public_order_rate, method='POST', block=True),
    name='post',
)
class PublicOrderCreateView(APIView):
    """
    POST /api/orders/

    Public order intake from the online menu. Prices, discount and totals
    are recomputed on the server; client-sent amounts are ignored.
    """
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = PublicOrderSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({'error': 'Invalid order data', 'details': serializer.errors},
                            status=status.HTTP_400_BAD_REQUEST)

        data = dict(serializer.validated_data)
        restaurant_id = data.pop('restaurant_id')
        result = OrderCreationService.create_order(restaurant_id, data)

        if not result.is_complete:
            logger.warning(
                f"Order {result.order.order_number} accepted with missing rows: {result.item_failures}"
            )

        return Response({
            'success': True,
            'order': PublicOrderSummarySerializer(result.order).data,
        })


class PublicOrderStatusView(APIView):
    """
    GET /api/orders/status/?restaurant_id=&order_number=

    Customer-facing tracker.
    """
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def get(self, request):
        serializer = OrderStatusQuerySerializer(data=request.query_params)
        if not serializer.is_valid():
            return Response({'error': 'restaurant_id and order_number are required',
                             'details': serializer.errors},
                            status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        order = Order.all_objects.filter(
            tenant_id=data['restaurant_id'],
            order_number=data['order_number'],
        ).only('status', 'estimated_ready_at').first()
        if order is None:
            raise ResourceNotFound("Order not found")

        return Response({
            'status': order.status,
            'estimated_ready_at': order.estimated_ready_at,
        })


class TenantOrderView(TenantScopedAPIView):
    """
    GET   /api/tenant/orders/  ?status=&limit=&offset=
    PATCH /api/tenant/orders/  {id, status?, table_id?}
    """

    queryset = Order.objects.all()
    filterset_class = OrderFilter

    def get_queryset(self):
        return prefetch_order_lines(super().get_queryset())

    def get(self, request):
        orders = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(orders)
        return self.get_paginated_response(OrderSerializer(page, many=True).data)

    def patch(self, request):
        serializer = OrderUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({'error': 'Invalid order update', 'details': serializer.errors},
                            status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        order = self.get_tenant_object(Order, data['id'], label='order')

        # Table and status change together or not at all
        with transaction.atomic():
            if 'table_id' in data:
                order = OrderService.assign_table(order, data['table_id'])
            if 'status' in data:
                order = OrderService.update_order_status(order, data['status'])

        order = self.get_queryset().get(pk=order.pk)
        return Response({'order': OrderSerializer(order).data})


class OrderPollView(TenantScopedAPIView):
    """
    GET /api/tenant/orders/poll/?since=<ISO>

    Returns {orders, timestamp, has_more}. Pass `timestamp` back as the next
    `since`.
    """

    queryset = Order.objects.all()

    def get(self, request):
        since = ChangeFeedService.parse_since(request.query_params.get('since'))
        page = ChangeFeedService.poll(request.tenant, since)
        return Response({
            'orders': OrderSerializer(page.orders, many=True).data,
            'timestamp': page.server_timestamp.isoformat(),
            'has_more': page.has_more,
        })
