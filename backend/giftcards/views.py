import logging

from django.conf import settings
from django.utils.decorators import method_decorator
from django_ratelimit.decorators import ratelimit
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from core_backend.base import TenantScopedAPIView, IsTenantStaff
from core_backend.exceptions import UnknownRestaurant
from tenant.models import Tenant
from users.permissions import ManagerWritesOnly
from .models import GiftCard
from .serializers import (
    GiftCardSerializer,
    GiftCardCreateSerializer,
    GiftCardCancelSerializer,
    PublicGiftCardSerializer,
)
from .services import GiftCardService

logger = logging.getLogger(__name__)


def public_gift_card_rate(group, request):
    return settings.PUBLIC_ORDER_RATE_LIMIT


@method_decorator(
    ratelimit(key='ip', rate=public_gift_card_rate, method='POST', block=True),
    name='post',
)
class PublicGiftCardView(APIView):
    """
    POST /api/gift-cards/  {restaurant_id, code, action: check|redeem, amount?}
    """
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = PublicGiftCardSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({'error': 'Invalid request', 'details': serializer.errors},
                            status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        tenant = Tenant.objects.filter(id=data['restaurant_id'], is_active=True).first()
        if tenant is None:
            raise UnknownRestaurant()

        if data['action'] == PublicGiftCardSerializer.ACTION_REDEEM:
            result = GiftCardService.redeem(tenant, data['code'], data['amount'])
            return Response({'success': True, **result})

        return Response(GiftCardService.check(tenant, data['code']))


class GiftCardView(TenantScopedAPIView):
    """
    GET    /api/tenant/gift-cards/  -> paginated cards + stats
    POST   /api/tenant/gift-cards/  issue a card
    DELETE /api/tenant/gift-cards/  {id} cancel a card
    """

    queryset = GiftCard.objects.all()
    permission_classes = [IsTenantStaff, ManagerWritesOnly]

    def get(self, request):
        cards = self.get_queryset()
        status_filter = request.query_params.get('status')
        if status_filter:
            cards = cards.filter(status=status_filter)

        stats = GiftCardService.get_stats(self.get_queryset())
        page = self.paginate_queryset(cards)
        response = self.get_paginated_response(GiftCardSerializer(page, many=True).data)
        response.data['stats'] = stats
        return response

    def post(self, request):
        serializer = GiftCardCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({'error': 'Invalid gift card data', 'details': serializer.errors},
                            status=status.HTTP_400_BAD_REQUEST)
        data = dict(serializer.validated_data)
        card = GiftCardService.issue(
            request.tenant,
            data.pop('amount'),
            expires_days=data.pop('expires_days', None),
            **data,
        )
        return Response(GiftCardSerializer(card).data, status=status.HTTP_201_CREATED)

    def delete(self, request):
        serializer = GiftCardCancelSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({'error': 'Invalid request', 'details': serializer.errors},
                            status=status.HTTP_400_BAD_REQUEST)
        card = self.get_tenant_object(GiftCard, serializer.validated_data['id'], label='gift card')
        card = GiftCardService.cancel(card)
        return Response(GiftCardSerializer(card).data)
