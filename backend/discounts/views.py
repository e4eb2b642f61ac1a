from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from core_backend.base import TenantScopedAPIView, IsTenantStaff
from core_backend.exceptions import UnknownRestaurant
from tenant.models import Tenant
from users.permissions import ManagerWritesOnly
from .filters import PromotionFilter
from .models import Promotion
from .serializers import (
    PromotionSerializer,
    PromotionCreateSerializer,
    PromotionUpdateSerializer,
    ValidatePromotionSerializer,
)
from .services import PromotionService


class PromotionView(TenantScopedAPIView):
    """
    GET   /api/tenant/promotions/  ?is_active=&discount_type=&code=
    POST  /api/tenant/promotions/  create
    PATCH /api/tenant/promotions/  {id, ...} edit (never current_uses)
    """

    queryset = Promotion.objects.all()
    filterset_class = PromotionFilter
    permission_classes = [IsTenantStaff, ManagerWritesOnly]

    def get(self, request):
        promotions = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(promotions)
        return self.get_paginated_response(PromotionSerializer(page, many=True).data)

    def post(self, request):
        serializer = PromotionCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({'error': 'Invalid promotion data', 'details': serializer.errors},
                            status=status.HTTP_400_BAD_REQUEST)
        promotion = PromotionService.create_promotion(request.tenant, **serializer.validated_data)
        return Response(PromotionSerializer(promotion).data, status=status.HTTP_201_CREATED)

    def patch(self, request):
        serializer = PromotionUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({'error': 'Invalid promotion data', 'details': serializer.errors},
                            status=status.HTTP_400_BAD_REQUEST)
        data = dict(serializer.validated_data)
        promotion = self.get_tenant_object(Promotion, data.pop('id'), label='promotion')
        promotion = PromotionService.update_promotion(promotion, **data)
        return Response(PromotionSerializer(promotion).data)


class ValidatePromotionView(APIView):
    """
    Public checkout pre-check of a promotion code against a subtotal.
    Read-only: the use is only consumed when the order is placed.
    """
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = ValidatePromotionSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({'error': 'Invalid request', 'details': serializer.errors},
                            status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        tenant = Tenant.objects.filter(id=data['restaurant_id'], is_active=True).first()
        if tenant is None:
            raise UnknownRestaurant()

        result = PromotionService.validate_code(tenant, data['code'], data['subtotal'])
        return Response(result)
