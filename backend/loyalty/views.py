from rest_framework import status
from rest_framework.response import Response

from core_backend.base import TenantScopedAPIView, IsTenantStaff
from tenant.serializers import LoyaltyConfigSerializer
from users.permissions import ManagerWritesOnly
from .models import LoyaltyCustomer
from .serializers import LoyaltyCustomerSerializer, PointsAdjustmentSerializer
from .services import LoyaltyService


class LoyaltyView(TenantScopedAPIView):
    """
    GET   /api/tenant/loyalty/  -> {customers, config, stats}
    POST  /api/tenant/loyalty/  {customer_id, points, description?}
    PATCH /api/tenant/loyalty/  program config
    """

    queryset = LoyaltyCustomer.objects.all()
    permission_classes = [IsTenantStaff, ManagerWritesOnly]

    def get(self, request):
        customers = self.get_queryset()
        return Response({
            'customers': LoyaltyCustomerSerializer(customers, many=True).data,
            'config': LoyaltyConfigSerializer(request.tenant).data,
            'stats': LoyaltyService.get_stats(customers),
        })

    def post(self, request):
        serializer = PointsAdjustmentSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({'error': 'customer_id and points required', 'details': serializer.errors},
                            status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        customer = self.get_tenant_object(LoyaltyCustomer, data['customer_id'], label='customer')
        description = data.get('description', '')
        if data['points'] > 0:
            customer = LoyaltyService.add_bonus(customer, data['points'], description)
        else:
            customer = LoyaltyService.redeem(customer, -data['points'], description)

        return Response({'success': True, 'customer': LoyaltyCustomerSerializer(customer).data})

    def patch(self, request):
        serializer = LoyaltyConfigSerializer(request.tenant, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response({'error': 'Invalid loyalty configuration', 'details': serializer.errors},
                            status=status.HTTP_400_BAD_REQUEST)
        serializer.save()
        return Response({'success': True, 'config': serializer.data})
