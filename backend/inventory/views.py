from rest_framework import status
from rest_framework.response import Response

from core_backend.base import TenantScopedAPIView, IsTenantStaff
from products.models import Product
from users.permissions import ManagerWritesOnly
from .models import InventoryRecord
from .serializers import InventoryRecordSerializer, InventoryUpdateSerializer
from .services import InventoryService


class InventoryView(TenantScopedAPIView):
    """
    GET   /api/tenant/inventory/  -> {records, stats}
    PATCH /api/tenant/inventory/  {product_id, track_inventory?, low_stock_threshold?,
                                   restock_quantity? | set_quantity?, reason?}
    """

    queryset = InventoryRecord.objects.all()
    permission_classes = [IsTenantStaff, ManagerWritesOnly]

    def get(self, request):
        records = list(self.get_queryset().select_related('product').order_by('product__name'))
        return Response({
            'records': InventoryRecordSerializer(records, many=True).data,
            'stats': InventoryService.get_stats(records),
        })

    def patch(self, request):
        serializer = InventoryUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({'error': 'Invalid inventory data', 'details': serializer.errors},
                            status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        product = self.get_tenant_object(Product, data['product_id'], label='product')

        if 'track_inventory' in data or 'low_stock_threshold' in data:
            InventoryService.update_settings(
                product,
                track_inventory=data.get('track_inventory'),
                low_stock_threshold=data.get('low_stock_threshold'),
            )

        if 'restock_quantity' in data:
            InventoryService.restock(product, data['restock_quantity'], user=request.user, reason=data['reason'])
        elif 'set_quantity' in data:
            InventoryService.adjust(product, data['set_quantity'], user=request.user, reason=data['reason'])

        record = InventoryService.get_or_create_record(product)
        record.refresh_from_db()
        return Response({'record': InventoryRecordSerializer(record).data})
