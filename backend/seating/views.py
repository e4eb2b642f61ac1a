from rest_framework import status
from rest_framework.response import Response

from core_backend.base import TenantScopedAPIView
from .models import Table
from .serializers import TableSerializer, TableCreateSerializer, TableUpdateSerializer
from .services import TableService


class TableView(TenantScopedAPIView):
    """
    GET   /api/tenant/tables/  -> {tables, stats}
    POST  /api/tenant/tables/  {name, capacity}
    PATCH /api/tenant/tables/  {id, status?, assigned_server?, current_order_id?}
    """

    queryset = Table.objects.all()

    def get_queryset(self):
        return super().get_queryset().filter(is_active=True).select_related('current_order')

    def get(self, request):
        tables = list(self.get_queryset())
        return Response({
            'tables': TableSerializer(tables, many=True).data,
            'stats': TableService.get_stats(tables),
        })

    def post(self, request):
        serializer = TableCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({'error': 'Invalid table data', 'details': serializer.errors},
                            status=status.HTTP_400_BAD_REQUEST)
        table = TableService.create_table(request.tenant, **serializer.validated_data)
        return Response({'table': TableSerializer(table).data}, status=status.HTTP_201_CREATED)

    def patch(self, request):
        serializer = TableUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({'error': 'Invalid table data', 'details': serializer.errors},
                            status=status.HTTP_400_BAD_REQUEST)

        data = dict(serializer.validated_data)
        table = TableService.update_table(data.pop('id'), request.tenant, **data)
        return Response({'table': TableSerializer(table).data})
