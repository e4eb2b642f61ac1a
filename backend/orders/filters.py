import django_filters

from .models import Order


class OrderFilter(django_filters.FilterSet):
    """Staff order list filters: ?status=&order_type=&created_at__gte=&created_at__lte="""

    created_at__gte = django_filters.DateTimeFilter(field_name='created_at', lookup_expr='gte')
    created_at__lte = django_filters.DateTimeFilter(field_name='created_at', lookup_expr='lte')

    class Meta:
        model = Order
        fields = {
            'status': ['exact'],
            'order_type': ['exact'],
        }
