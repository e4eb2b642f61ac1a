from rest_framework import serializers

from .models import Table


class TableSerializer(serializers.ModelSerializer):
    current_order = serializers.SerializerMethodField()

    class Meta:
        model = Table
        fields = [
            'id', 'name', 'capacity', 'status', 'assigned_server',
            'status_changed_at', 'current_order', 'updated_at',
        ]
        read_only_fields = fields

    def get_current_order(self, table):
        order = table.current_order
        if order is None:
            return None
        return {
            'id': str(order.id),
            'order_number': order.order_number,
            'customer_name': order.customer_name,
            'total': str(order.total),
            'status': order.status,
        }


class TableCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=50)
    capacity = serializers.IntegerField(min_value=1, max_value=100, default=4)


class TableUpdateSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    status = serializers.ChoiceField(choices=Table.Status.choices, required=False)
    assigned_server = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    current_order_id = serializers.UUIDField(required=False, allow_null=True)
