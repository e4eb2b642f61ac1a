from rest_framework import serializers

from .models import InventoryRecord


class InventoryRecordSerializer(serializers.ModelSerializer):
    product_id = serializers.IntegerField(source='product.id', read_only=True)
    product_name = serializers.CharField(source='product.name', read_only=True)
    is_low_stock = serializers.BooleanField(read_only=True)
    is_out_of_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = InventoryRecord
        fields = [
            'id', 'product_id', 'product_name', 'track_inventory', 'stock_quantity',
            'low_stock_threshold', 'is_low_stock', 'is_out_of_stock', 'updated_at',
        ]
        read_only_fields = fields


class InventoryUpdateSerializer(serializers.Serializer):
    """
    One PATCH may combine a settings change with a single stock movement:
    `restock_quantity` adds stock, `set_quantity` records a manual count.
    """
    product_id = serializers.IntegerField()
    track_inventory = serializers.BooleanField(required=False)
    low_stock_threshold = serializers.IntegerField(min_value=0, required=False)
    restock_quantity = serializers.IntegerField(min_value=1, required=False)
    set_quantity = serializers.IntegerField(min_value=0, required=False)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")

    def validate(self, data):
        if 'restock_quantity' in data and 'set_quantity' in data:
            raise serializers.ValidationError("Send either restock_quantity or set_quantity, not both.")
        return data
