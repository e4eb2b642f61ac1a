from rest_framework import serializers

from .models import LoyaltyCustomer


class LoyaltyCustomerSerializer(serializers.ModelSerializer):
    class Meta:
        model = LoyaltyCustomer
        fields = [
            'id', 'phone', 'name', 'total_points', 'total_spent',
            'total_orders', 'last_order_at', 'created_at',
        ]
        read_only_fields = fields


class PointsAdjustmentSerializer(serializers.Serializer):
    """Positive points are a bonus, negative points a redemption."""

    customer_id = serializers.IntegerField()
    points = serializers.IntegerField()
    description = serializers.CharField(max_length=255, required=False, allow_blank=True)

    def validate_points(self, value):
        if value == 0:
            raise serializers.ValidationError("Points cannot be zero")
        return value
