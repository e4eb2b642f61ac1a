from decimal import Decimal

from rest_framework import serializers

from .models import Promotion


class PromotionSerializer(serializers.ModelSerializer):
    remaining_uses = serializers.SerializerMethodField()

    class Meta:
        model = Promotion
        fields = [
            'id', 'code', 'description', 'discount_type', 'discount_value',
            'min_order_amount', 'max_uses', 'current_uses', 'remaining_uses',
            'expires_at', 'is_active', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'current_uses', 'remaining_uses', 'created_at', 'updated_at']

    def get_remaining_uses(self, promotion):
        if promotion.max_uses is None:
            return None
        return max(promotion.max_uses - promotion.current_uses, 0)


class PromotionCreateSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True)
    discount_type = serializers.ChoiceField(choices=Promotion.DiscountType.choices)
    discount_value = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0.01"))
    min_order_amount = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0.00"), required=False
    )
    max_uses = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    expires_at = serializers.DateTimeField(required=False, allow_null=True)
    is_active = serializers.BooleanField(required=False)

    def validate(self, data):
        if data['discount_type'] == Promotion.DiscountType.PERCENTAGE and data['discount_value'] > 100:
            raise serializers.ValidationError({'discount_value': 'Percentage discount cannot exceed 100%.'})
        return data


class PromotionUpdateSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    description = serializers.CharField(max_length=255, required=False, allow_blank=True)
    min_order_amount = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0.00"), required=False
    )
    max_uses = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    expires_at = serializers.DateTimeField(required=False, allow_null=True)
    is_active = serializers.BooleanField(required=False)


class ValidatePromotionSerializer(serializers.Serializer):
    restaurant_id = serializers.UUIDField()
    code = serializers.CharField(max_length=50)
    subtotal = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0.00"))
