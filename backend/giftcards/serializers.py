from decimal import Decimal

from rest_framework import serializers

from .models import GiftCard


class GiftCardSerializer(serializers.ModelSerializer):
    class Meta:
        model = GiftCard
        fields = [
            'id', 'code', 'initial_amount', 'remaining_amount', 'status', 'expires_at',
            'purchaser_name', 'purchaser_email', 'recipient_name', 'recipient_email',
            'message', 'last_used_at', 'created_at',
        ]
        read_only_fields = fields


class GiftCardCreateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0.01"))
    expires_days = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    purchaser_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    purchaser_email = serializers.EmailField(required=False, allow_blank=True)
    recipient_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    recipient_email = serializers.EmailField(required=False, allow_blank=True)
    message = serializers.CharField(required=False, allow_blank=True)


class GiftCardCancelSerializer(serializers.Serializer):
    id = serializers.UUIDField()


class PublicGiftCardSerializer(serializers.Serializer):
    """Public check/redeem by code."""

    ACTION_CHECK = 'check'
    ACTION_REDEEM = 'redeem'

    restaurant_id = serializers.UUIDField()
    code = serializers.CharField(max_length=20)
    action = serializers.ChoiceField(choices=[ACTION_CHECK, ACTION_REDEEM], default=ACTION_CHECK)
    amount = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0.01"), required=False
    )

    def validate(self, attrs):
        if attrs['action'] == self.ACTION_REDEEM and attrs.get('amount') is None:
            raise serializers.ValidationError({'amount': "Amount is required to redeem"})
        return attrs
