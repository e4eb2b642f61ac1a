from rest_framework import serializers

from .models import Tenant


class LoyaltyConfigSerializer(serializers.ModelSerializer):
    """Loyalty program settings, exposed under the names display clients use."""

    enabled = serializers.BooleanField(source='loyalty_enabled', required=False)
    points_per_dollar = serializers.DecimalField(
        source='loyalty_points_per_dollar', max_digits=6, decimal_places=2,
        min_value=0, required=False,
    )
    redeem_threshold = serializers.IntegerField(
        source='loyalty_redeem_threshold', min_value=1, required=False,
    )
    redeem_value = serializers.DecimalField(
        source='loyalty_redeem_value', max_digits=10, decimal_places=2,
        min_value=0, required=False,
    )

    class Meta:
        model = Tenant
        fields = ['enabled', 'points_per_dollar', 'redeem_threshold', 'redeem_value']
