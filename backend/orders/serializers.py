from decimal import Decimal

from rest_framework import serializers

from .models import Order, OrderItem, OrderItemExtra
from .services.order_service import OrderService


class OrderItemExtraSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItemExtra
        fields = ["id", "extra", "name", "price"]
        read_only_fields = fields


class OrderItemSerializer(serializers.ModelSerializer):
    extras = OrderItemExtraSerializer(many=True, read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id", "product", "variant", "product_name", "variant_name",
            "qty", "unit_price", "line_total", "notes", "extras",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """
    Full order snapshot, as sent to staff displays by the list, the poll
    feed and the websocket push. Querysets should be built with
    prefetch_order_lines() to avoid N+1 queries.
    """
    items = OrderItemSerializer(many=True, read_only=True)
    table = serializers.SerializerMethodField()
    amount_due = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id", "order_number", "status", "order_type",
            "customer_name", "customer_phone", "notes", "delivery_address", "table",
            "subtotal", "promotion", "discount_code", "discount_amount",
            "delivery_fee", "tip_amount", "total", "gift_card_amount", "amount_due",
            "is_scheduled", "scheduled_for", "estimated_ready_at",
            "created_at", "updated_at", "completed_at", "cancelled_at",
            "items",
        ]
        read_only_fields = fields

    def get_table(self, order):
        if order.table_id is None:
            return None
        return {"id": order.table_id, "name": order.table.name}

    def get_amount_due(self, order):
        return str(OrderService.outstanding_balance(order))


class PublicOrderSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Order
        fields = ["id", "order_number", "total", "status"]
        read_only_fields = fields


# --- Public intake -----------------------------------------------------------

class OrderExtraInputSerializer(serializers.Serializer):
    extra_id = serializers.IntegerField()
    # Accepted for compatibility with existing clients; never used for pricing
    price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)


class OrderItemInputSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    variant_id = serializers.IntegerField(required=False, allow_null=True)
    qty = serializers.IntegerField(min_value=1, max_value=999)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    extras = OrderExtraInputSerializer(many=True, required=False, default=list)
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    line_total = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)


class PublicOrderSerializer(serializers.Serializer):
    restaurant_id = serializers.UUIDField()
    customer_name = serializers.CharField(max_length=255)
    customer_phone = serializers.CharField(max_length=30, required=False, allow_blank=True, allow_null=True)
    order_type = serializers.ChoiceField(
        choices=Order.OrderType.choices, required=False, default=Order.OrderType.DINE_IN
    )
    table_id = serializers.IntegerField(required=False, allow_null=True)
    delivery_address = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    items = OrderItemInputSerializer(many=True, allow_empty=False)
    promotion_id = serializers.IntegerField(required=False, allow_null=True)
    discount_code = serializers.CharField(max_length=50, required=False, allow_blank=True, allow_null=True)
    discount_amount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)
    tip_amount = serializers.DecimalField(
        max_digits=10, decimal_places=2, required=False, allow_null=True, min_value=Decimal("0.00")
    )
    gift_card_code = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    is_scheduled = serializers.BooleanField(required=False, default=False)
    scheduled_for = serializers.DateTimeField(required=False, allow_null=True)

    def validate(self, attrs):
        if attrs.get('is_scheduled') and not attrs.get('scheduled_for'):
            raise serializers.ValidationError({'scheduled_for': "Required for scheduled orders"})
        return attrs


class OrderStatusQuerySerializer(serializers.Serializer):
    restaurant_id = serializers.UUIDField()
    order_number = serializers.CharField(max_length=20)


# --- Staff -------------------------------------------------------------------

class OrderUpdateSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    status = serializers.ChoiceField(choices=Order.OrderStatus.choices, required=False)
    table_id = serializers.IntegerField(required=False, allow_null=True)

    def validate(self, attrs):
        if 'status' not in attrs and 'table_id' not in attrs:
            raise serializers.ValidationError("status or table_id is required")
        return attrs
