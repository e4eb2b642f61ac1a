from django.contrib import admin

from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    fields = ("product_name", "variant_name", "qty", "unit_price", "line_total", "notes")
    readonly_fields = fields
    can_delete = False

    def get_queryset(self, request):
        # The default manager is tenant-filtered and admin has no tenant context
        return OrderItem.all_objects.all()

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "order_number",
        "tenant",
        "customer_name",
        "order_type",
        "status",
        "total",
        "created_at",
    )
    list_filter = ("status", "order_type", "tenant")
    search_fields = ("order_number", "customer_name", "customer_phone")
    readonly_fields = (
        "order_number", "subtotal", "discount_amount", "delivery_fee", "tip_amount",
        "total", "gift_card_amount", "created_at", "updated_at", "completed_at", "cancelled_at",
    )
    inlines = [OrderItemInline]

    def get_queryset(self, request):
        return Order.all_objects.select_related("tenant", "table")
