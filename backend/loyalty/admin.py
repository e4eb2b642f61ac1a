from django.contrib import admin

from .models import LoyaltyCustomer, LoyaltyTransaction


@admin.register(LoyaltyCustomer)
class LoyaltyCustomerAdmin(admin.ModelAdmin):
    list_display = ("phone", "name", "tenant", "total_points", "total_orders", "total_spent", "last_order_at")
    list_filter = ("tenant",)
    search_fields = ("phone", "name")

    def get_queryset(self, request):
        return LoyaltyCustomer.all_objects.select_related("tenant")


@admin.register(LoyaltyTransaction)
class LoyaltyTransactionAdmin(admin.ModelAdmin):
    list_display = ("customer", "transaction_type", "points", "order", "created_at")
    list_filter = ("transaction_type",)

    def get_queryset(self, request):
        return LoyaltyTransaction.all_objects.select_related("customer")
