from django.contrib import admin

from .models import InventoryRecord, InventoryLog


@admin.register(InventoryRecord)
class InventoryRecordAdmin(admin.ModelAdmin):
    list_display = ['product', 'tenant', 'track_inventory', 'stock_quantity', 'low_stock_threshold']
    list_filter = ['tenant', 'track_inventory']
    readonly_fields = ['stock_quantity', 'low_stock_notified', 'updated_at']

    def get_queryset(self, request):
        return InventoryRecord.all_objects.select_related('product', 'tenant')


@admin.register(InventoryLog)
class InventoryLogAdmin(admin.ModelAdmin):
    list_display = ['product', 'change_type', 'quantity_change', 'new_quantity', 'created_at']
    list_filter = ['change_type', 'tenant']

    def get_queryset(self, request):
        return InventoryLog.all_objects.select_related('product')

    def has_change_permission(self, request, obj=None):
        return False
