from django.contrib import admin

from .models import Table


@admin.register(Table)
class TableAdmin(admin.ModelAdmin):
    list_display = ['name', 'tenant', 'status', 'capacity', 'assigned_server', 'is_active']
    list_filter = ['tenant', 'status', 'is_active']
    raw_id_fields = ['current_order']

    def get_queryset(self, request):
        return Table.all_objects.select_related('tenant')
