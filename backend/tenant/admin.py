from django.contrib import admin

from .models import Tenant


@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'is_active', 'delivery_fee', 'loyalty_enabled', 'created_at']
    list_filter = ['is_active', 'loyalty_enabled', 'delivery_enabled']
    search_fields = ['name', 'slug']
    prepopulated_fields = {'slug': ('name',)}
    readonly_fields = ['id', 'created_at', 'updated_at']
    fieldsets = (
        (None, {'fields': ('id', 'name', 'slug', 'is_active')}),
        ('Ordering', {'fields': (
            'dine_in_enabled', 'pickup_enabled', 'delivery_enabled',
            'delivery_fee', 'estimated_prep_minutes',
        )}),
        ('Loyalty', {'fields': (
            'loyalty_enabled', 'loyalty_points_per_dollar',
            'loyalty_redeem_threshold', 'loyalty_redeem_value',
        )}),
        ('Timestamps', {'fields': ('created_at', 'updated_at')}),
    )
