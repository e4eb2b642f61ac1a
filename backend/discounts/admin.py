from django.contrib import admin

from .models import Promotion


@admin.register(Promotion)
class PromotionAdmin(admin.ModelAdmin):
    """
    Admin interface for managing promotions.
    current_uses is read-only; it only moves through order placement.
    """

    list_display = (
        "code",
        "tenant",
        "discount_type",
        "discount_value",
        "current_uses",
        "max_uses",
        "is_active",
        "expires_at",
    )
    list_filter = ("discount_type", "is_active", "tenant")
    search_fields = ("code", "description")
    readonly_fields = ("current_uses", "created_at", "updated_at")

    def get_queryset(self, request):
        return Promotion.all_objects.select_related("tenant")
