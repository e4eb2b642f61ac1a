from django.contrib import admin

from .models import GiftCard, GiftCardTransaction


@admin.register(GiftCard)
class GiftCardAdmin(admin.ModelAdmin):
    list_display = ("code", "tenant", "initial_amount", "remaining_amount", "status", "expires_at", "created_at")
    list_filter = ("status", "tenant")
    search_fields = ("code", "purchaser_email", "recipient_email")
    readonly_fields = ("remaining_amount", "last_used_at", "created_at", "updated_at")

    def get_queryset(self, request):
        return GiftCard.all_objects.select_related("tenant")


@admin.register(GiftCardTransaction)
class GiftCardTransactionAdmin(admin.ModelAdmin):
    list_display = ("gift_card", "transaction_type", "amount", "balance_after", "order", "created_at")
    list_filter = ("transaction_type",)

    def get_queryset(self, request):
        return GiftCardTransaction.all_objects.select_related("gift_card")
