from django.contrib import admin

from .models import User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    ordering = ["email"]
    list_display = ["email", "tenant", "role", "is_pos_staff", "is_active"]
    list_filter = ["role", "is_pos_staff", "is_active", "tenant"]
    search_fields = ["email", "username", "first_name", "last_name"]
    exclude = ["password", "groups", "user_permissions"]
    readonly_fields = ["last_login", "date_joined", "updated_at"]
