from django.contrib import admin

from .models import Product, ProductVariant, ProductExtra


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'tenant', 'price', 'is_active']
    list_filter = ['tenant', 'is_active']
    search_fields = ['name']

    def get_queryset(self, request):
        # Admin runs without tenant context
        return Product.all_objects.select_related('tenant')


@admin.register(ProductVariant)
class ProductVariantAdmin(admin.ModelAdmin):
    list_display = ['name', 'product', 'price_delta', 'is_active']

    def get_queryset(self, request):
        return ProductVariant.all_objects.select_related('product')


@admin.register(ProductExtra)
class ProductExtraAdmin(admin.ModelAdmin):
    list_display = ['name', 'product', 'price', 'is_active']

    def get_queryset(self, request):
        return ProductExtra.all_objects.select_related('product')
