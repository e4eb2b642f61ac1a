from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from tenant.managers import TenantManager


class Product(models.Model):
    """
    Catalog product as the order engine sees it.

    Menu authoring owns these rows; the order engine only reads price,
    is_active and tenant ownership. Stock lives on inventory.InventoryRecord.
    """
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='products',
    )
    name = models.CharField(max_length=200, help_text=_("Name of the product."))
    description = models.TextField(blank=True)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text=_("The selling price of the product."),
    )
    is_active = models.BooleanField(
        default=True,
        help_text=_("Inactive products cannot be ordered."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        db_table = 'products'
        verbose_name = _("Product")
        verbose_name_plural = _("Products")
        ordering = ["name"]
        indexes = [
            models.Index(fields=['tenant', 'is_active'], name='product_tenant_active_idx'),
        ]

    def __str__(self):
        return self.name


class ProductVariant(models.Model):
    """Size or style of a product; its price is added to the product price."""
    tenant = models.ForeignKey('tenant.Tenant', on_delete=models.CASCADE)
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='variants')
    name = models.CharField(max_length=100)
    price_delta = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    is_active = models.BooleanField(default=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        db_table = 'product_variants'
        ordering = ['product', 'name']
        indexes = [
            models.Index(fields=['tenant', 'product'], name='variant_tenant_product_idx'),
        ]

    def __str__(self):
        return f"{self.product.name} ({self.name})"


class ProductExtra(models.Model):
    """Optional add-on priced per unit of the line it is attached to."""
    tenant = models.ForeignKey('tenant.Tenant', on_delete=models.CASCADE)
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='extras')
    name = models.CharField(max_length=100)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
    )
    is_active = models.BooleanField(default=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        db_table = 'product_extras'
        ordering = ['product', 'name']
        indexes = [
            models.Index(fields=['tenant', 'product'], name='extra_tenant_product_idx'),
        ]

    def __str__(self):
        return f"{self.name} (+{self.price})"
