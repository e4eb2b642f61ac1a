from django.db import models
from django.utils.translation import gettext_lazy as _

from tenant.managers import TenantManager


class InventoryRecord(models.Model):
    """
    Stock level of one product.

    `stock_quantity` is only changed through InventoryService, always with a
    database-side expression (stock_quantity = stock_quantity +/- n) under a
    row lock. It may go below zero when orders outrun stock; that excursion
    is tolerated and shows up in the out-of-stock stats.
    """
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='inventory_records',
    )
    product = models.OneToOneField(
        'products.Product',
        on_delete=models.CASCADE,
        related_name='inventory',
    )
    track_inventory = models.BooleanField(
        default=False,
        help_text=_("When enabled, orders decrement stock for this product."),
    )
    stock_quantity = models.IntegerField(default=0)
    low_stock_threshold = models.PositiveIntegerField(default=5)
    low_stock_notified = models.BooleanField(
        default=False,
        help_text=_("Set when a low-stock alert has been queued; cleared on restock above threshold."),
    )
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        db_table = 'inventory_records'
        verbose_name = _("Inventory Record")
        verbose_name_plural = _("Inventory Records")
        indexes = [
            models.Index(fields=['tenant', 'track_inventory'], name='inv_tenant_tracked_idx'),
        ]

    def __str__(self):
        return f"{self.product.name}: {self.stock_quantity}"

    @property
    def is_low_stock(self):
        return self.track_inventory and 0 < self.stock_quantity <= self.low_stock_threshold

    @property
    def is_out_of_stock(self):
        return self.track_inventory and self.stock_quantity <= 0


class InventoryLog(models.Model):
    """
    Append-only history of every stock change, written in the same
    transaction as the change itself.
    """

    class ChangeType(models.TextChoices):
        ORDER = "order", _("Order Deduction")
        RESTOCK = "restock", _("Restock")
        ADJUSTMENT = "adjustment", _("Manual Adjustment")

    tenant = models.ForeignKey('tenant.Tenant', on_delete=models.CASCADE, related_name='inventory_logs')
    product = models.ForeignKey('products.Product', on_delete=models.CASCADE, related_name='inventory_logs')
    change_type = models.CharField(max_length=20, choices=ChangeType.choices)
    quantity_change = models.IntegerField()
    previous_quantity = models.IntegerField()
    new_quantity = models.IntegerField()
    order = models.ForeignKey(
        'orders.Order',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='inventory_logs',
    )
    reason = models.CharField(max_length=255, blank=True)
    performed_by = models.ForeignKey(
        'users.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )
    created_at = models.DateTimeField(auto_now_add=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        db_table = 'inventory_log'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['tenant', 'product', '-created_at'], name='inv_log_ten_prod_dt_idx'),
            models.Index(fields=['tenant', 'change_type'], name='inv_log_ten_type_idx'),
        ]

    def __str__(self):
        return f"{self.change_type}: {self.product_id} ({self.quantity_change:+d})"
