from django.db import models
from django.utils.translation import gettext_lazy as _

from tenant.managers import TenantManager


class Table(models.Model):
    """
    Physical table in the dining room.

    Table status is driven by staff and is independent of order status: a
    table may be occupied with no order yet, and an order may reference a
    table that staff have already moved to cleaning.
    """

    class Status(models.TextChoices):
        AVAILABLE = "available", _("Available")
        OCCUPIED = "occupied", _("Occupied")
        RESERVED = "reserved", _("Reserved")
        CLEANING = "cleaning", _("Cleaning")

    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='tables',
    )
    name = models.CharField(max_length=50, help_text=_("Label shown to staff, e.g. 'T4' or 'Patio 2'"))
    capacity = models.PositiveSmallIntegerField(default=4)
    is_active = models.BooleanField(default=True)

    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.AVAILABLE, db_index=True
    )
    current_order = models.ForeignKey(
        'orders.Order',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        help_text=_("Order currently seated here (informational only)"),
    )
    assigned_server = models.CharField(max_length=100, blank=True, default="")
    status_changed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        db_table = 'tables'
        ordering = ['name']
        verbose_name = _("Table")
        verbose_name_plural = _("Tables")
        indexes = [
            models.Index(fields=['tenant', 'status'], name='table_tenant_status_idx'),
        ]
        constraints = [
            models.UniqueConstraint(fields=['tenant', 'name'], name='unique_table_name_per_tenant'),
        ]

    def __str__(self):
        return f"{self.name} ({self.get_status_display()})"
