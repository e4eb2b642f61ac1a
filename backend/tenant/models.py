import uuid
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models


class Tenant(models.Model):
    """
    Root entity for multi-tenancy.
    Each restaurant is a tenant; every order, promotion, product, gift card,
    loyalty account and table carries a tenant reference.

    The tenant row also holds the restaurant's order configuration
    (accepted order types, delivery fee, preparation time) and its loyalty
    program settings, since those are read on every order.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(
        max_length=255,
        help_text="Display name for the restaurant (e.g., Joe's Pizza)"
    )
    slug = models.SlugField(
        unique=True,
        help_text="URL-safe identifier, also accepted in the X-Tenant header"
    )

    # Status
    is_active = models.BooleanField(
        default=True,
        help_text="Inactive tenants cannot take orders or access the system"
    )

    # Order configuration
    dine_in_enabled = models.BooleanField(default=True)
    pickup_enabled = models.BooleanField(default=True)
    delivery_enabled = models.BooleanField(default=True)
    delivery_fee = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Flat fee added to delivery orders"
    )
    estimated_prep_minutes = models.PositiveIntegerField(
        default=20,
        help_text="Used to stamp estimated_ready_at when an order is confirmed"
    )

    # Loyalty program
    loyalty_enabled = models.BooleanField(default=False)
    loyalty_points_per_dollar = models.DecimalField(
        max_digits=6,
        decimal_places=2,
        default=Decimal('10.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
    )
    loyalty_redeem_threshold = models.PositiveIntegerField(
        default=100,
        help_text="Points required for one redemption"
    )
    loyalty_redeem_value = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('5.00'),
        help_text="Currency value of one redemption"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'tenants'
        ordering = ['name']
        indexes = [
            models.Index(fields=['slug'], name='tenant_slug_idx'),
            models.Index(fields=['is_active'], name='tenant_active_idx'),
        ]

    def __str__(self):
        return self.name

    def accepts_order_type(self, order_type):
        """Check if the restaurant currently takes orders of this type."""
        return {
            'dine_in': self.dine_in_enabled,
            'pickup': self.pickup_enabled,
            'delivery': self.delivery_enabled,
        }.get(order_type, False)

    def get_loyalty_config(self):
        return {
            'enabled': self.loyalty_enabled,
            'points_per_dollar': self.loyalty_points_per_dollar,
            'redeem_threshold': self.loyalty_redeem_threshold,
            'redeem_value': self.loyalty_redeem_value,
        }
