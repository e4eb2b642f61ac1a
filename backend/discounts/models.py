from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from tenant.managers import TenantManager


class Promotion(models.Model):
    """
    Tenant-scoped promotion code.

    `current_uses` is only ever changed by PromotionService.redeem(), a single
    conditional UPDATE that refuses to pass `max_uses`. The check constraint
    below backs the same rule at the database level.
    """

    class DiscountType(models.TextChoices):
        PERCENTAGE = "percentage", "Percentage"
        FIXED = "fixed", "Fixed Amount"

    # Multi-tenancy
    tenant = models.ForeignKey('tenant.Tenant', on_delete=models.CASCADE, related_name='promotions')

    code = models.CharField(max_length=50, help_text="Customer-facing code, stored uppercase (unique per tenant)")
    description = models.CharField(max_length=255, blank=True)
    discount_type = models.CharField(max_length=20, choices=DiscountType.choices)
    discount_value = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text="Percentage (0-100) or fixed currency amount",
    )
    min_order_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="The minimum recomputed subtotal required for the promotion to apply.",
    )
    max_uses = models.PositiveIntegerField(null=True, blank=True, help_text="Leave blank for unlimited")
    current_uses = models.PositiveIntegerField(default=0)
    expires_at = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()
    all_objects = models.Manager()  # Bypass tenant filter

    class Meta:
        db_table = 'promotions'
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=['tenant', 'code'],
                name='unique_promotion_code_per_tenant',
            ),
            models.CheckConstraint(
                condition=Q(max_uses__isnull=True) | Q(current_uses__lte=F('max_uses')),
                name='promotion_uses_within_cap',
            ),
        ]
        indexes = [
            models.Index(fields=['tenant', 'code'], name='promo_tenant_code_idx'),
            models.Index(fields=['tenant', 'is_active'], name='promo_tenant_active_idx'),
        ]

    def __str__(self):
        return f"{self.code} ({self.get_discount_type_display()} {self.discount_value})"

    def save(self, *args, **kwargs):
        if self.code:
            self.code = self.code.strip().upper()
        super().save(*args, **kwargs)

    def clean(self):
        super().clean()

        if self.discount_value is not None and self.discount_value <= 0:
            raise ValidationError({'discount_value': 'Discount value must be greater than zero.'})

        if self.discount_type == self.DiscountType.PERCENTAGE and self.discount_value > 100:
            raise ValidationError({'discount_value': 'Percentage discount cannot exceed 100%.'})

    def is_expired(self, now=None):
        now = now or timezone.now()
        return self.expires_at is not None and self.expires_at <= now

    def is_exhausted(self):
        return self.max_uses is not None and self.current_uses >= self.max_uses

    def is_currently_active(self):
        """Active, unexpired and under its usage cap as of this read."""
        return self.is_active and not self.is_expired() and not self.is_exhausted()
