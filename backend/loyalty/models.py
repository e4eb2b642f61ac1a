from decimal import Decimal

from django.db import models
from django.db.models import Q
from django.utils.translation import gettext_lazy as _

from tenant.managers import TenantManager


class LoyaltyCustomer(models.Model):
    """
    A customer's points account at one restaurant, keyed by phone number.

    Counters are only changed with F() expressions in LoyaltyService.
    """
    tenant = models.ForeignKey('tenant.Tenant', on_delete=models.CASCADE, related_name='loyalty_customers')
    phone = models.CharField(max_length=30)
    name = models.CharField(max_length=255, blank=True)
    total_points = models.IntegerField(default=0)
    total_spent = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_orders = models.PositiveIntegerField(default=0)
    last_order_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        db_table = 'loyalty_customers'
        ordering = ['-total_points']
        constraints = [
            models.UniqueConstraint(fields=['tenant', 'phone'], name='unique_loyalty_phone_per_tenant'),
            models.CheckConstraint(condition=Q(total_points__gte=0), name='loyalty_points_non_negative'),
        ]

    def __str__(self):
        return f"{self.name or self.phone} ({self.total_points} pts)"


class LoyaltyTransaction(models.Model):
    class TransactionType(models.TextChoices):
        EARN = "earn", _("Earned")
        BONUS = "bonus", _("Bonus")
        REDEEM = "redeem", _("Redeemed")

    tenant = models.ForeignKey('tenant.Tenant', on_delete=models.CASCADE, related_name='+')
    customer = models.ForeignKey(LoyaltyCustomer, on_delete=models.CASCADE, related_name='transactions')
    transaction_type = models.CharField(max_length=10, choices=TransactionType.choices)
    points = models.IntegerField(help_text=_("Signed: negative for redemptions"))
    order = models.ForeignKey(
        'orders.Order',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='loyalty_transactions',
    )
    description = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        db_table = 'loyalty_transactions'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['tenant', 'customer'], name='loyalty_txn_tenant_cust_idx'),
        ]

    def __str__(self):
        return f"{self.transaction_type} {self.points} for {self.customer_id}"
