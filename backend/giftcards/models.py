import uuid
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from tenant.managers import TenantManager


class GiftCard(models.Model):
    """
    Stored-value card sold by a restaurant.

    `remaining_amount` only moves through GiftCardService.redeem(), which
    locks the row and debits with a guarded UPDATE. The check constraints
    keep 0 <= remaining_amount <= initial_amount even if that is bypassed.
    """

    class Status(models.TextChoices):
        ACTIVE = "active", _("Active")
        USED = "used", _("Fully Redeemed")
        CANCELLED = "cancelled", _("Cancelled")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey('tenant.Tenant', on_delete=models.CASCADE, related_name='gift_cards')
    code = models.CharField(max_length=20, help_text=_("Unique gift card code (per tenant)"))
    initial_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
        help_text=_("Balance when the gift card was issued"),
    )
    remaining_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text=_("Current remaining balance on the gift card"),
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    expires_at = models.DateTimeField(blank=True, null=True)

    purchaser_name = models.CharField(max_length=255, blank=True)
    purchaser_email = models.EmailField(blank=True)
    recipient_name = models.CharField(max_length=255, blank=True)
    recipient_email = models.EmailField(blank=True)
    message = models.TextField(blank=True)

    last_used_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        db_table = 'gift_cards'
        ordering = ["-created_at"]
        verbose_name = _("Gift Card")
        verbose_name_plural = _("Gift Cards")
        constraints = [
            models.UniqueConstraint(fields=['tenant', 'code'], name='unique_gift_card_code_per_tenant'),
            models.CheckConstraint(
                condition=Q(remaining_amount__gte=0) & Q(remaining_amount__lte=F('initial_amount')),
                name='gift_card_balance_in_range',
            ),
        ]
        indexes = [
            models.Index(fields=['tenant', 'status'], name='gift_card_tenant_status_idx'),
        ]

    def __str__(self):
        return f"Gift Card {self.code} - {self.remaining_amount} ({self.status})"

    def save(self, *args, **kwargs):
        if self._state.adding and self.remaining_amount is None:
            self.remaining_amount = self.initial_amount
        super().save(*args, **kwargs)

    @property
    def is_expired(self):
        return self.expires_at is not None and self.expires_at <= timezone.now()

    @property
    def is_usable(self):
        """Active, unexpired and with money left, as of this read."""
        return (
            self.status == self.Status.ACTIVE
            and not self.is_expired
            and self.remaining_amount > 0
        )


class GiftCardTransaction(models.Model):
    class TransactionType(models.TextChoices):
        PURCHASE = "purchase", _("Purchase")
        REDEEM = "redeem", _("Redeem")

    tenant = models.ForeignKey('tenant.Tenant', on_delete=models.CASCADE, related_name='+')
    gift_card = models.ForeignKey(GiftCard, on_delete=models.CASCADE, related_name='transactions')
    transaction_type = models.CharField(max_length=20, choices=TransactionType.choices)
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    balance_after = models.DecimalField(max_digits=10, decimal_places=2)
    order = models.ForeignKey(
        'orders.Order',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='gift_card_transactions',
    )
    created_at = models.DateTimeField(auto_now_add=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        db_table = 'gift_card_transactions'
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=['tenant', 'gift_card'], name='gc_txn_tenant_card_idx'),
        ]

    def __str__(self):
        return f"{self.transaction_type} {self.amount} on {self.gift_card_id}"
