import re
import uuid
from decimal import Decimal

from django.conf import settings
from django.db import IntegrityError, models, transaction
from django.db.models import Q
from django.db.models.functions import Length
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from tenant.managers import TenantManager


class Order(models.Model):
    """
    A customer order at one restaurant.

    Money fields are computed once by OrderCreationService from the catalog
    and the promotion, and never re-derived afterwards. `status` is
    only written by OrderService through compare-and-set updates.
    `updated_at` is what the change feed keys on; every writer sets it as
    its last statement before commit.
    """

    class OrderStatus(models.TextChoices):
        PENDING = "pending", _("Pending")
        CONFIRMED = "confirmed", _("Confirmed")
        PREPARING = "preparing", _("Preparing")
        READY = "ready", _("Ready")
        DELIVERED = "delivered", _("Delivered")
        CANCELLED = "cancelled", _("Cancelled")

    class OrderType(models.TextChoices):
        DINE_IN = "dine_in", _("Dine In")
        PICKUP = "pickup", _("Pickup")
        DELIVERY = "delivery", _("Delivery")

    TERMINAL_STATUSES = (OrderStatus.DELIVERED, OrderStatus.CANCELLED)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='orders'
    )
    order_number = models.CharField(max_length=20, blank=True)
    status = models.CharField(
        max_length=10, choices=OrderStatus.choices, default=OrderStatus.PENDING
    )
    order_type = models.CharField(
        max_length=10, choices=OrderType.choices, default=OrderType.DINE_IN
    )

    # --- Customer ---
    customer_name = models.CharField(max_length=255)
    customer_phone = models.CharField(max_length=30, blank=True)
    notes = models.TextField(blank=True)
    delivery_address = models.TextField(blank=True)
    table = models.ForeignKey(
        'seating.Table',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='orders',
    )

    # --- Financial Fields ---
    subtotal = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    promotion = models.ForeignKey(
        'discounts.Promotion',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='orders',
    )
    discount_code = models.CharField(max_length=50, blank=True)
    discount_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    delivery_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    tip_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    gift_card = models.ForeignKey(
        'giftcards.GiftCard',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='orders',
    )
    gift_card_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("Amount paid with a gift card. Does not change the order total."),
    )

    # --- Scheduling ---
    is_scheduled = models.BooleanField(default=False)
    scheduled_for = models.DateTimeField(null=True, blank=True)
    estimated_ready_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now, editable=False)
    updated_at = models.DateTimeField(default=timezone.now, editable=False)
    completed_at = models.DateTimeField(
        null=True,
        blank=True,
        editable=False,
        help_text="Timestamp when order was marked as delivered."
    )
    cancelled_at = models.DateTimeField(null=True, blank=True, editable=False)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        db_table = 'orders'
        ordering = ["-created_at", "order_number"]
        verbose_name = _("Order")
        verbose_name_plural = _("Orders")
        indexes = [
            models.Index(fields=['tenant', 'status'], name='order_tenant_stat_idx'),
            models.Index(fields=['tenant', 'created_at'], name='order_tenant_created_idx'),
            models.Index(fields=['tenant', 'updated_at'], name='order_tenant_updated_idx'),
            models.Index(fields=['tenant', 'status', 'created_at'], name='order_ten_stat_dt_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "order_number"],
                name="unique_order_number_per_tenant",
            ),
            models.CheckConstraint(
                condition=Q(total__gte=0),
                name="order_total_non_negative",
            ),
        ]

    def __str__(self):
        return f"Order {self.order_number or self.pk} ({self.order_type}) - {self.status}"

    @property
    def is_terminal(self):
        return self.status in self.TERMINAL_STATUSES

    def save(self, *args, **kwargs):
        # Generate order_number only if it's not already set
        if self.order_number:
            super().save(*args, **kwargs)
            return

        max_retries = getattr(settings, 'ORDER_NUMBER_MAX_RETRIES', 5)
        for attempt in range(max_retries):
            self.order_number = self._generate_sequential_order_number()
            try:
                # Savepoint, so a lost race does not poison the caller's transaction
                with transaction.atomic():
                    super().save(*args, **kwargs)
                return
            except IntegrityError:
                number_taken = Order.all_objects.filter(
                    tenant_id=self.tenant_id, order_number=self.order_number
                ).exists()
                if not number_taken or attempt == max_retries - 1:
                    self.order_number = ""
                    raise
                # Another order took the number, retry
                continue

    def _generate_sequential_order_number(self):
        """
        Next sequential order number for this tenant: ORD-00001, ORD-00002, ...

        Ordering by length first keeps ORD-100000 after ORD-99999.
        """
        prefix = getattr(settings, 'ORDER_NUMBER_PREFIX', "ORD-")
        last_number = (
            Order.all_objects.filter(
                tenant_id=self.tenant_id,
                order_number__startswith=prefix,
            )
            .order_by(Length("order_number").desc(), "-order_number")
            .values_list("order_number", flat=True)
            .first()
        )

        next_number = 1
        if last_number:
            match = re.match(rf"^{re.escape(prefix)}(\d+)$", last_number)
            if match:
                next_number = int(match.group(1)) + 1

        return f"{prefix}{next_number:05d}"


class OrderItem(models.Model):
    """
    One priced line of an order. Name and prices are snapshots taken when
    the order was placed, so later catalog edits do not rewrite history.
    """
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='order_items'
    )
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(
        'products.Product', on_delete=models.PROTECT, related_name="order_items",
    )
    variant = models.ForeignKey(
        'products.ProductVariant', on_delete=models.SET_NULL, null=True, blank=True,
        related_name="order_items",
    )
    product_name = models.CharField(max_length=255)
    variant_name = models.CharField(max_length=100, blank=True)
    qty = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    line_total = models.DecimalField(max_digits=10, decimal_places=2)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        db_table = 'order_items'
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=['tenant', 'order'], name='order_item_tenant_order_idx'),
        ]

    def __str__(self):
        return f"{self.qty} x {self.product_name} in Order {self.order_id}"


class OrderItemExtra(models.Model):
    tenant = models.ForeignKey('tenant.Tenant', on_delete=models.CASCADE, related_name='+')
    order_item = models.ForeignKey(OrderItem, on_delete=models.CASCADE, related_name="extras")
    extra = models.ForeignKey(
        'products.ProductExtra', on_delete=models.SET_NULL, null=True, blank=True, related_name="+",
    )
    name = models.CharField(max_length=100)
    price = models.DecimalField(max_digits=10, decimal_places=2)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        db_table = 'order_item_extras'

    def __str__(self):
        return f"{self.name} (+{self.price})"


def prefetch_order_lines(queryset):
    """
    Attach items and their extras to an Order queryset.

    Prefetches go through `all_objects` so they also work where no tenant
    context is set (public intake, on_commit broadcasts, Celery).
    """
    return queryset.select_related('table').prefetch_related(
        models.Prefetch(
            'items',
            queryset=OrderItem.all_objects.prefetch_related(
                models.Prefetch('extras', queryset=OrderItemExtra.all_objects.all())
            ),
        )
    )
