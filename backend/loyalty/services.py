from decimal import Decimal, ROUND_FLOOR
import logging

from django.db import transaction
from django.db.models import Count, F, Sum
from django.utils import timezone

from core_backend.exceptions import InsufficientPoints, ValidationFault
from .models import LoyaltyCustomer, LoyaltyTransaction

logger = logging.getLogger(__name__)


class LoyaltyService:
    """
    Points accounts per (tenant, phone).

    Accrual is driven by the order state machine: only the request that moves
    an order into `delivered` calls accrue_for_order(), so an order earns
    points exactly once.
    """

    @staticmethod
    def points_for_amount(amount: Decimal, points_per_dollar: Decimal) -> int:
        return int((Decimal(amount) * Decimal(points_per_dollar)).to_integral_value(rounding=ROUND_FLOOR))

    @staticmethod
    def get_or_create_customer(tenant, phone, name="") -> LoyaltyCustomer:
        customer, created = LoyaltyCustomer.all_objects.get_or_create(
            tenant=tenant,
            phone=phone,
            defaults={'name': name},
        )
        if not created and name and not customer.name:
            LoyaltyCustomer.all_objects.filter(pk=customer.pk, name="").update(name=name)
            customer.name = name
        return customer

    @staticmethod
    @transaction.atomic
    def accrue_for_order(order):
        """
        Credit the customer of a delivered order.

        Returns the LoyaltyTransaction written, or None when the tenant has
        no loyalty program or the order has no phone number.
        """
        tenant = order.tenant
        if not tenant.loyalty_enabled or not order.customer_phone:
            return None

        points = LoyaltyService.points_for_amount(order.total, tenant.loyalty_points_per_dollar)
        customer = LoyaltyService.get_or_create_customer(tenant, order.customer_phone, order.customer_name)

        LoyaltyCustomer.all_objects.filter(pk=customer.pk).update(
            total_points=F('total_points') + points,
            total_spent=F('total_spent') + order.total,
            total_orders=F('total_orders') + 1,
            last_order_at=timezone.now(),
            updated_at=timezone.now(),
        )

        entry = LoyaltyTransaction.all_objects.create(
            tenant=tenant,
            customer=customer,
            transaction_type=LoyaltyTransaction.TransactionType.EARN,
            points=points,
            order=order,
            description=f"Order {order.order_number}",
        )
        logger.info(f"Loyalty: {points} points to {customer.phone} for order {order.order_number}")
        return entry

    @staticmethod
    @transaction.atomic
    def add_bonus(customer: LoyaltyCustomer, points: int, description="") -> LoyaltyCustomer:
        if points <= 0:
            raise ValidationFault("Bonus points must be positive")

        LoyaltyCustomer.all_objects.filter(pk=customer.pk).update(
            total_points=F('total_points') + points,
            updated_at=timezone.now(),
        )
        LoyaltyTransaction.all_objects.create(
            tenant_id=customer.tenant_id,
            customer=customer,
            transaction_type=LoyaltyTransaction.TransactionType.BONUS,
            points=points,
            description=description or "Manual bonus",
        )
        customer.refresh_from_db()
        return customer

    @staticmethod
    @transaction.atomic
    def redeem(customer: LoyaltyCustomer, points: int, description="") -> LoyaltyCustomer:
        """
        Spend points. The subtraction only happens if the balance still
        covers it when the UPDATE runs.

        Raises:
            InsufficientPoints: balance too low
        """
        if points <= 0:
            raise ValidationFault("Redeemed points must be positive")

        updated = LoyaltyCustomer.all_objects.filter(
            pk=customer.pk,
            total_points__gte=points,
        ).update(
            total_points=F('total_points') - points,
            updated_at=timezone.now(),
        )
        if not updated:
            raise InsufficientPoints()

        LoyaltyTransaction.all_objects.create(
            tenant_id=customer.tenant_id,
            customer=customer,
            transaction_type=LoyaltyTransaction.TransactionType.REDEEM,
            points=-points,
            description=description or "Points redemption",
        )
        customer.refresh_from_db()
        return customer

    @staticmethod
    def get_stats(queryset):
        stats = queryset.aggregate(
            total=Count('id'),
            total_points=Sum('total_points'),
            total_spent=Sum('total_spent'),
        )
        stats['total_points'] = stats['total_points'] or 0
        stats['total_spent'] = stats['total_spent'] or Decimal("0.00")
        return stats
