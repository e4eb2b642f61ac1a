from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal
from typing import List
import logging

from django.db import DatabaseError, transaction
from django.utils import timezone

from core_backend.exceptions import (
    ConflictFault,
    CrossTenantFault,
    IllegalTransition,
    PersistenceFault,
    ResourceNotFound,
    UnknownRestaurant,
    ValidationFault,
)
from orders.models import Order, OrderItem, OrderItemExtra
from seating.models import Table
from tenant.models import Tenant
from .ledger_service import LedgerService
from .notification_service import OrderNotificationService
from .pricing_service import OrderPricingService

logger = logging.getLogger(__name__)
security_logger = logging.getLogger('security')


@dataclass
class OrderCreationResult:
    """
    Outcome of a public order submission.

    The order row is authoritative once it exists. `item_failures` lists the
    item or extras rows that could not be written; the order is still
    returned to the customer.
    """
    order: Order
    item_failures: List[str] = field(default_factory=list)
    promotion_counted: bool = True

    @property
    def is_complete(self):
        return not self.item_failures


class OrderCreationService:
    """Validate, price and persist public orders."""

    @staticmethod
    def resolve_tenant(restaurant_id) -> Tenant:
        tenant = Tenant.objects.filter(id=restaurant_id, is_active=True).first()
        if tenant is None:
            raise UnknownRestaurant()
        return tenant

    @staticmethod
    def resolve_table(tenant, table_id) -> Table:
        table = Table.all_objects.filter(pk=table_id).first()
        if table is None or not table.is_active:
            raise ValidationFault(f"Table {table_id} not found")
        if table.tenant_id != tenant.id:
            security_logger.warning(
                f"Cross-tenant table reference: restaurant {tenant.id} "
                f"submitted table {table_id} owned by restaurant {table.tenant_id}"
            )
            raise CrossTenantFault('table', table_id, tenant.id, table.tenant_id)
        return table

    @staticmethod
    def create_order(restaurant_id, data) -> OrderCreationResult:
        """
        Create an order from a validated public payload.

        Everything that can reject the order (restaurant, order type, table,
        products, promotion eligibility) is checked before the first write.
        Inside the transaction the promotion use is counted first, so an
        exhausted promotion rolls back before the order row exists.

        Raises:
            UnknownRestaurant, ValidationFault, CrossTenantFault,
            InactiveProduct, PromotionNotApplicable (400/403)
            PromotionExhausted, GiftCardUnavailable (409)
            PersistenceFault (500)
        """
        tenant = OrderCreationService.resolve_tenant(restaurant_id)

        order_type = data.get('order_type') or Order.OrderType.DINE_IN
        if not tenant.accepts_order_type(order_type):
            raise ValidationFault(f"{tenant.name} does not accept {order_type} orders")

        table = None
        if data.get('table_id') is not None:
            table = OrderCreationService.resolve_table(tenant, data['table_id'])

        priced = OrderPricingService.price_order(tenant, {**data, 'order_type': order_type})

        with transaction.atomic():
            promotion_counted = True
            if priced.promotion is not None:
                promotion_counted = LedgerService.consume_promotion(priced.promotion)

            order = Order(
                tenant=tenant,
                order_type=order_type,
                customer_name=data['customer_name'],
                customer_phone=data.get('customer_phone') or "",
                notes=data.get('notes') or "",
                delivery_address=data.get('delivery_address') or "",
                table=table,
                subtotal=priced.subtotal,
                promotion=priced.promotion,
                discount_code=priced.promotion.code if priced.promotion else "",
                discount_amount=priced.discount_amount,
                delivery_fee=priced.delivery_fee,
                tip_amount=priced.tip_amount,
                total=priced.total,
                is_scheduled=bool(data.get('is_scheduled')),
                scheduled_for=data.get('scheduled_for'),
            )
            try:
                order.save()
            except DatabaseError as e:
                logger.error(f"Failed to create order for restaurant {tenant.id}: {e}")
                raise PersistenceFault()

            item_failures = OrderCreationService._create_items(order, priced.lines)

            if data.get('gift_card_code') and order.total > 0:
                OrderCreationService._pay_with_gift_card(order, data['gift_card_code'])

            LedgerService.decrement_inventory(
                order, [(line.product.id, line.qty) for line in priced.lines]
            )
            # Last write before commit, once every ledger row lock is held
            order.updated_at = timezone.now()
            Order.all_objects.filter(pk=order.pk).update(updated_at=order.updated_at)
            OrderNotificationService.schedule_order_update(order)

        logger.info(
            f"Order {order.order_number} created for restaurant {tenant.id}: total {order.total}"
            + (f", {len(item_failures)} item write failures" if item_failures else "")
        )
        return OrderCreationResult(
            order=order,
            item_failures=item_failures,
            promotion_counted=promotion_counted,
        )

    @staticmethod
    def _create_items(order, lines) -> List[str]:
        """
        Write item and extras rows, each batch in its own savepoint.
        Returns a description of every batch that failed.
        """
        failures = []
        for position, line in enumerate(lines, start=1):
            try:
                with transaction.atomic():
                    item = OrderItem.all_objects.create(
                        tenant_id=order.tenant_id,
                        order=order,
                        product=line.product,
                        variant=line.variant,
                        product_name=line.product.name,
                        variant_name=line.variant.name if line.variant else "",
                        qty=line.qty,
                        unit_price=line.unit_price,
                        line_total=line.line_total,
                        notes=line.notes,
                    )
            except DatabaseError as e:
                logger.error(f"[ORDER] Failed to insert item {position} of order {order.order_number}: {e}")
                failures.append(f"item {position} ({line.product.name})")
                continue

            if not line.extras:
                continue

            try:
                with transaction.atomic():
                    OrderItemExtra.all_objects.bulk_create([
                        OrderItemExtra(
                            tenant_id=order.tenant_id,
                            order_item=item,
                            extra=priced_extra.extra,
                            name=priced_extra.extra.name,
                            price=priced_extra.price,
                        )
                        for priced_extra in line.extras
                    ])
            except DatabaseError as e:
                logger.error(f"[ORDER] Failed to insert extras for item {position} of order {order.order_number}: {e}")
                failures.append(f"extras of item {position} ({line.product.name})")

        return failures

    @staticmethod
    def _pay_with_gift_card(order, code):
        try:
            result = LedgerService.debit_gift_card(order, code)
        except ResourceNotFound:
            raise ValidationFault("Invalid gift card code", code="GIFT_CARD_NOT_FOUND")

        order.gift_card_id = result['gift_card_id']
        order.gift_card_amount = result['amount_used']
        Order.all_objects.filter(pk=order.pk).update(
            gift_card_id=order.gift_card_id,
            gift_card_amount=order.gift_card_amount,
        )


class OrderService:
    """
    Order status lifecycle for staff.

    Every transition is a single UPDATE keyed on the order id and the status
    the caller expects to leave, so of two devices acting on the same order
    only one write lands; the other re-reads and either finds its target
    already reached (no-op) or is refused.
    """

    VALID_STATUS_TRANSITIONS = {
        Order.OrderStatus.PENDING: [
            Order.OrderStatus.CONFIRMED,
            Order.OrderStatus.CANCELLED,
        ],
        Order.OrderStatus.CONFIRMED: [
            Order.OrderStatus.PREPARING,
            Order.OrderStatus.CANCELLED,
        ],
        Order.OrderStatus.PREPARING: [
            Order.OrderStatus.READY,
            Order.OrderStatus.CANCELLED,
        ],
        Order.OrderStatus.READY: [
            Order.OrderStatus.DELIVERED,
            Order.OrderStatus.CANCELLED,
        ],
        Order.OrderStatus.DELIVERED: [],
        Order.OrderStatus.CANCELLED: [],
    }

    @staticmethod
    def can_transition(current, new_status):
        return new_status in OrderService.VALID_STATUS_TRANSITIONS.get(current, [])

    @staticmethod
    def _transition_fields(order, new_status, now):
        fields = {'status': new_status, 'updated_at': now}
        if new_status == Order.OrderStatus.CONFIRMED:
            fields['estimated_ready_at'] = now + timedelta(minutes=order.tenant.estimated_prep_minutes)
        elif new_status == Order.OrderStatus.DELIVERED:
            fields['completed_at'] = now
        elif new_status == Order.OrderStatus.CANCELLED:
            fields['cancelled_at'] = now
        return fields

    @staticmethod
    def update_order_status(order: Order, new_status: str, max_attempts: int = 3) -> Order:
        """
        Move an order to `new_status`.

        Requesting the status the order is already in returns it unchanged
        and re-runs nothing. Only the call that actually moves an order into
        `delivered` accrues loyalty points.

        Raises:
            ValidationFault: unknown status
            IllegalTransition: skipped state or terminal order (409)
        """
        if new_status not in Order.OrderStatus.values:
            raise ValidationFault(f"'{new_status}' is not a valid order status.")

        for _ in range(max_attempts):
            current = (
                Order.all_objects.filter(pk=order.pk)
                .values_list('status', flat=True)
                .first()
            )
            if current is None:
                raise ResourceNotFound("Order not found")

            if current == new_status:
                order.refresh_from_db()
                return order

            if not OrderService.can_transition(current, new_status):
                raise IllegalTransition(current, new_status)

            with transaction.atomic():
                fields = OrderService._transition_fields(order, new_status, timezone.now())
                updated = Order.all_objects.filter(pk=order.pk, status=current).update(**fields)
                if not updated:
                    # Another device moved the order first; re-evaluate from its new state
                    continue

                order.refresh_from_db()
                if new_status == Order.OrderStatus.DELIVERED:
                    LedgerService.accrue_loyalty(order)
                    # Last write before commit, once the loyalty row lock is held
                    Order.all_objects.filter(pk=order.pk).update(updated_at=timezone.now())
                    order.refresh_from_db()
                OrderNotificationService.schedule_order_update(order)

            logger.info(f"Order {order.order_number} moved {current} -> {new_status}")
            return order

        raise ConflictFault("Order is being updated by another device, try again")

    @staticmethod
    @transaction.atomic
    def assign_table(order: Order, table_id) -> Order:
        """
        Seat a non-terminal order at a table of its own tenant, or clear the
        table with table_id=None. Bumps updated_at so displays refresh.
        """
        locked = Order.all_objects.select_for_update().get(pk=order.pk)
        if locked.is_terminal:
            raise ConflictFault(f"Cannot change the table of a {locked.status} order")

        table = None
        if table_id is not None:
            table = Table.all_objects.filter(pk=table_id).first()
            if table is None or table.tenant_id != locked.tenant_id:
                if table is not None:
                    security_logger.warning(
                        f"Cross-tenant table assignment: order {locked.id} of tenant {locked.tenant_id} "
                        f"to table {table_id} owned by tenant {table.tenant_id}"
                    )
                raise ResourceNotFound("Table not found")

        Order.all_objects.filter(pk=locked.pk).update(table=table, updated_at=timezone.now())
        order.refresh_from_db()
        OrderNotificationService.schedule_order_update(order)
        return order

    @staticmethod
    def outstanding_balance(order: Order) -> Decimal:
        """What is left to pay after the gift card."""
        return max(order.total - order.gift_card_amount, Decimal("0.00"))
