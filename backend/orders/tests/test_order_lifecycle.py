"""
Order State Machine Tests

Tests for OrderService and PATCH /api/tenant/orders/ including:
- The pending -> confirmed -> preparing -> ready -> delivered chain
- Rejection of skipped and terminal transitions
- Idempotent same-state requests from a second device
- Exactly-once loyalty accrual on delivery
- Table assignment
"""
import pytest
from decimal import Decimal

from core_backend.exceptions import ConflictFault, IllegalTransition, ResourceNotFound, ValidationFault
from discounts.models import Promotion
from loyalty.models import LoyaltyCustomer, LoyaltyTransaction
from orders.models import Order
from orders.services import OrderService

ORDERS_URL = '/api/tenant/orders/'


def advance(order, *statuses):
    for new_status in statuses:
        order = OrderService.update_order_status(order, new_status)
    return order


@pytest.mark.django_db
class TestStatusTransitions:

    def test_full_lifecycle(self, order_tenant_a):
        order = advance(order_tenant_a, 'confirmed', 'preparing', 'ready', 'delivered')

        assert order.status == Order.OrderStatus.DELIVERED
        assert order.is_terminal
        assert order.completed_at is not None
        assert order.cancelled_at is None

    def test_confirm_stamps_estimated_ready_time(self, order_tenant_a):
        order = OrderService.update_order_status(order_tenant_a, 'confirmed')

        expected = order.updated_at.timestamp() + 20 * 60
        assert order.estimated_ready_at is not None
        assert abs(order.estimated_ready_at.timestamp() - expected) < 1

    def test_skipping_a_state_is_rejected(self, order_tenant_a):
        with pytest.raises(IllegalTransition) as exc_info:
            OrderService.update_order_status(order_tenant_a, 'preparing')

        assert exc_info.value.current == 'pending'
        order_tenant_a.refresh_from_db()
        assert order_tenant_a.status == 'pending'

    def test_pending_to_delivered_is_rejected(self, order_tenant_a):
        with pytest.raises(IllegalTransition):
            OrderService.update_order_status(order_tenant_a, 'delivered')

    @pytest.mark.parametrize('terminal', ['delivered', 'cancelled'])
    def test_terminal_states_are_final(self, order_tenant_a, terminal):
        Order.all_objects.filter(pk=order_tenant_a.pk).update(status=terminal)

        for target in ['pending', 'confirmed', 'preparing', 'ready']:
            with pytest.raises(IllegalTransition):
                OrderService.update_order_status(order_tenant_a, target)

    @pytest.mark.parametrize('start', ['pending', 'confirmed', 'preparing', 'ready'])
    def test_cancel_from_any_open_state(self, order_tenant_a, start):
        Order.all_objects.filter(pk=order_tenant_a.pk).update(status=start)

        order = OrderService.update_order_status(order_tenant_a, 'cancelled')

        assert order.status == 'cancelled'
        assert order.cancelled_at is not None

    def test_unknown_status_rejected(self, order_tenant_a):
        with pytest.raises(ValidationFault):
            OrderService.update_order_status(order_tenant_a, 'shipped')

    def test_same_state_is_a_no_op(self, order_tenant_a):
        order = OrderService.update_order_status(order_tenant_a, 'confirmed')
        updated_at = order.updated_at

        again = OrderService.update_order_status(order, 'confirmed')

        assert again.status == 'confirmed'
        assert again.updated_at == updated_at

    def test_second_device_confirm_is_idempotent(self, order_tenant_a):
        """
        Two displays loaded the order while pending; both press confirm.
        The second press finds the order confirmed and changes nothing.
        """
        device_a = Order.all_objects.get(pk=order_tenant_a.pk)
        device_b = Order.all_objects.get(pk=order_tenant_a.pk)

        OrderService.update_order_status(device_a, 'confirmed')
        result = OrderService.update_order_status(device_b, 'confirmed')

        assert result.status == 'confirmed'

    def test_stale_device_cannot_reopen_delivered_order(self, order_tenant_a):
        stale = Order.all_objects.get(pk=order_tenant_a.pk)
        advance(order_tenant_a, 'confirmed', 'preparing', 'ready', 'delivered')

        assert stale.status == 'pending'
        with pytest.raises(IllegalTransition):
            OrderService.update_order_status(stale, 'cancelled')

    def test_transition_bumps_updated_at(self, order_tenant_a):
        before = order_tenant_a.updated_at

        order = OrderService.update_order_status(order_tenant_a, 'confirmed')

        assert order.updated_at > before

    def test_cancel_does_not_compensate_promotion(self, tenant_a, product_tenant_a, promotion_tenant_a):
        from orders.services import OrderCreationService

        order = OrderCreationService.create_order(tenant_a.id, {
            'customer_name': 'Jane', 'order_type': 'pickup',
            'items': [{'product_id': product_tenant_a.id, 'qty': 1, 'extras': []}],
            'discount_code': 'SAVE10',
        }).order

        OrderService.update_order_status(order, 'cancelled')

        promotion_tenant_a.refresh_from_db()
        assert promotion_tenant_a.current_uses == 5

    def test_total_is_never_rederived(self, order_tenant_a):
        Order.all_objects.filter(pk=order_tenant_a.pk).update(subtotal=Decimal('999.00'))

        order = advance(order_tenant_a, 'confirmed', 'preparing')

        assert order.total == Decimal('20.00')


@pytest.mark.django_db
class TestLoyaltyOnDelivery:

    @pytest.fixture
    def loyalty_tenant(self, tenant_a):
        tenant_a.loyalty_enabled = True
        tenant_a.loyalty_points_per_dollar = Decimal('10.00')
        tenant_a.save()
        return tenant_a

    def test_delivery_accrues_points_once(self, loyalty_tenant, order_tenant_a):
        order = advance(order_tenant_a, 'confirmed', 'preparing', 'ready', 'delivered')

        # Retried "deliver" from a second device
        OrderService.update_order_status(order, 'delivered')
        stale = Order.all_objects.get(pk=order.pk)
        OrderService.update_order_status(stale, 'delivered')

        customer = LoyaltyCustomer.all_objects.get(tenant=loyalty_tenant, phone='555-0100')
        assert customer.total_points == 200
        assert customer.total_orders == 1
        assert customer.total_spent == Decimal('20.00')
        assert LoyaltyTransaction.all_objects.filter(order=order).count() == 1

    def test_cancelled_order_earns_nothing(self, loyalty_tenant, order_tenant_a):
        OrderService.update_order_status(order_tenant_a, 'cancelled')

        assert not LoyaltyCustomer.all_objects.exists()

    def test_loyalty_failure_does_not_block_delivery(self, loyalty_tenant, order_tenant_a, caplog):
        from unittest import mock

        order = advance(order_tenant_a, 'confirmed', 'preparing', 'ready')
        with mock.patch(
            'orders.services.ledger_service.LoyaltyService.accrue_for_order',
            side_effect=RuntimeError('loyalty down'),
        ):
            order = OrderService.update_order_status(order, 'delivered')

        assert order.status == 'delivered'
        assert 'Loyalty accrual failed' in caplog.text


@pytest.mark.django_db
class TestTableAssignment:

    def test_assign_and_clear_table(self, order_tenant_a, table_tenant_a):
        before = order_tenant_a.updated_at

        order = OrderService.assign_table(order_tenant_a, table_tenant_a.id)
        assert order.table_id == table_tenant_a.id
        assert order.updated_at > before

        order = OrderService.assign_table(order, None)
        assert order.table_id is None

    def test_foreign_table_is_not_found(self, order_tenant_a, table_tenant_b):
        with pytest.raises(ResourceNotFound):
            OrderService.assign_table(order_tenant_a, table_tenant_b.id)

    def test_terminal_order_table_is_frozen(self, order_tenant_a, table_tenant_a):
        Order.all_objects.filter(pk=order_tenant_a.pk).update(status='delivered')

        with pytest.raises(ConflictFault):
            OrderService.assign_table(order_tenant_a, table_tenant_a.id)


@pytest.mark.django_db
class TestStaffOrderAPI:

    def test_list_orders_for_own_tenant_only(self, authenticated_client_tenant_a, order_tenant_a, order_tenant_b):
        response = authenticated_client_tenant_a.get(ORDERS_URL)

        assert response.status_code == 200
        assert response.data['count'] == 1
        assert response.data['results'][0]['id'] == str(order_tenant_a.id)
        assert response.data['results'][0]['amount_due'] == '20.00'

    def test_status_filter(self, authenticated_client_tenant_a, tenant_a, order_tenant_a):
        confirmed = Order.objects.create(
            tenant=tenant_a, customer_name='Bob', subtotal=Decimal('5.00'), total=Decimal('5.00'),
        )
        OrderService.update_order_status(confirmed, 'confirmed')

        response = authenticated_client_tenant_a.get(ORDERS_URL, {'status': 'confirmed'})

        assert response.status_code == 200
        assert [o['id'] for o in response.data['results']] == [str(confirmed.id)]

    def test_patch_status(self, authenticated_client_tenant_a, order_tenant_a):
        response = authenticated_client_tenant_a.patch(
            ORDERS_URL, {'id': str(order_tenant_a.id), 'status': 'confirmed'}, format='json'
        )

        assert response.status_code == 200
        assert response.data['order']['status'] == 'confirmed'

    def test_cashier_can_move_orders(self, cashier_client_tenant_a, order_tenant_a):
        response = cashier_client_tenant_a.patch(
            ORDERS_URL, {'id': str(order_tenant_a.id), 'status': 'confirmed'}, format='json'
        )

        assert response.status_code == 200

    def test_illegal_transition_is_409(self, authenticated_client_tenant_a, order_tenant_a):
        response = authenticated_client_tenant_a.patch(
            ORDERS_URL, {'id': str(order_tenant_a.id), 'status': 'ready'}, format='json'
        )

        assert response.status_code == 409
        assert response.data['code'] == 'ILLEGAL_TRANSITION'

    def test_other_tenant_order_is_404(self, authenticated_client_tenant_b, order_tenant_a, caplog):
        with caplog.at_level('WARNING', logger='security'):
            response = authenticated_client_tenant_b.patch(
                ORDERS_URL, {'id': str(order_tenant_a.id), 'status': 'confirmed'}, format='json'
            )

        assert response.status_code == 404
        order_tenant_a.refresh_from_db()
        assert order_tenant_a.status == 'pending'
        assert 'Cross-tenant order access' in caplog.text

    def test_patch_table(self, authenticated_client_tenant_a, order_tenant_a, table_tenant_a):
        response = authenticated_client_tenant_a.patch(
            ORDERS_URL, {'id': str(order_tenant_a.id), 'table_id': table_tenant_a.id}, format='json'
        )

        assert response.status_code == 200
        assert response.data['order']['table'] == {'id': table_tenant_a.id, 'name': 'T1'}

    def test_rejected_status_keeps_table_unchanged(
        self, authenticated_client_tenant_a, order_tenant_a, table_tenant_a, django_capture_on_commit_callbacks
    ):
        from unittest import mock

        with mock.patch(
            'orders.services.order_service.OrderNotificationService.broadcast_order_update'
        ) as broadcast:
            with django_capture_on_commit_callbacks(execute=True):
                response = authenticated_client_tenant_a.patch(ORDERS_URL, {
                    'id': str(order_tenant_a.id), 'status': 'delivered', 'table_id': table_tenant_a.id,
                }, format='json')

        assert response.status_code == 409
        order_tenant_a.refresh_from_db()
        assert order_tenant_a.table_id is None
        assert order_tenant_a.status == 'pending'
        broadcast.assert_not_called()

    def test_patch_table_and_status_together(self, authenticated_client_tenant_a, order_tenant_a, table_tenant_a):
        response = authenticated_client_tenant_a.patch(ORDERS_URL, {
            'id': str(order_tenant_a.id), 'status': 'confirmed', 'table_id': table_tenant_a.id,
        }, format='json')

        assert response.status_code == 200
        assert response.data['order']['status'] == 'confirmed'
        assert response.data['order']['table'] == {'id': table_tenant_a.id, 'name': 'T1'}

    def test_patch_requires_a_change(self, authenticated_client_tenant_a, order_tenant_a):
        response = authenticated_client_tenant_a.patch(
            ORDERS_URL, {'id': str(order_tenant_a.id)}, format='json'
        )

        assert response.status_code == 400

    def test_unauthenticated_is_rejected(self, api_client, order_tenant_a):
        response = api_client.get(ORDERS_URL)

        assert response.status_code in (401, 403)
