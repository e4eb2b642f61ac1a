"""
Inventory Tests

Tests for InventoryService, the low-stock alert task and /api/tenant/inventory/:
- Only tracked products are decremented, and stock may go negative
- One alert per dip below threshold, re-armed by restocking
- Every change is written to the inventory log
"""
import pytest
from unittest import mock

from core_backend.exceptions import ValidationFault
from inventory.models import InventoryLog, InventoryRecord
from inventory.services import InventoryService
from inventory.tasks import send_low_stock_alert
from orders.models import Order

INVENTORY_URL = '/api/tenant/inventory/'


@pytest.fixture
def tracked_record(tenant_a, product_tenant_a):
    return InventoryRecord.all_objects.create(
        tenant=tenant_a, product=product_tenant_a, track_inventory=True,
        stock_quantity=10, low_stock_threshold=5,
    )


@pytest.mark.django_db
class TestOrderDecrement:

    def test_tracked_product_is_decremented(self, order_tenant_a, product_tenant_a, tracked_record):
        InventoryService.decrement_for_order(order_tenant_a, [(product_tenant_a.id, 3)])

        tracked_record.refresh_from_db()
        assert tracked_record.stock_quantity == 7
        log = InventoryLog.all_objects.get(product=product_tenant_a)
        assert log.change_type == 'order'
        assert (log.previous_quantity, log.new_quantity, log.quantity_change) == (10, 7, -3)
        assert log.order == order_tenant_a

    def test_repeated_lines_are_summed(self, order_tenant_a, product_tenant_a, tracked_record):
        InventoryService.decrement_for_order(
            order_tenant_a, [(product_tenant_a.id, 1), (product_tenant_a.id, 2)]
        )

        tracked_record.refresh_from_db()
        assert tracked_record.stock_quantity == 7

    def test_untracked_product_is_left_alone(self, tenant_a, order_tenant_a, product_tenant_a):
        record = InventoryRecord.all_objects.create(
            tenant=tenant_a, product=product_tenant_a, track_inventory=False, stock_quantity=10,
        )

        assert InventoryService.decrement_for_order(order_tenant_a, [(product_tenant_a.id, 3)]) == []
        record.refresh_from_db()
        assert record.stock_quantity == 10

    def test_stock_may_go_negative(self, order_tenant_a, product_tenant_a, tracked_record):
        with mock.patch.object(send_low_stock_alert, 'delay'):
            InventoryService.decrement_for_order(order_tenant_a, [(product_tenant_a.id, 12)])

        tracked_record.refresh_from_db()
        assert tracked_record.stock_quantity == -2
        assert tracked_record.is_out_of_stock

    def test_placing_an_order_decrements_stock(self, api_client, order_payload, product_tenant_a, tracked_record):
        response = api_client.post('/api/orders/', order_payload(), format='json')

        assert response.status_code == 200
        tracked_record.refresh_from_db()
        assert tracked_record.stock_quantity == 8
        order = Order.all_objects.get(pk=response.data['order']['id'])
        assert InventoryLog.all_objects.get(order=order).quantity_change == -2


@pytest.mark.django_db
class TestLowStockAlert:

    def test_alert_queued_once_per_dip(
        self, order_tenant_a, product_tenant_a, tracked_record, django_capture_on_commit_callbacks
    ):
        with mock.patch.object(send_low_stock_alert, 'delay') as delay:
            with django_capture_on_commit_callbacks(execute=True):
                InventoryService.decrement_for_order(order_tenant_a, [(product_tenant_a.id, 4)])
            delay.assert_not_called()

            with django_capture_on_commit_callbacks(execute=True):
                InventoryService.decrement_for_order(order_tenant_a, [(product_tenant_a.id, 1)])
            with django_capture_on_commit_callbacks(execute=True):
                InventoryService.decrement_for_order(order_tenant_a, [(product_tenant_a.id, 1)])

        delay.assert_called_once_with(tracked_record.pk)
        tracked_record.refresh_from_db()
        assert tracked_record.low_stock_notified is True

    def test_restock_rearms_alert(
        self, order_tenant_a, product_tenant_a, tracked_record, django_capture_on_commit_callbacks
    ):
        with mock.patch.object(send_low_stock_alert, 'delay') as delay:
            with django_capture_on_commit_callbacks(execute=True):
                InventoryService.decrement_for_order(order_tenant_a, [(product_tenant_a.id, 6)])

            record = InventoryService.restock(product_tenant_a, 20)
            assert record.stock_quantity == 24
            assert record.low_stock_notified is False

            with django_capture_on_commit_callbacks(execute=True):
                InventoryService.decrement_for_order(order_tenant_a, [(product_tenant_a.id, 20)])

        assert delay.call_count == 2

    def test_restock_below_threshold_stays_notified(self, product_tenant_a, tracked_record):
        InventoryRecord.all_objects.filter(pk=tracked_record.pk).update(stock_quantity=1, low_stock_notified=True)

        record = InventoryService.restock(product_tenant_a, 2)

        assert record.stock_quantity == 3
        assert record.low_stock_notified is True

    def test_task_broadcasts_to_displays(self, tracked_record):
        with mock.patch(
            'orders.services.notification_service.OrderNotificationService.broadcast_low_stock'
        ) as broadcast:
            result = send_low_stock_alert(tracked_record.pk)

        broadcast.assert_called_once()
        assert result['status'] == 'sent'
        assert result['stock_quantity'] == 10

    def test_task_for_missing_record(self, db):
        result = send_low_stock_alert(999999)

        assert result['status'] == 'failed'

    def test_task_retries_when_broadcast_fails(self, tracked_record, caplog):
        with mock.patch(
            'orders.services.notification_service.OrderNotificationService.broadcast_low_stock',
            side_effect=RuntimeError('channel layer down'),
        ):
            with pytest.raises(Exception):
                send_low_stock_alert(tracked_record.pk)

        assert 'Error broadcasting low-stock alert' in caplog.text


@pytest.mark.django_db
class TestManualStockChanges:

    def test_restock_creates_record_if_missing(self, product_tenant_a, admin_user_tenant_a):
        record = InventoryService.restock(product_tenant_a, 5, user=admin_user_tenant_a, reason='Delivery')

        assert record.stock_quantity == 5
        log = InventoryLog.all_objects.get(product=product_tenant_a)
        assert log.change_type == 'restock'
        assert log.performed_by == admin_user_tenant_a

    def test_restock_must_be_positive(self, product_tenant_a):
        with pytest.raises(ValidationFault):
            InventoryService.restock(product_tenant_a, 0)

    def test_adjust_sets_absolute_level(self, product_tenant_a, tracked_record):
        with mock.patch.object(send_low_stock_alert, 'delay'):
            record = InventoryService.adjust(product_tenant_a, 3, reason='Count')

        assert record.stock_quantity == 3
        log = InventoryLog.all_objects.get(product=product_tenant_a)
        assert log.quantity_change == -7

    def test_adjust_rejects_negative(self, product_tenant_a, tracked_record):
        with pytest.raises(ValidationFault):
            InventoryService.adjust(product_tenant_a, -1)

    def test_log_failure_does_not_undo_stock_change(self, order_tenant_a, product_tenant_a, tracked_record, caplog):
        from django.db import DatabaseError

        with mock.patch.object(InventoryLog.all_objects, 'create', side_effect=DatabaseError('disk full')):
            InventoryService.decrement_for_order(order_tenant_a, [(product_tenant_a.id, 1)])

        tracked_record.refresh_from_db()
        assert tracked_record.stock_quantity == 9
        assert 'Failed to log inventory change' in caplog.text


@pytest.mark.django_db
class TestInventoryAPI:

    def test_list_records_and_stats(self, authenticated_client_tenant_a, tracked_record):
        response = authenticated_client_tenant_a.get(INVENTORY_URL)

        assert response.status_code == 200
        assert response.data['records'][0]['product_name'] == 'Pepperoni Pizza'
        assert response.data['stats'] == {'tracked': 1, 'low_stock': 0, 'out_of_stock': 0}

    def test_restock_via_patch(self, authenticated_client_tenant_a, product_tenant_a, tracked_record):
        response = authenticated_client_tenant_a.patch(INVENTORY_URL, {
            'product_id': product_tenant_a.id, 'restock_quantity': 15, 'reason': 'Weekly delivery',
        }, format='json')

        assert response.status_code == 200
        assert response.data['record']['stock_quantity'] == 25

    def test_enable_tracking(self, authenticated_client_tenant_a, product_tenant_a):
        response = authenticated_client_tenant_a.patch(INVENTORY_URL, {
            'product_id': product_tenant_a.id, 'track_inventory': True, 'low_stock_threshold': 3,
        }, format='json')

        assert response.status_code == 200
        assert response.data['record']['track_inventory'] is True
        assert response.data['record']['low_stock_threshold'] == 3

    def test_restock_and_set_together_rejected(self, authenticated_client_tenant_a, product_tenant_a):
        response = authenticated_client_tenant_a.patch(INVENTORY_URL, {
            'product_id': product_tenant_a.id, 'restock_quantity': 1, 'set_quantity': 1,
        }, format='json')

        assert response.status_code == 400

    def test_other_tenant_product_is_404(self, authenticated_client_tenant_a, product_tenant_b):
        response = authenticated_client_tenant_a.patch(INVENTORY_URL, {
            'product_id': product_tenant_b.id, 'restock_quantity': 5,
        }, format='json')

        assert response.status_code == 404

    def test_cashier_cannot_restock(self, cashier_client_tenant_a, product_tenant_a):
        response = cashier_client_tenant_a.patch(INVENTORY_URL, {
            'product_id': product_tenant_a.id, 'restock_quantity': 5,
        }, format='json')

        assert response.status_code == 403
