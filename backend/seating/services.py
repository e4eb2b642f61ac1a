import logging

from django.db import transaction
from django.utils import timezone

from core_backend.exceptions import IllegalTransition, ResourceNotFound, ValidationFault
from .models import Table

logger = logging.getLogger(__name__)
security_logger = logging.getLogger('security')

_UNSET = object()


class TableService:
    """Staff-driven table occupancy. Never reads or writes order status."""

    VALID_STATUS_TRANSITIONS = {
        Table.Status.AVAILABLE: [Table.Status.OCCUPIED, Table.Status.RESERVED],
        Table.Status.RESERVED: [Table.Status.OCCUPIED, Table.Status.AVAILABLE],
        Table.Status.OCCUPIED: [Table.Status.CLEANING],
        Table.Status.CLEANING: [Table.Status.AVAILABLE],
    }

    @staticmethod
    def can_transition(current, new_status):
        return new_status == current or new_status in TableService.VALID_STATUS_TRANSITIONS.get(current, [])

    @staticmethod
    @transaction.atomic
    def create_table(tenant, name, capacity=4) -> Table:
        if Table.all_objects.filter(tenant=tenant, name=name).exists():
            raise ValidationFault(f"Table '{name}' already exists")
        return Table.all_objects.create(tenant=tenant, name=name, capacity=capacity)

    @staticmethod
    @transaction.atomic
    def update_table(table_id, tenant, status=None, assigned_server=_UNSET, current_order_id=_UNSET) -> Table:
        """
        Apply a staff edit to a table.

        The row is locked for the duration so two devices cannot interleave a
        status check and a write. Requesting the status the table is already
        in is a no-op. Moving to available clears the linked order and the
        assigned server.

        Raises:
            ResourceNotFound: table or linked order not in this tenant
            IllegalTransition: status change not allowed from the current state
        """
        from orders.models import Order

        table = Table.all_objects.select_for_update().filter(pk=table_id, tenant=tenant).first()
        if table is None:
            raise ResourceNotFound("Table not found")

        update_fields = []

        if status is not None and status != table.status:
            if not TableService.can_transition(table.status, status):
                raise IllegalTransition(table.status, status)
            table.status = status
            table.status_changed_at = timezone.now()
            update_fields += ['status', 'status_changed_at']

        if assigned_server is not _UNSET:
            table.assigned_server = assigned_server or ""
            update_fields.append('assigned_server')

        if current_order_id is not _UNSET:
            if current_order_id is None:
                table.current_order = None
            else:
                order = Order.all_objects.filter(pk=current_order_id).first()
                if order is None:
                    raise ResourceNotFound("Order not found")
                if order.tenant_id != tenant.id:
                    security_logger.warning(
                        f"Cross-tenant order link: tenant {tenant.id} tried to seat "
                        f"order {current_order_id} owned by tenant {order.tenant_id} at table {table.id}"
                    )
                    raise ResourceNotFound("Order not found")
                table.current_order = order
            update_fields.append('current_order')

        if table.status == Table.Status.AVAILABLE and 'status' in update_fields:
            table.current_order = None
            table.assigned_server = ""
            update_fields += ['current_order', 'assigned_server']

        if update_fields:
            table.save(update_fields=sorted(set(update_fields)) + ['updated_at'])
            logger.info(f"Table {table.name} ({table.id}) updated: {sorted(set(update_fields))}")

        return table

    @staticmethod
    def get_stats(tables):
        stats = {'total': 0}
        for value in Table.Status.values:
            stats[value] = 0
        for table in tables:
            stats['total'] += 1
            stats[table.status] += 1
        return stats
