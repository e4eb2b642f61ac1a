import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import generics

from tenant.managers import set_current_tenant
from core_backend.exceptions import ResourceNotFound
from ..pagination import StandardPagination
from .permissions import IsTenantStaff

security_logger = logging.getLogger('security')


class TenantScopedAPIView(generics.GenericAPIView):
    """
    Base class for staff endpoints.

    After authentication the request is bound to the staff user's tenant,
    both on `request.tenant` and in the thread-local context that
    TenantManager reads. Every `Model.objects` query made by the view or the
    services it calls is therefore scoped to that tenant.

    Usage:
        class TableView(TenantScopedAPIView):
            queryset = Table.objects.all()

            def get(self, request):
                tables = self.get_queryset()
                ...
    """

    permission_classes = [IsTenantStaff]
    pagination_class = StandardPagination

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        request.tenant = request.user.tenant
        set_current_tenant(request.user.tenant)

    def get_queryset(self):
        """
        Re-evaluate the queryset at request time.

        The class-level queryset is built at import time, before any tenant
        context exists, so the manager has to be asked again here.
        """
        if getattr(self, 'queryset', None) is not None:
            return self.queryset.model.objects.all()
        return super().get_queryset()

    def get_tenant_object(self, model, pk, label=None):
        """
        Fetch a row of `model` owned by the request's tenant.

        A row that exists under another tenant is reported as not found to
        the caller and logged on the security logger.
        """
        label = str(label or model._meta.verbose_name)
        try:
            obj = model.all_objects.get(pk=pk)
        except (model.DoesNotExist, ValueError, TypeError, DjangoValidationError):
            raise ResourceNotFound(f"{label.capitalize()} not found")

        if obj.tenant_id != self.request.tenant.id:
            security_logger.warning(
                f"Cross-tenant {label} access: tenant {self.request.tenant.id} "
                f"requested {label} {pk} owned by tenant {obj.tenant_id}"
            )
            raise ResourceNotFound(f"{label.capitalize()} not found")

        return obj
