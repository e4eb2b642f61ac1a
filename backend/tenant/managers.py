from django.contrib.auth.models import BaseUserManager
from django.db import models
from threading import local

# Thread-local storage for current tenant
_thread_locals = local()


def set_current_tenant(tenant):
    """
    Set the current tenant for this thread.

    Args:
        tenant: Tenant instance or None to clear

    This is called by TenantMiddleware, staff views and Celery tasks to
    establish tenant context for the current request/task.
    """
    _thread_locals.tenant = tenant


def get_current_tenant():
    """
    Get the current tenant for this thread.

    Returns:
        Tenant instance or None if no tenant context is set
    """
    return getattr(_thread_locals, 'tenant', None)


class TenantManager(models.Manager):
    """
    Automatically filters querysets by current tenant.

    FAILS CLOSED: Returns empty queryset if no tenant context is set.
    This prevents accidental data leakage across tenants.

    Usage:
        class Promotion(models.Model):
            tenant = models.ForeignKey('tenant.Tenant', on_delete=models.CASCADE)
            code = models.CharField(max_length=50)

            objects = TenantManager()  # Default manager (tenant-filtered)
            all_objects = models.Manager()  # Bypass filter for explicit lookups

        # In a staff view:
        promotions = Promotion.objects.all()  # Filtered by request tenant

        # In public intake (tenant passed explicitly, ownership checked by hand):
        promotion = Promotion.all_objects.get(pk=promotion_id)
    """

    def get_queryset(self):
        """
        Return queryset filtered by current tenant.

        If no tenant context is set, returns empty queryset (fail-closed).
        """
        tenant = get_current_tenant()

        if tenant:
            return super().get_queryset().filter(tenant=tenant)

        # FAIL CLOSED: Return empty queryset if no tenant context
        return super().get_queryset().none()

    def for_tenant(self, tenant):
        """Explicitly scoped queryset, independent of the thread-local context."""
        return super().get_queryset().filter(tenant=tenant)


class TenantAwareUserManager(BaseUserManager):
    """
    Manager for the staff User model: tenant filtering plus auth methods.

    IMPORTANT: Unlike other models, User does NOT fail closed when no tenant
    context is set. Authentication runs before any tenant context exists,
    and Django admin login has none at all.

    Usage:
        class User(AbstractBaseUser):
            tenant = models.ForeignKey('tenant.Tenant', on_delete=models.CASCADE)

            objects = TenantAwareUserManager()
            all_objects = models.Manager()  # Bypass all filters
    """

    def get_queryset(self):
        qs = super().get_queryset()
        tenant = get_current_tenant()
        if tenant:
            return qs.filter(tenant=tenant)
        return qs

    def get_by_natural_key(self, username):
        """
        Called by Django's authentication system WITHOUT tenant context, so
        search across all tenants.
        """
        return self.model.all_objects.get(**{self.model.USERNAME_FIELD: username})

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError("The Email must be set")

        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        extra_fields.setdefault("is_pos_staff", True)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("is_active", True)

        if hasattr(self.model, 'Role'):
            extra_fields.setdefault("role", self.model.Role.OWNER)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self._create_user(email, password, **extra_fields)
