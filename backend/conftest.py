"""
Root conftest.py for all backend tests.

This file makes fixtures available to all test files across all apps.
"""
import pytest
from django.core.cache import cache
from django.conf import settings
from tenant.managers import set_current_tenant

# Public intake is rate limited per IP; every test client shares one IP
settings.RATELIMIT_ENABLE = False


# ============================================================================
# AUTO-USE FIXTURES (Run automatically for every test)
# ============================================================================

@pytest.fixture(autouse=True)
def reset_tenant_context():
    """
    Reset tenant context after each test.

    CRITICAL: This prevents tenant context from leaking between tests.
    If tenant context leaks, tests may pass when they should fail.
    """
    yield  # Run the test

    # After test: ALWAYS reset to None
    set_current_tenant(None)


@pytest.fixture(autouse=True)
def clear_cache_after_test():
    """
    Clear cache after each test to prevent cache pollution.

    Rate limit counters live in the default cache.
    """
    yield  # Run the test
    cache.clear()


# ============================================================================
# API CLIENT FIXTURES
# ============================================================================

@pytest.fixture
def api_client():
    """
    Provide DRF API client for API tests.

    Usage:
        def test_my_api(api_client):
            response = api_client.post('/api/orders/', payload, format='json')
            assert response.status_code == 200
    """
    from rest_framework.test import APIClient
    return APIClient()


def _authenticate(client, user):
    from users.services import UserService

    tokens = UserService.generate_tokens_for_user(user)

    # Set JWT cookie (middleware expects JWT in cookies, not Authorization header)
    client.cookies[settings.SIMPLE_JWT.get('AUTH_COOKIE', 'access_token')] = tokens['access']
    return client


@pytest.fixture
def authenticated_client_tenant_a(api_client, admin_user_tenant_a):
    """
    Provide authenticated API client for tenant A (owner role).

    Usage:
        def test_protected_endpoint(authenticated_client_tenant_a):
            response = authenticated_client_tenant_a.get('/api/tenant/orders/')
            assert response.status_code == 200
    """
    return _authenticate(api_client, admin_user_tenant_a)


@pytest.fixture
def authenticated_client_tenant_b(admin_user_tenant_b):
    """
    Provide authenticated API client for tenant B.

    Uses its own APIClient so a test can hold both tenants' clients at once.

    Usage:
        def test_tenant_isolation(authenticated_client_tenant_b, order_tenant_a):
            # Tenant B tries to update Tenant A's order
            response = authenticated_client_tenant_b.patch('/api/tenant/orders/', {...})
            assert response.status_code == 404
    """
    from rest_framework.test import APIClient
    return _authenticate(APIClient(), admin_user_tenant_b)


@pytest.fixture
def cashier_client_tenant_a(cashier_user_tenant_a):
    """Authenticated API client for a tenant A cashier (no manager rights)."""
    from rest_framework.test import APIClient
    return _authenticate(APIClient(), cashier_user_tenant_a)


# ============================================================================
# IMPORT ALL FIXTURES FROM core_backend/tests/fixtures.py
# ============================================================================
from core_backend.tests.fixtures import *
