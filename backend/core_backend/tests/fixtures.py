"""
Shared test fixtures for all backend tests.

This module provides reusable pytest fixtures for common test objects
like tenants, users, products, promotions, etc.
"""
import pytest
from decimal import Decimal

from tenant.models import Tenant
from users.models import User
from products.models import Product, ProductVariant, ProductExtra
from orders.models import Order
from discounts.models import Promotion
from giftcards.models import GiftCard
from seating.models import Table


# ============================================================================
# TENANT FIXTURES
# ============================================================================

@pytest.fixture
def tenant_a(db):
    """Create test tenant A (Pizza Place)"""
    return Tenant.objects.create(
        name='Pizza Place',
        slug='pizza-place',
        is_active=True,
        delivery_fee=Decimal('25.00'),
        estimated_prep_minutes=20,
    )


@pytest.fixture
def tenant_b(db):
    """Create test tenant B (Burger Joint)"""
    return Tenant.objects.create(
        name='Burger Joint',
        slug='burger-joint',
        is_active=True
    )


@pytest.fixture
def inactive_tenant(db):
    """Create inactive test tenant"""
    return Tenant.objects.create(
        name='Closed Restaurant',
        slug='closed-restaurant',
        is_active=False
    )


# ============================================================================
# USER FIXTURES
# ============================================================================

@pytest.fixture
def admin_user_tenant_a(tenant_a):
    """Create owner user for tenant A"""
    return User.objects.create_user(
        email='admin@pizza.com',
        username='admin_pizza',
        password='password123',
        tenant=tenant_a,
        role=User.Role.OWNER,
        is_pos_staff=True
    )


@pytest.fixture
def admin_user_tenant_b(tenant_b):
    """Create owner user for tenant B"""
    return User.objects.create_user(
        email='admin@burger.com',
        username='admin_burger',
        password='password123',
        tenant=tenant_b,
        role=User.Role.OWNER,
        is_pos_staff=True
    )


@pytest.fixture
def manager_user_tenant_a(tenant_a):
    """Create manager user for tenant A"""
    return User.objects.create_user(
        email='manager@pizza.com',
        username='manager_pizza',
        password='password123',
        tenant=tenant_a,
        role=User.Role.MANAGER,
        is_pos_staff=True
    )


@pytest.fixture
def cashier_user_tenant_a(tenant_a):
    """Create cashier user for tenant A"""
    return User.objects.create_user(
        email='cashier@pizza.com',
        username='cashier_pizza',
        password='password123',
        tenant=tenant_a,
        role=User.Role.CASHIER,
        is_pos_staff=True
    )


# ============================================================================
# PRODUCT FIXTURES
# ============================================================================

@pytest.fixture
def product_tenant_a(tenant_a):
    """Create sample product for tenant A (Pepperoni Pizza, $10.00)"""
    return Product.objects.create(
        name='Pepperoni Pizza',
        price=Decimal('10.00'),
        tenant=tenant_a,
        is_active=True
    )


@pytest.fixture
def second_product_tenant_a(tenant_a):
    """Create a second product for tenant A (Garlic Knots, $6.50)"""
    return Product.objects.create(
        name='Garlic Knots',
        price=Decimal('6.50'),
        tenant=tenant_a,
        is_active=True
    )


@pytest.fixture
def inactive_product_tenant_a(tenant_a):
    """Create an inactive product for tenant A"""
    return Product.objects.create(
        name='Seasonal Calzone',
        price=Decimal('12.00'),
        tenant=tenant_a,
        is_active=False
    )


@pytest.fixture
def product_tenant_b(tenant_b):
    """Create sample product for tenant B (Cheeseburger)"""
    return Product.objects.create(
        name='Cheeseburger',
        price=Decimal('8.99'),
        tenant=tenant_b,
        is_active=True
    )


@pytest.fixture
def variant_tenant_a(product_tenant_a):
    """Large size for the pepperoni pizza (+$4.00)"""
    return ProductVariant.objects.create(
        tenant=product_tenant_a.tenant,
        product=product_tenant_a,
        name='Large',
        price_delta=Decimal('4.00'),
    )


@pytest.fixture
def extra_tenant_a(product_tenant_a):
    """Extra cheese for the pepperoni pizza (+$1.50)"""
    return ProductExtra.objects.create(
        tenant=product_tenant_a.tenant,
        product=product_tenant_a,
        name='Extra Cheese',
        price=Decimal('1.50'),
    )


@pytest.fixture
def extra_tenant_b(product_tenant_b):
    """Bacon for the cheeseburger (+$2.00)"""
    return ProductExtra.objects.create(
        tenant=product_tenant_b.tenant,
        product=product_tenant_b,
        name='Bacon',
        price=Decimal('2.00'),
    )


# ============================================================================
# PROMOTION / GIFT CARD FIXTURES
# ============================================================================

@pytest.fixture
def promotion_tenant_a(tenant_a):
    """SAVE10: 10% off, one use left (4 of 5 used)"""
    return Promotion.objects.create(
        tenant=tenant_a,
        code='SAVE10',
        discount_type=Promotion.DiscountType.PERCENTAGE,
        discount_value=Decimal('10.00'),
        max_uses=5,
        current_uses=4,
        is_active=True,
    )


@pytest.fixture
def promotion_tenant_b(tenant_b):
    """FIVEOFF: $5 off at the burger joint"""
    return Promotion.objects.create(
        tenant=tenant_b,
        code='FIVEOFF',
        discount_type=Promotion.DiscountType.FIXED,
        discount_value=Decimal('5.00'),
        is_active=True,
    )


@pytest.fixture
def gift_card_tenant_a(tenant_a):
    """$50.00 gift card for tenant A"""
    return GiftCard.objects.create(
        tenant=tenant_a,
        code='GIFT-TEST-0001',
        initial_amount=Decimal('50.00'),
    )


# ============================================================================
# SEATING FIXTURES
# ============================================================================

@pytest.fixture
def table_tenant_a(tenant_a):
    return Table.objects.create(tenant=tenant_a, name='T1', capacity=4)


@pytest.fixture
def table_tenant_b(tenant_b):
    return Table.objects.create(tenant=tenant_b, name='B1', capacity=2)


# ============================================================================
# ORDER FIXTURES
# ============================================================================

@pytest.fixture
def order_payload(tenant_a, product_tenant_a):
    """
    Build a public order payload for tenant A.

    Usage:
        payload = order_payload(items=[...], order_type='delivery')
    """
    def _build(**overrides):
        payload = {
            'restaurant_id': str(tenant_a.id),
            'customer_name': 'Jane Doe',
            'customer_phone': '555-0100',
            'order_type': 'pickup',
            'items': [
                {'product_id': product_tenant_a.id, 'qty': 2, 'extras': []},
            ],
        }
        payload.update(overrides)
        return payload

    return _build


@pytest.fixture
def order_tenant_a(tenant_a, product_tenant_a):
    """Create a pending $20.00 order for tenant A"""
    return Order.objects.create(
        tenant=tenant_a,
        customer_name='Jane Doe',
        customer_phone='555-0100',
        order_type=Order.OrderType.PICKUP,
        subtotal=Decimal('20.00'),
        total=Decimal('20.00'),
    )


@pytest.fixture
def order_tenant_b(tenant_b):
    """Create a pending order for tenant B"""
    return Order.objects.create(
        tenant=tenant_b,
        customer_name='John Smith',
        order_type=Order.OrderType.PICKUP,
        subtotal=Decimal('8.99'),
        total=Decimal('8.99'),
    )
