"""
Tests for the error taxonomy and order_engine_exception_handler.
"""
import logging

from rest_framework import status
from rest_framework.exceptions import NotAuthenticated, NotFound, ValidationError

from core_backend.exceptions import (
    CrossTenantFault,
    IllegalTransition,
    PersistenceFault,
    ProductNotFound,
    PromotionExhausted,
    ValidationFault,
    order_engine_exception_handler,
)


class FakeRequest:
    path = '/api/orders/'


def handle(exc):
    return order_engine_exception_handler(exc, {'request': FakeRequest()})


class TestOrderEngineErrors:

    def test_status_codes(self):
        assert handle(ValidationFault()).status_code == status.HTTP_400_BAD_REQUEST
        assert handle(CrossTenantFault('product', 7, 'a', 'b')).status_code == status.HTTP_403_FORBIDDEN
        assert handle(PromotionExhausted()).status_code == status.HTTP_409_CONFLICT
        assert handle(PersistenceFault()).status_code == status.HTTP_500_INTERNAL_SERVER_ERROR

    def test_body_shape(self):
        response = handle(IllegalTransition('pending', 'ready'))

        assert response.data == {
            'error': 'Cannot transition from pending to ready.',
            'code': 'ILLEGAL_TRANSITION',
        }

    def test_details_are_included(self):
        response = handle(ValidationFault('Invalid order data', details={'items': ['required']}))

        assert response.data['details'] == {'items': ['required']}

    def test_code_override(self):
        response = handle(ValidationFault('Invalid gift card code', code='GIFT_CARD_NOT_FOUND'))

        assert response.data['code'] == 'GIFT_CARD_NOT_FOUND'
        assert ValidationFault.code == 'VALIDATION_ERROR'

    def test_cross_tenant_message_stays_generic(self):
        exc = CrossTenantFault('product', 7, 'tenant-a', 'tenant-b')

        assert handle(exc).data == {'error': 'Invalid product reference', 'code': 'CROSS_TENANT'}

    def test_product_not_found_message(self):
        assert str(ProductNotFound(42)) == 'Product 42 not found'

    def test_server_errors_are_logged(self, caplog):
        with caplog.at_level(logging.ERROR, logger='core_backend.exceptions'):
            handle(PersistenceFault())

        assert 'PersistenceFault on /api/orders/' in caplog.text


class TestDRFErrors:

    def test_detail_is_flattened(self):
        response = handle(NotFound('Nope'))

        assert response.status_code == 404
        assert response.data == {'error': 'Nope', 'code': 'not_found'}

    def test_not_authenticated(self):
        response = handle(NotAuthenticated())

        assert response.data['code'] == 'not_authenticated'

    def test_field_errors_pass_through(self):
        response = handle(ValidationError({'email': ['Enter a valid email address.']}))

        assert response.status_code == 400
        assert response.data == {'email': ['Enter a valid email address.']}

    def test_unhandled_exceptions_are_left_to_django(self):
        assert handle(RuntimeError('boom')) is None
