"""
Gift Card Tests

Tests for GiftCardService and the public/staff gift card endpoints:
- Code generation and issuing
- Balance checks and partial redemption
- Redemption races resolved against the stored balance
- Tenant scoping of codes
"""
import re
import pytest
from datetime import timedelta
from decimal import Decimal
from unittest import mock

from django.db import IntegrityError, transaction
from django.utils import timezone

from core_backend.exceptions import GiftCardUnavailable, ResourceNotFound, ValidationFault
from giftcards.models import GiftCard, GiftCardTransaction
from giftcards.services import GiftCardService

PUBLIC_URL = '/api/gift-cards/'
STAFF_URL = '/api/tenant/gift-cards/'
CODE_PATTERN = re.compile(r'^[A-HJ-NP-Z2-9]{4}-[A-HJ-NP-Z2-9]{4}-[A-HJ-NP-Z2-9]{4}$')


@pytest.mark.django_db
class TestGiftCardIssue:

    def test_generated_codes_are_unambiguous(self):
        for _ in range(50):
            assert CODE_PATTERN.match(GiftCardService.generate_code())

    def test_issue_records_purchase(self, tenant_a):
        card = GiftCardService.issue(tenant_a, Decimal('25.00'), recipient_name='Sam')

        assert CODE_PATTERN.match(card.code)
        assert card.remaining_amount == Decimal('25.00')
        assert card.status == GiftCard.Status.ACTIVE
        assert card.recipient_name == 'Sam'
        entry = GiftCardTransaction.all_objects.get(gift_card=card)
        assert entry.transaction_type == 'purchase'
        assert entry.balance_after == Decimal('25.00')

    def test_issue_with_expiry(self, tenant_a):
        card = GiftCardService.issue(tenant_a, Decimal('10.00'), expires_days=30)

        assert card.expires_at > timezone.now() + timedelta(days=29)

    def test_code_collision_is_retried(self, tenant_a, gift_card_tenant_a):
        codes = iter(['GIFT-TEST-0001', 'ABCD-EFGH-JKLM'])

        with mock.patch.object(GiftCardService, 'generate_code', side_effect=lambda: next(codes)):
            card = GiftCardService.issue(tenant_a, Decimal('10.00'))

        assert card.code == 'ABCD-EFGH-JKLM'

    def test_same_code_allowed_in_other_tenant(self, tenant_b, gift_card_tenant_a):
        with mock.patch.object(GiftCardService, 'generate_code', return_value='GIFT-TEST-0001'):
            card = GiftCardService.issue(tenant_b, Decimal('10.00'))

        assert card.tenant == tenant_b

    def test_non_positive_amount_rejected(self, tenant_a):
        with pytest.raises(ValidationFault):
            GiftCardService.issue(tenant_a, Decimal('0.00'))


@pytest.mark.django_db
class TestGiftCardRedeem:

    def test_check_normalizes_code(self, tenant_a, gift_card_tenant_a):
        result = GiftCardService.check(tenant_a, ' gift-test-0001 ')

        assert result['valid'] is True
        assert result['remaining_amount'] == Decimal('50.00')

    def test_partial_redemption(self, tenant_a, gift_card_tenant_a):
        result = GiftCardService.redeem(tenant_a, 'GIFT-TEST-0001', Decimal('20.00'))

        assert result['amount_used'] == Decimal('20.00')
        assert result['remaining_amount'] == Decimal('30.00')
        assert result['status'] == 'active'

    def test_redemption_over_balance_uses_what_is_left(self, tenant_a, gift_card_tenant_a):
        GiftCardService.redeem(tenant_a, 'GIFT-TEST-0001', Decimal('45.00'))

        result = GiftCardService.redeem(tenant_a, 'GIFT-TEST-0001', Decimal('20.00'))

        assert result['amount_used'] == Decimal('5.00')
        assert result['remaining_amount'] == Decimal('0.00')
        assert result['status'] == 'used'

    def test_used_card_is_refused(self, tenant_a, gift_card_tenant_a):
        GiftCardService.redeem(tenant_a, 'GIFT-TEST-0001', Decimal('50.00'))

        with pytest.raises(GiftCardUnavailable) as exc_info:
            GiftCardService.redeem(tenant_a, 'GIFT-TEST-0001', Decimal('1.00'))

        assert str(exc_info.value) == 'Gift card has no remaining balance'

    def test_cancelled_card_is_refused(self, tenant_a, gift_card_tenant_a):
        GiftCardService.cancel(gift_card_tenant_a)

        with pytest.raises(GiftCardUnavailable):
            GiftCardService.redeem(tenant_a, 'GIFT-TEST-0001', Decimal('1.00'))

        assert GiftCardService.check(tenant_a, 'GIFT-TEST-0001')['error'] == 'Gift card has been cancelled'

    def test_expired_card_is_refused(self, tenant_a, gift_card_tenant_a):
        GiftCard.all_objects.filter(pk=gift_card_tenant_a.pk).update(
            expires_at=timezone.now() - timedelta(days=1)
        )

        with pytest.raises(GiftCardUnavailable):
            GiftCardService.redeem(tenant_a, 'GIFT-TEST-0001', Decimal('1.00'))

    def test_stale_balance_cannot_overspend(self, tenant_a, gift_card_tenant_a):
        """
        A display that read $50 earlier redeems $40 after another till has
        already taken $30. The debit is computed from the stored balance.
        """
        stale = GiftCard.all_objects.get(pk=gift_card_tenant_a.pk)
        GiftCardService.redeem(tenant_a, 'GIFT-TEST-0001', Decimal('30.00'))

        assert stale.remaining_amount == Decimal('50.00')
        result = GiftCardService.redeem(tenant_a, stale.code, Decimal('40.00'))

        assert result['amount_used'] == Decimal('20.00')
        gift_card_tenant_a.refresh_from_db()
        assert gift_card_tenant_a.remaining_amount == Decimal('0.00')

    def test_redemptions_are_journaled(self, tenant_a, gift_card_tenant_a, order_tenant_a):
        GiftCardService.redeem(tenant_a, 'GIFT-TEST-0001', Decimal('12.50'), order=order_tenant_a)

        entry = GiftCardTransaction.all_objects.get(gift_card=gift_card_tenant_a, transaction_type='redeem')
        assert entry.amount == Decimal('12.50')
        assert entry.balance_after == Decimal('37.50')
        assert entry.order == order_tenant_a

    def test_other_tenant_code_is_not_found(self, tenant_b, gift_card_tenant_a):
        with pytest.raises(ResourceNotFound):
            GiftCardService.redeem(tenant_b, 'GIFT-TEST-0001', Decimal('1.00'))

    def test_database_rejects_negative_balance(self, gift_card_tenant_a):
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                GiftCard.all_objects.filter(pk=gift_card_tenant_a.pk).update(remaining_amount=Decimal('-1.00'))


@pytest.mark.django_db
class TestPublicGiftCardAPI:

    def test_check(self, api_client, tenant_a, gift_card_tenant_a):
        response = api_client.post(PUBLIC_URL, {
            'restaurant_id': str(tenant_a.id), 'code': 'GIFT-TEST-0001',
        }, format='json')

        assert response.status_code == 200
        assert response.data['valid'] is True
        assert response.data['remaining_amount'] == Decimal('50.00')

    def test_redeem(self, api_client, tenant_a, gift_card_tenant_a):
        response = api_client.post(PUBLIC_URL, {
            'restaurant_id': str(tenant_a.id), 'code': 'GIFT-TEST-0001',
            'action': 'redeem', 'amount': '15.00',
        }, format='json')

        assert response.status_code == 200
        assert response.data['success'] is True
        assert response.data['remaining_amount'] == Decimal('35.00')

    def test_redeem_requires_amount(self, api_client, tenant_a, gift_card_tenant_a):
        response = api_client.post(PUBLIC_URL, {
            'restaurant_id': str(tenant_a.id), 'code': 'GIFT-TEST-0001', 'action': 'redeem',
        }, format='json')

        assert response.status_code == 400

    def test_code_from_other_restaurant_is_404(self, api_client, tenant_b, gift_card_tenant_a):
        response = api_client.post(PUBLIC_URL, {
            'restaurant_id': str(tenant_b.id), 'code': 'GIFT-TEST-0001',
        }, format='json')

        assert response.status_code == 404

    def test_used_card_redeem_is_409(self, api_client, tenant_a, gift_card_tenant_a):
        GiftCard.all_objects.filter(pk=gift_card_tenant_a.pk).update(
            remaining_amount=Decimal('0.00'), status=GiftCard.Status.USED
        )

        response = api_client.post(PUBLIC_URL, {
            'restaurant_id': str(tenant_a.id), 'code': 'GIFT-TEST-0001',
            'action': 'redeem', 'amount': '5.00',
        }, format='json')

        assert response.status_code == 409
        assert response.data['code'] == 'GIFT_CARD_UNAVAILABLE'


@pytest.mark.django_db
class TestStaffGiftCardAPI:

    def test_list_with_stats(self, authenticated_client_tenant_a, tenant_a, gift_card_tenant_a):
        GiftCardService.issue(tenant_a, Decimal('20.00'))

        response = authenticated_client_tenant_a.get(STAFF_URL)

        assert response.status_code == 200
        assert response.data['count'] == 2
        assert response.data['stats']['total'] == 2
        assert response.data['stats']['outstanding_balance'] == Decimal('70.00')

    def test_issue(self, authenticated_client_tenant_a, tenant_a):
        response = authenticated_client_tenant_a.post(STAFF_URL, {
            'amount': '40.00', 'recipient_email': 'sam@example.com',
        }, format='json')

        assert response.status_code == 201
        assert response.data['remaining_amount'] == '40.00'
        assert GiftCard.all_objects.get(pk=response.data['id']).tenant == tenant_a

    def test_cashier_cannot_issue(self, cashier_client_tenant_a):
        response = cashier_client_tenant_a.post(STAFF_URL, {'amount': '40.00'}, format='json')

        assert response.status_code == 403

    def test_cancel(self, authenticated_client_tenant_a, gift_card_tenant_a):
        response = authenticated_client_tenant_a.delete(
            STAFF_URL, {'id': str(gift_card_tenant_a.id)}, format='json'
        )

        assert response.status_code == 200
        assert response.data['status'] == 'cancelled'

    def test_cancel_other_tenant_card_is_404(self, authenticated_client_tenant_b, gift_card_tenant_a):
        response = authenticated_client_tenant_b.delete(
            STAFF_URL, {'id': str(gift_card_tenant_a.id)}, format='json'
        )

        assert response.status_code == 404
        gift_card_tenant_a.refresh_from_db()
        assert gift_card_tenant_a.status == 'active'
