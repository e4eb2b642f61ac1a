from datetime import timedelta
from decimal import Decimal
import logging
import secrets

from django.db import IntegrityError, transaction
from django.db.models import Count, F, Q, Sum
from django.utils import timezone

from core_backend.exceptions import GiftCardUnavailable, ResourceNotFound, ValidationFault
from .models import GiftCard, GiftCardTransaction

logger = logging.getLogger(__name__)

CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_GROUPS = 3
CODE_GROUP_LENGTH = 4


class GiftCardService:
    """
    Issue, check and redeem gift cards.

    Balances are debited under a row lock with an UPDATE guarded on the
    balance it expects, so two concurrent redemptions can never spend the
    same money twice nor drive the balance below zero.
    """

    @staticmethod
    def normalize_code(code: str) -> str:
        return "".join((code or "").split()).upper()

    @staticmethod
    def generate_code() -> str:
        groups = [
            "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_GROUP_LENGTH))
            for _ in range(CODE_GROUPS)
        ]
        return "-".join(groups)

    @staticmethod
    def issue(tenant, amount: Decimal, expires_days=None, max_attempts=5, **details) -> GiftCard:
        """
        Create a new card with a fresh random code.

        `details` carries the optional purchaser/recipient fields. A code
        collision inside the tenant is retried with a new code.
        """
        if amount <= 0:
            raise ValidationFault("Gift card amount must be positive")

        expires_at = None
        if expires_days:
            expires_at = timezone.now() + timedelta(days=expires_days)

        for attempt in range(max_attempts):
            code = GiftCardService.generate_code()
            try:
                with transaction.atomic():
                    card = GiftCard.all_objects.create(
                        tenant=tenant,
                        code=code,
                        initial_amount=amount,
                        remaining_amount=amount,
                        expires_at=expires_at,
                        **details,
                    )
                    GiftCardTransaction.all_objects.create(
                        tenant=tenant,
                        gift_card=card,
                        transaction_type=GiftCardTransaction.TransactionType.PURCHASE,
                        amount=amount,
                        balance_after=amount,
                    )
            except IntegrityError:
                logger.warning(f"Gift card code collision for tenant {tenant.id} (attempt {attempt + 1})")
                continue
            logger.info(f"Gift card {card.code} issued for tenant {tenant.id}: {amount}")
            return card

        raise ValidationFault("Could not generate a unique gift card code")

    @staticmethod
    def _get_card(tenant, code, for_update=False) -> GiftCard:
        qs = GiftCard.all_objects.filter(tenant=tenant, code=GiftCardService.normalize_code(code))
        if for_update:
            qs = qs.select_for_update()
        card = qs.first()
        if card is None:
            raise ResourceNotFound("Gift card not found")
        return card

    @staticmethod
    def check(tenant, code: str) -> dict:
        """Read-only balance lookup for the public check endpoint."""
        card = GiftCardService._get_card(tenant, code)
        result = {
            'code': card.code,
            'valid': card.is_usable,
            'remaining_amount': card.remaining_amount,
            'status': card.status,
            'expires_at': card.expires_at,
        }
        if not card.is_usable:
            result['error'] = GiftCardService._unusable_reason(card)
        return result

    @staticmethod
    def _unusable_reason(card):
        if card.status == GiftCard.Status.CANCELLED:
            return "Gift card has been cancelled"
        if card.status == GiftCard.Status.USED or card.remaining_amount <= 0:
            return "Gift card has no remaining balance"
        if card.is_expired:
            return "Gift card has expired"
        return "Gift card cannot be used"

    @staticmethod
    @transaction.atomic
    def redeem(tenant, code: str, amount: Decimal, order=None) -> dict:
        """
        Debit up to `amount` from the card.

        The debit is min(amount, remaining balance); the card becomes
        `used` when it reaches zero.

        Returns:
            {'gift_card_id', 'code', 'amount_used', 'remaining_amount', 'status'}

        Raises:
            ResourceNotFound: no card with this code in the tenant
            GiftCardUnavailable: cancelled, expired, used up, or lost a race
        """
        if amount <= 0:
            raise ValidationFault("Redemption amount must be positive")

        card = GiftCardService._get_card(tenant, code, for_update=True)
        if not card.is_usable:
            raise GiftCardUnavailable(GiftCardService._unusable_reason(card))

        debit = min(amount, card.remaining_amount)
        now = timezone.now()
        updated = GiftCard.all_objects.filter(
            pk=card.pk,
            status=GiftCard.Status.ACTIVE,
            remaining_amount__gte=debit,
        ).update(
            remaining_amount=F('remaining_amount') - debit,
            last_used_at=now,
            updated_at=now,
        )
        if not updated:
            raise GiftCardUnavailable()

        card.refresh_from_db()
        if card.remaining_amount == 0:
            GiftCard.all_objects.filter(pk=card.pk).update(status=GiftCard.Status.USED)
            card.status = GiftCard.Status.USED

        GiftCardTransaction.all_objects.create(
            tenant=tenant,
            gift_card=card,
            transaction_type=GiftCardTransaction.TransactionType.REDEEM,
            amount=debit,
            balance_after=card.remaining_amount,
            order=order,
        )
        logger.info(f"Gift card {card.code} redeemed {debit}, remaining {card.remaining_amount}")

        return {
            'gift_card_id': card.pk,
            'code': card.code,
            'amount_used': debit,
            'remaining_amount': card.remaining_amount,
            'status': card.status,
        }

    @staticmethod
    @transaction.atomic
    def cancel(card: GiftCard) -> GiftCard:
        locked = GiftCard.all_objects.select_for_update().get(pk=card.pk)
        if locked.status == GiftCard.Status.CANCELLED:
            return locked
        locked.status = GiftCard.Status.CANCELLED
        locked.save(update_fields=['status', 'updated_at'])
        logger.info(f"Gift card {locked.code} cancelled")
        return locked

    @staticmethod
    def get_stats(queryset):
        stats = queryset.aggregate(
            total=Count('id'),
            active=Count('id', filter=Q(status=GiftCard.Status.ACTIVE)),
            total_issued=Sum('initial_amount'),
            outstanding_balance=Sum('remaining_amount', filter=Q(status=GiftCard.Status.ACTIVE)),
        )
        stats['total_issued'] = stats['total_issued'] or Decimal("0.00")
        stats['outstanding_balance'] = stats['outstanding_balance'] or Decimal("0.00")
        return stats
