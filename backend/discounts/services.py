from decimal import Decimal
import logging

from django.db import transaction
from django.db.models import F, Q
from django.utils import timezone

from core_backend.exceptions import (
    CrossTenantFault,
    PromotionExhausted,
    PromotionNotApplicable,
    ValidationFault,
)
from .models import Promotion
from .strategies import DiscountStrategyFactory

logger = logging.getLogger(__name__)
security_logger = logging.getLogger('security')


class PromotionService:
    """
    Promotion lookup, eligibility and usage counting.

    Eligibility checks here are advisory: they produce friendly errors for the
    common case. The usage cap is enforced only by redeem(), at increment
    time, so two orders that both pass check_applicable() cannot both take
    the last use.
    """

    @staticmethod
    def normalize_code(code: str) -> str:
        return (code or "").strip().upper()

    @staticmethod
    def resolve(tenant, promotion_id=None, code=None) -> Promotion:
        """
        Find the promotion an order refers to, by id or by code.

        Raises:
            ValidationFault: no such promotion for this tenant
            CrossTenantFault: promotion_id belongs to another tenant
        """
        if promotion_id is not None:
            promotion = Promotion.all_objects.filter(pk=promotion_id).first()
            if promotion is None:
                raise ValidationFault("Invalid promotion code", code="PROMOTION_NOT_FOUND")
            if promotion.tenant_id != tenant.id:
                security_logger.warning(
                    f"Cross-tenant promotion reference: restaurant {tenant.id} "
                    f"submitted promotion {promotion_id} owned by restaurant {promotion.tenant_id}"
                )
                raise CrossTenantFault('promotion', promotion_id, tenant.id, promotion.tenant_id)
            return promotion

        normalized = PromotionService.normalize_code(code)
        promotion = Promotion.all_objects.filter(tenant=tenant, code=normalized).first()
        if promotion is None:
            raise ValidationFault("Invalid promotion code", code="PROMOTION_NOT_FOUND")
        return promotion

    @staticmethod
    def check_applicable(promotion: Promotion, subtotal: Decimal, now=None):
        now = now or timezone.now()
        if not promotion.is_active:
            raise PromotionNotApplicable("This promotion is no longer active")
        if promotion.is_expired(now):
            raise PromotionNotApplicable("This promotion has expired")
        if promotion.is_exhausted():
            raise PromotionExhausted()
        if subtotal < promotion.min_order_amount:
            raise PromotionNotApplicable(
                f"Minimum order of {promotion.min_order_amount} required for this promotion"
            )

    @staticmethod
    def calculate_discount(promotion: Promotion, subtotal: Decimal) -> Decimal:
        return DiscountStrategyFactory.discount_for(subtotal, promotion)

    @staticmethod
    def redeem(promotion: Promotion) -> None:
        """
        Consume one use of the promotion.

        Single conditional UPDATE: the row is only incremented if it is still
        active, unexpired and strictly under max_uses at the moment the
        statement runs. Zero affected rows means another order won the race
        (or the promotion was switched off in the meantime).

        Raises:
            PromotionExhausted: usage cap reached
            PromotionNotApplicable: deactivated or expired since it was read
        """
        now = timezone.now()
        updated = Promotion.all_objects.filter(
            Q(max_uses__isnull=True) | Q(current_uses__lt=F('max_uses')),
            Q(expires_at__isnull=True) | Q(expires_at__gt=now),
            pk=promotion.pk,
            is_active=True,
        ).update(current_uses=F('current_uses') + 1, updated_at=now)

        if updated:
            logger.info(f"Promotion {promotion.code} ({promotion.pk}) redeemed")
            return

        promotion.refresh_from_db(fields=['current_uses', 'max_uses', 'is_active', 'expires_at'])
        if promotion.is_exhausted():
            logger.info(f"Promotion {promotion.code} exhausted at {promotion.current_uses}/{promotion.max_uses}")
            raise PromotionExhausted()
        raise PromotionNotApplicable("This promotion is no longer available")

    @staticmethod
    def validate_code(tenant, code: str, subtotal: Decimal) -> dict:
        """
        Read-only pre-check used by the checkout page. Never consumes a use.
        """
        try:
            promotion = PromotionService.resolve(tenant, code=code)
            PromotionService.check_applicable(promotion, subtotal)
        except (ValidationFault, PromotionNotApplicable, PromotionExhausted) as e:
            return {"valid": False, "error": str(e)}

        return {
            "valid": True,
            "promotion_id": promotion.id,
            "code": promotion.code,
            "discount_type": promotion.discount_type,
            "discount_value": promotion.discount_value,
            "discount_amount": PromotionService.calculate_discount(promotion, subtotal),
        }

    @staticmethod
    @transaction.atomic
    def create_promotion(tenant, **data) -> Promotion:
        code = PromotionService.normalize_code(data.pop('code'))
        if Promotion.all_objects.filter(tenant=tenant, code=code).exists():
            raise ValidationFault(f"Promotion code '{code}' already exists")

        promotion = Promotion(tenant=tenant, code=code, **data)
        promotion.full_clean(exclude=['tenant'])
        promotion.save()
        logger.info(f"Promotion {promotion.code} created for tenant {tenant.id}")
        return promotion

    @staticmethod
    @transaction.atomic
    def update_promotion(promotion: Promotion, **data) -> Promotion:
        """
        Staff edit of a promotion. `current_uses` is not editable here; a
        lowered max_uses below the current count is refused.
        """
        max_uses = data.get('max_uses', promotion.max_uses)
        locked = Promotion.all_objects.select_for_update().get(pk=promotion.pk)
        if max_uses is not None and max_uses < locked.current_uses:
            raise ValidationFault(
                f"max_uses cannot be lower than current uses ({locked.current_uses})"
            )

        for field, value in data.items():
            setattr(locked, field, value)
        locked.full_clean(exclude=['tenant', 'code'])
        locked.save()
        return locked
