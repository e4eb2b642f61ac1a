from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional
import logging

from core_backend.exceptions import ValidationFault
from discounts.services import PromotionService
from products.services import CatalogSnapshot

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def quantize(amount) -> Decimal:
    return Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass
class PricedExtra:
    extra: object
    price: Decimal


@dataclass
class PricedLine:
    """One validated order line with server-side prices."""
    product: object
    variant: Optional[object]
    qty: int
    unit_price: Decimal
    line_total: Decimal
    notes: str = ""
    extras: List[PricedExtra] = field(default_factory=list)


@dataclass
class PricedOrder:
    lines: List[PricedLine]
    subtotal: Decimal
    promotion: Optional[object] = None
    discount_amount: Decimal = Decimal("0.00")
    delivery_fee: Decimal = Decimal("0.00")
    tip_amount: Decimal = Decimal("0.00")

    @property
    def total(self) -> Decimal:
        return quantize(self.subtotal - self.discount_amount + self.delivery_fee + self.tip_amount)


class OrderPricingService:
    """
    Validate order lines against the catalog and price them.

    Client-sent prices are never read here: unit prices come from the
    product and variant, extras from the catalog, and the discount from the
    promotion applied to the recomputed subtotal. Nothing is written.
    """

    @staticmethod
    def price_lines(catalog: CatalogSnapshot, items) -> List[PricedLine]:
        """
        Args:
            catalog: CatalogSnapshot for the ordering tenant
            items: list of {product_id, variant_id?, qty, notes?, extras: [{extra_id}]}

        Raises:
            ProductNotFound, CrossTenantFault, InactiveProduct, ValidationFault
        """
        if not items:
            raise ValidationFault("Add at least one product")

        products = catalog.validate_products([item['product_id'] for item in items])

        variant_ids = [item['variant_id'] for item in items if item.get('variant_id')]
        extra_ids = [
            extra['extra_id']
            for item in items
            for extra in item.get('extras', [])
        ]
        variants = catalog.resolve_variants(variant_ids) if variant_ids else {}
        extras = catalog.resolve_extras(extra_ids) if extra_ids else {}

        lines = []
        for item in items:
            product = products[item['product_id']]
            unit_price = Decimal(product.price)

            variant = None
            if item.get('variant_id'):
                variant = catalog.validate_variant(item['variant_id'], product, variants)
                unit_price += Decimal(variant.price_delta)

            priced_extras = []
            for extra_data in item.get('extras', []):
                extra = catalog.validate_extra(extra_data['extra_id'], product, extras)
                priced_extras.append(PricedExtra(extra=extra, price=quantize(extra.price)))

            unit_price = quantize(unit_price)
            if unit_price < 0:
                raise ValidationFault(f"Variant price makes '{product.name}' negative")

            extras_total = sum((e.price for e in priced_extras), Decimal("0.00"))
            line_total = quantize((unit_price + extras_total) * item['qty'])

            lines.append(PricedLine(
                product=product,
                variant=variant,
                qty=item['qty'],
                unit_price=unit_price,
                line_total=line_total,
                notes=item.get('notes', ''),
                extras=priced_extras,
            ))

        return lines

    @staticmethod
    def price_order(tenant, data) -> PricedOrder:
        """
        Price a whole order payload for `tenant`.

        The promotion is checked for applicability here but its use is not
        consumed; that happens when the order is written.
        """
        catalog = CatalogSnapshot(tenant)
        lines = OrderPricingService.price_lines(catalog, data['items'])
        subtotal = quantize(sum((line.line_total for line in lines), Decimal("0.00")))

        priced = PricedOrder(lines=lines, subtotal=subtotal)

        promotion_id = data.get('promotion_id')
        discount_code = data.get('discount_code')
        if promotion_id is not None or discount_code:
            promotion = PromotionService.resolve(tenant, promotion_id=promotion_id, code=discount_code)
            PromotionService.check_applicable(promotion, subtotal)
            priced.promotion = promotion
            priced.discount_amount = PromotionService.calculate_discount(promotion, subtotal)

        if data.get('order_type') == 'delivery':
            priced.delivery_fee = quantize(tenant.delivery_fee)

        tip_amount = data.get('tip_amount') or Decimal("0.00")
        if tip_amount < 0:
            raise ValidationFault("Tip cannot be negative")
        priced.tip_amount = quantize(tip_amount)

        logger.debug(
            f"Priced order for restaurant {tenant.id}: subtotal {priced.subtotal}, "
            f"discount {priced.discount_amount}, total {priced.total}"
        )
        return priced
