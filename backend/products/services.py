import logging

from core_backend.exceptions import (
    BusinessRuleFault,
    CrossTenantFault,
    InactiveProduct,
    ProductNotFound,
    ValidationFault,
)
from .models import Product, ProductVariant, ProductExtra

logger = logging.getLogger(__name__)
security_logger = logging.getLogger('security')


class CatalogSnapshot:
    """
    Read-only lookup of one tenant's products, variants and extras for order
    validation.

    Lookups deliberately go through `all_objects` so that a row owned by a
    different tenant can be told apart from a row that does not exist. The
    catalog is never written from here.
    """

    def __init__(self, tenant):
        self.tenant = tenant

    def resolve_products(self, product_ids):
        """Return {id: Product} for every id that exists, whatever its tenant."""
        return Product.all_objects.in_bulk(set(product_ids))

    def resolve_variants(self, variant_ids):
        return ProductVariant.all_objects.in_bulk(set(variant_ids))

    def resolve_extras(self, extra_ids):
        return ProductExtra.all_objects.in_bulk(set(extra_ids))

    def _cross_tenant(self, resource, resource_id, owner_tenant_id):
        security_logger.warning(
            f"Cross-tenant {resource} reference: restaurant {self.tenant.id} "
            f"submitted {resource} {resource_id} owned by restaurant {owner_tenant_id}"
        )
        return CrossTenantFault(resource, resource_id, self.tenant.id, owner_tenant_id)

    def validate_products(self, product_ids):
        """
        Check every product in one pass per failure class and return
        {id: Product} when all are orderable.

        Missing products are reported first, then cross-tenant references,
        then inactive products, so an order mixing a foreign product with an
        inactive one is always answered with the security fault.

        Raises:
            ProductNotFound: a product id does not exist (400)
            CrossTenantFault: a product belongs to another tenant (403)
            InactiveProduct: a product is not active; the whole order is refused
        """
        products = self.resolve_products(product_ids)

        missing = [pid for pid in product_ids if pid not in products]
        if missing:
            logger.info(f"Order for restaurant {self.tenant.id} references missing products {missing}")
            raise ProductNotFound(missing[0])

        for pid in product_ids:
            product = products[pid]
            if product.tenant_id != self.tenant.id:
                raise self._cross_tenant('product', pid, product.tenant_id)

        for pid in product_ids:
            if not products[pid].is_active:
                raise InactiveProduct(products[pid])

        return products

    def validate_variant(self, variant_id, product, variants):
        variant = variants.get(variant_id)
        if variant is None:
            raise ValidationFault(f"Variant {variant_id} not found")
        if variant.tenant_id != self.tenant.id:
            raise self._cross_tenant('variant', variant_id, variant.tenant_id)
        if variant.product_id != product.id:
            raise ValidationFault(f"Variant {variant_id} does not belong to '{product.name}'")
        if not variant.is_active:
            raise BusinessRuleFault(f"Variant '{variant.name}' is not available")
        return variant

    def validate_extra(self, extra_id, product, extras):
        extra = extras.get(extra_id)
        if extra is None:
            raise ValidationFault(f"Extra {extra_id} not found")
        if extra.tenant_id != self.tenant.id:
            raise self._cross_tenant('extra', extra_id, extra.tenant_id)
        if extra.product_id != product.id:
            raise ValidationFault(f"Extra {extra_id} does not belong to '{product.name}'")
        if not extra.is_active:
            raise BusinessRuleFault(f"Extra '{extra.name}' is not available")
        return extra
