"""
Error taxonomy for the order engine.

Services raise these; views (or the DRF exception handler below) turn them
into JSON responses of the form {"error": ..., "code": ...}. Validation
faults may carry a structured `details` breakdown.

    ValidationFault       400  malformed payload, unknown restaurant, missing product
    CrossTenantFault      403  referenced resource belongs to another tenant
    BusinessRuleFault     400  inactive product, promotion not applicable
    ConflictFault         409  illegal transition, exhausted promotion or gift card
    ResourceNotFound      404  staff lookup by id inside the tenant
    PersistenceFault      500  top-level order insert failed
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class OrderEngineError(Exception):
    """Base exception for order engine errors."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "ORDER_ENGINE_ERROR"
    default_message = "Request could not be processed"

    def __init__(self, message=None, details=None, code=None):
        super().__init__(message or self.default_message)
        self.details = details
        if code:
            self.code = code

    def to_response_data(self):
        data = {"error": str(self), "code": self.code}
        if self.details:
            data["details"] = self.details
        return data


# --- 400: validation ---------------------------------------------------------

class ValidationFault(OrderEngineError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"
    default_message = "Invalid order data"


class UnknownRestaurant(ValidationFault):
    code = "UNKNOWN_RESTAURANT"
    default_message = "Restaurant not found"


class ProductNotFound(ValidationFault):
    code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id, message=None):
        self.product_id = product_id
        super().__init__(message or f"Product {product_id} not found")


# --- 403: security -----------------------------------------------------------

class CrossTenantFault(OrderEngineError):
    """
    A referenced resource belongs to a different tenant than the requester.

    Raised instead of a not-found error so that it can be audited on the
    `security` logger; the message returned to the client stays generic.
    """

    status_code = status.HTTP_403_FORBIDDEN
    code = "CROSS_TENANT"
    default_message = "Invalid product reference"

    def __init__(self, resource, resource_id, tenant_id, owner_tenant_id, message=None):
        self.resource = resource
        self.resource_id = resource_id
        self.tenant_id = tenant_id
        self.owner_tenant_id = owner_tenant_id
        super().__init__(message or f"Invalid {resource} reference")


# --- 400/409: business rules -------------------------------------------------

class BusinessRuleFault(OrderEngineError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "BUSINESS_RULE"


class InactiveProduct(BusinessRuleFault):
    code = "PRODUCT_INACTIVE"

    def __init__(self, product, message=None):
        self.product = product
        super().__init__(message or f"Product '{product.name}' is not available")


class PromotionNotApplicable(BusinessRuleFault):
    code = "PROMOTION_NOT_APPLICABLE"
    default_message = "Promotion cannot be applied to this order"


class ConflictFault(OrderEngineError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"


class IllegalTransition(ConflictFault):
    code = "ILLEGAL_TRANSITION"

    def __init__(self, current, requested, message=None):
        self.current = current
        self.requested = requested
        super().__init__(message or f"Cannot transition from {current} to {requested}.")


class PromotionExhausted(ConflictFault):
    code = "PROMOTION_EXHAUSTED"
    default_message = "Promotion code has reached its usage limit"


class GiftCardUnavailable(ConflictFault):
    code = "GIFT_CARD_UNAVAILABLE"
    default_message = "Gift card cannot be used"


class InsufficientPoints(ConflictFault):
    code = "INSUFFICIENT_POINTS"
    default_message = "Customer does not have enough points"


# --- 404 / 500 ---------------------------------------------------------------

class ResourceNotFound(OrderEngineError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    default_message = "Not found"


class PersistenceFault(OrderEngineError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "PERSISTENCE_ERROR"
    default_message = "Failed to create order"


def order_engine_exception_handler(exc, context):
    """
    DRF exception handler that renders OrderEngineError subclasses and
    flattens DRF's {"detail": ...} bodies into the terse {"error": ...} shape.
    """
    if isinstance(exc, OrderEngineError):
        request = context.get("request")
        if exc.status_code >= 500:
            logger.error(
                f"{exc.__class__.__name__} on {getattr(request, 'path', '?')}: {exc}"
            )
        return Response(exc.to_response_data(), status=exc.status_code)

    response = exception_handler(exc, context)

    if response is not None and isinstance(response.data, dict) and "detail" in response.data:
        detail = response.data.pop("detail")
        response.data = {
            "error": str(detail),
            "code": getattr(detail, "code", "error"),
            **response.data,
        }

    return response
