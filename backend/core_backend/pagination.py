from rest_framework.pagination import LimitOffsetPagination


class StandardPagination(LimitOffsetPagination):
    """
    limit/offset pagination used by staff list endpoints.

    Display clients page with ?limit=&offset=, the same parameters the
    order board sends.
    """

    default_limit = 50
    max_limit = 500
