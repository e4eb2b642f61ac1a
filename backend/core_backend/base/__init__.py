"""
Core backend base components.

This package provides foundational classes that staff-facing views share:
tenant binding, tenant-scoped lookups and the staff permission.
"""

from .viewsets import TenantScopedAPIView
from .permissions import IsTenantStaff

__all__ = [
    'TenantScopedAPIView',
    'IsTenantStaff',
]
