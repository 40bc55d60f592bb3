"""
Tenant Management Use Cases

All tenant lifecycle business logic outside provisioning.
"""

from .soft_delete_tenant_use_case import SoftDeleteTenantResponse, SoftDeleteTenantUseCase

__all__ = [
    "SoftDeleteTenantUseCase",
    "SoftDeleteTenantResponse",
]
