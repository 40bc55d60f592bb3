"""
Provisioning Use Cases

Idempotent tenant + owner provisioning.
"""

from .dtos import (
    ProvisionTenantCommand,
    ProvisionTenantResponse,
    ProvisioningRequestResponse,
)
from .get_provisioning_request_use_case import GetProvisioningRequestUseCase
from .provision_tenant_use_case import ProvisionTenantUseCase

__all__ = [
    "ProvisionTenantUseCase",
    "GetProvisioningRequestUseCase",
    "ProvisionTenantCommand",
    "ProvisionTenantResponse",
    "ProvisioningRequestResponse",
]
