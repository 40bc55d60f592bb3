"""
Use Cases

Organized into domain folders:
- provisioning/: idempotent tenant + owner provisioning
- credentials/: owner credential rotation and setup links
- tenants/: tenant lifecycle
- audit/: audit trail lookup

Import from subdirectories for better organization.
"""

from .audit import GetAuditTrailUseCase
from .credentials import RotateOwnerCredentialUseCase, SendOwnerSetupLinkUseCase
from .provisioning import GetProvisioningRequestUseCase, ProvisionTenantUseCase
from .tenants import SoftDeleteTenantUseCase

__all__ = [
    # Provisioning
    "ProvisionTenantUseCase",
    "GetProvisioningRequestUseCase",
    # Credentials
    "RotateOwnerCredentialUseCase",
    "SendOwnerSetupLinkUseCase",
    # Tenants
    "SoftDeleteTenantUseCase",
    # Audit
    "GetAuditTrailUseCase",
]
