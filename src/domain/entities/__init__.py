"""
Provisioning Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    ADMINISTRATOR_ROLES,
    AuditOutcome,
    CredentialField,
    CredentialState,
    EmployeeStatus,
    IdentityKind,
    OwnershipLinkStatus,
    ProvisioningStatus,
    TenantStatus,
)

# Export all entities
from .audit_entry import AuditEntry
from .employee import Employee
from .identity import Identity
from .ownership_link import OwnershipLink
from .provisioning_request import ProvisioningRequest
from .tenant import Tenant

__all__ = [
    # Enums
    "ADMINISTRATOR_ROLES",
    "AuditOutcome",
    "CredentialField",
    "CredentialState",
    "EmployeeStatus",
    "IdentityKind",
    "OwnershipLinkStatus",
    "ProvisioningStatus",
    "TenantStatus",
    # Entities
    "AuditEntry",
    "Employee",
    "Identity",
    "OwnershipLink",
    "ProvisioningRequest",
    "Tenant",
]
