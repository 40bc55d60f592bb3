"""
Provisioning Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class ProvisioningStatus(str, Enum):
    """Lifecycle of one idempotent provisioning attempt"""

    pending = "pending"
    processing = "processing"
    completed = "completed"
    failed = "failed"


class IdentityKind(str, Enum):
    """Kind of an identity-service account (immutable after creation)"""

    platform_administrator = "platform_administrator"
    tenant_owner = "tenant_owner"


class CredentialState(str, Enum):
    """Where the owner is in the setup-link flow"""

    unverified = "unverified"
    active = "active"


class TenantStatus(str, Enum):
    """Tenant status"""

    provisioning = "provisioning"
    active = "active"
    suspended = "suspended"


class OwnershipLinkStatus(str, Enum):
    """Ownership link status"""

    pending = "pending"
    completed = "completed"
    failed = "failed"


class EmployeeStatus(str, Enum):
    """Staff record status"""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class CredentialField(str, Enum):
    """Owner credential fields that can be rotated"""

    email = "email"
    password = "password"


class AuditOutcome(str, Enum):
    """Outcome recorded on every audit entry"""

    initiated = "initiated"
    identity_created = "identity_created"
    tenant_created = "tenant_created"
    verified = "verified"
    completed = "completed"
    verification_failed = "verification_failed"
    rolled_back = "rolled_back"
    compensation_failed = "compensation_failed"
    failed = "failed"
    credential_rotated = "credential_rotated"
    credential_rotation_failed = "credential_rotation_failed"
    setup_link_sent = "setup_link_sent"
    tenant_deleted = "tenant_deleted"
    owner_attached = "owner_attached"


# Platform staff roles that put a user on the administrator roster
ADMINISTRATOR_ROLES = frozenset({"SUPER_ADMIN", "ADMIN", "SUPPORT"})
