"""
Credential Use Cases

Tenant-owner credential rotation and setup links.
"""

from .dtos import (
    RotateOwnerCredentialCommand,
    RotateOwnerCredentialResponse,
    SendOwnerSetupLinkResponse,
)
from .rotate_owner_credential_use_case import RotateOwnerCredentialUseCase
from .send_owner_setup_link_use_case import SendOwnerSetupLinkUseCase

__all__ = [
    "RotateOwnerCredentialUseCase",
    "SendOwnerSetupLinkUseCase",
    "RotateOwnerCredentialCommand",
    "RotateOwnerCredentialResponse",
    "SendOwnerSetupLinkResponse",
]
