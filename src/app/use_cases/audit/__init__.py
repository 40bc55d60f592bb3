"""
Audit Use Cases

All audit-related business logic.
"""

from .get_audit_trail_use_case import GetAuditTrailUseCase

__all__ = [
    "GetAuditTrailUseCase",
]
