"""
Provisioning error taxonomy.

Every failure a component can raise is a ProvisioningError subclass carrying
a stable code, a category and a retryable flag. Use cases turn them into
libs.result.Error at their boundary; the API layer maps the category to an
HTTP status.
"""

from enum import Enum
from typing import Any, Dict, Optional

from libs.result import Error


class ErrorCategory(str, Enum):
    validation = "validation"
    conflict = "conflict"
    external_service = "external_service"
    verification = "verification"
    safety_violation = "safety_violation"
    not_found = "not_found"
    authorization = "authorization"
    rate_limited = "rate_limited"


class ProvisioningError(Exception):
    category: ErrorCategory = ErrorCategory.verification
    retryable: bool = False

    def __init__(
        self,
        code: str,
        message: str,
        *,
        correlation_id: Optional[str] = None,
        retryable: Optional[bool] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.correlation_id = correlation_id
        if retryable is not None:
            self.retryable = retryable
        self.details = details or {}

    def with_correlation(self, correlation_id: str) -> "ProvisioningError":
        if self.correlation_id is None:
            self.correlation_id = correlation_id
        return self

    def to_error(self) -> Error:
        return Error(
            self.code,
            self.message,
            details={
                **self.details,
                "category": self.category.value,
                "retryable": self.retryable,
                "correlation_id": self.correlation_id,
            },
        )


class ValidationError(ProvisioningError):
    """Slug/email invalid, taken or reserved. Nothing was written."""

    category = ErrorCategory.validation
    retryable = False


class ConflictError(ProvisioningError):
    """Idempotency key is in flight. Poll, do not retry."""

    category = ErrorCategory.conflict
    retryable = False


class ExternalServiceError(ProvisioningError):
    """Identity service unreachable or erroring."""

    category = ErrorCategory.external_service
    retryable = True


class VerificationError(ProvisioningError):
    """Post-write consistency check failed; rollback already ran."""

    category = ErrorCategory.verification
    retryable = True


class SafetyViolationError(ProvisioningError):
    """Mutation would touch an administrator identity. Never retried."""

    category = ErrorCategory.safety_violation
    retryable = False


class NotFoundError(ProvisioningError):
    category = ErrorCategory.not_found
    retryable = False


class AuthorizationError(ProvisioningError):
    category = ErrorCategory.authorization
    retryable = False


class RateLimitedError(ProvisioningError):
    category = ErrorCategory.rate_limited
    retryable = True
