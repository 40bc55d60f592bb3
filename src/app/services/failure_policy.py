"""
Failure classification.

The one place that decides whether an unexpected failure during the saga
is transient (retryable) or terminal. Domain errors keep their own
classification.
"""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from src.domain.errors import ProvisioningError, ValidationError, VerificationError

logger = logging.getLogger(__name__)


def classify_failure(exc: BaseException, correlation_id: str) -> ProvisioningError:
    if isinstance(exc, ProvisioningError):
        return exc.with_correlation(correlation_id)

    if isinstance(exc, TimeoutError):
        return VerificationError(
            "TRANSACTION_TIMEOUT",
            "A datastore step exceeded its timeout",
            correlation_id=correlation_id,
            retryable=True,
        )

    if isinstance(exc, IntegrityError):
        # Lost a race on the partial unique slug index
        if "slug" in str(exc.orig).lower():
            return ValidationError(
                "SLUG_TAKEN",
                "Slug is already in use by another tenant",
                correlation_id=correlation_id,
            )
        return VerificationError(
            "INTEGRITY_VIOLATION",
            "Provisioned state violates a datastore constraint",
            correlation_id=correlation_id,
            retryable=False,
        )

    if isinstance(exc, SQLAlchemyError):
        return VerificationError(
            "DATASTORE_UNAVAILABLE",
            "Datastore error during provisioning",
            correlation_id=correlation_id,
            retryable=True,
        )

    logger.error(f"[{correlation_id}] Unclassified provisioning failure", exc_info=exc)
    return VerificationError(
        "PROVISIONING_FAILED",
        "Provisioning failed",
        correlation_id=correlation_id,
        retryable=True,
    )
