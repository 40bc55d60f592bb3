"""
Audit API Routes

Audit trail lookup by correlation id.
"""

from typing import Any, Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from src.api.error import raise_for_error
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.audit import GetAuditTrailUseCase
from src.depends import get_current_administrator, get_unit_of_work

router = APIRouter(prefix="/admin/audit", tags=["Audit"])


class AuditEntryResponse(BaseModel):
    """Single audit entry in response"""

    action: str
    outcome: str
    actor_id: Optional[str]
    tenant_id: Optional[str]
    identity_id: Optional[str]
    timestamp: str
    payload: Dict[str, Any]


class AuditTrailResponse(BaseModel):
    """GET /admin/audit/{correlation_id} response payload"""

    correlation_id: str
    events: List[AuditEntryResponse]


@router.get(
    "/{correlation_id}",
    status_code=status.HTTP_200_OK,
    response_model=AuditTrailResponse,
)
async def get_audit_trail(
    correlation_id: str,
    actor_id: UUID = Depends(get_current_administrator),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Get Audit Trail

    Returns every entry for one provisioning or rotation attempt, oldest
    first. Payloads are redacted.
    """
    result = await GetAuditTrailUseCase(uow).execute(correlation_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value
