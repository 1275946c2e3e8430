"""
Audit API Routes

Handles audit event retrieval endpoints.
"""

from typing import Any, Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from src.api.error import to_http_error
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.audit import GetAuditEventsUseCase
from src.depends import get_current_caller, get_unit_of_work
from src.domain.authorization import Caller, caller_tenant_id

router = APIRouter(prefix="/audit", tags=["Audit"])


class AuditEventResponse(BaseModel):
    """Single audit event in response"""

    action: str
    actor_id: Optional[str]
    timestamp: str
    metadata: Dict[str, Any]


class AuditEventsResponse(BaseModel):
    """GET /audit/events response payload"""

    events: List[AuditEventResponse]
    next_cursor: Optional[str]


@router.get(
    "/events",
    status_code=status.HTTP_200_OK,
    response_model=AuditEventsResponse,
)
async def get_audit_events(
    tenant_id: Optional[UUID] = Query(
        None, description="Operators only; omit for global events"
    ),
    caller: Caller = Depends(get_current_caller),
    uow: UnitOfWork = Depends(get_unit_of_work),
    limit: int = Query(50, ge=1, le=100, description="Maximum number of events to return"),
    cursor: Optional[str] = Query(None, description="Pagination cursor"),
    action: Optional[str] = Query(None, description="Only events of this action"),
):
    """
    Get Audit Events

    Tenant superusers read their own tenant's events; operators read any
    tenant's events or, without tenant_id, global events such as retention
    sweeps.

    Raises:
        - 401 Unauthorized: Missing or invalid credential
        - 403 Forbidden: AUTHORIZATION_DENIED
    """
    use_case = GetAuditEventsUseCase(uow)
    result = await use_case.execute(
        caller,
        caller_tenant_id(caller) or tenant_id,
        limit=limit,
        cursor=cursor,
        action=action,
    )

    if result.is_err():
        raise to_http_error(result.error)

    return result.value
