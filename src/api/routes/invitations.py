"""
Invitation API Routes

Invitation lifecycle, identity lookup and delivery.
"""

from datetime import timedelta
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header, Query, status
from pydantic import BaseModel, Field

from config import ApplicationConfig
from src.api.error import to_http_error
from src.app.services.delivery import IDeliveryService, ITemplateRenderer
from src.app.services.token_codec import TokenCodec
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.invitations import (
    CreateInvitationResponse,
    CreateInvitationUseCase,
    DecodedIdentityResponse,
    DecodeInvitationIdentityUseCase,
    DeliverInvitationUseCase,
    DeliveryResponse,
    FindInvitationsByIdentityUseCase,
    InvitationListResponse,
    ListInvitationsUseCase,
    RedeemInvitationResponse,
    RedeemInvitationUseCase,
    RevokeInvitationResponse,
    RevokeInvitationUseCase,
)
from src.depends import (
    get_current_caller,
    get_delivery_service,
    get_template_renderer,
    get_token_codec,
    get_unit_of_work,
    resolve_tenant,
)
from src.domain.authorization import Caller, caller_tenant_id
from src.domain.entities import InvitationRole, RetentionPurpose
from src.domain.invitation_claims import IdentityClaims, TokenRestrictions

router = APIRouter(prefix="/invitations", tags=["Invitations"])


class IdentityPayload(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    full_name: str = Field(..., min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=50)
    private_email: Optional[str] = Field(None, max_length=320)


class CreateInvitationRequest(BaseModel):
    """
    Create invitation HTTP request payload

    tenant_id is only read for operator callers; tenant callers always
    invite into their bound tenant.
    """

    tenant_id: Optional[UUID] = None
    identity: IdentityPayload
    retention_purpose: RetentionPurpose = RetentionPurpose.onboarding
    role: InvitationRole = InvitationRole.member
    scope: List[str] = Field(default_factory=list)
    restrictions: Optional[TokenRestrictions] = None
    ttl_days: Optional[int] = Field(None, ge=1, le=365)


class RedeemInvitationRequest(BaseModel):
    token: str = Field(..., description="Invitation token")


class RevokeInvitationRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class LookupRequest(BaseModel):
    """Identity travels in the body so it never lands in access logs"""

    identity: str = Field(..., min_length=1, max_length=320)
    tenant_id: Optional[UUID] = None


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=CreateInvitationResponse,
)
async def create_invitation(
    request: CreateInvitationRequest,
    caller: Caller = Depends(get_current_caller),
    uow: UnitOfWork = Depends(get_unit_of_work),
    codec: TokenCodec = Depends(get_token_codec),
):
    """
    Create Invitation

    Raises:
        - 400 Bad Request: INVALID_IDENTITY, INVALID_SCOPE, INVALID_TTL,
          TENANT_REQUIRED
        - 401 Unauthorized: Missing or invalid credential
        - 403 Forbidden: AUTHORIZATION_DENIED
        - 409 Conflict: INVITE_ALREADY_EXISTS
    """
    tenant_id = resolve_tenant(caller, request.tenant_id)

    use_case = CreateInvitationUseCase(
        uow, codec, ttl_days=ApplicationConfig.INVITATION_TTL_DAYS
    )
    result = await use_case.execute(
        caller,
        tenant_id,
        IdentityClaims(**request.identity.model_dump()),
        request.retention_purpose,
        role=request.role,
        scope=request.scope,
        restrictions=request.restrictions,
        ttl_days=request.ttl_days,
    )

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.get(
    "",
    status_code=status.HTTP_200_OK,
    response_model=InvitationListResponse,
)
async def list_invitations(
    tenant_id: Optional[UUID] = Query(None, description="Operators only"),
    caller: Caller = Depends(get_current_caller),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """List Invitations (non-PII summaries)"""
    use_case = ListInvitationsUseCase(uow)
    result = await use_case.execute(caller, resolve_tenant(caller, tenant_id))

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.post(
    "/lookup",
    status_code=status.HTTP_200_OK,
    response_model=InvitationListResponse,
)
async def find_invitations(
    request: LookupRequest,
    caller: Caller = Depends(get_current_caller),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Already Invited? - lookup by identity hash

    Operators may omit tenant_id to search across tenants.
    """
    tenant_id = caller_tenant_id(caller) or request.tenant_id

    use_case = FindInvitationsByIdentityUseCase(uow)
    result = await use_case.execute(caller, request.identity, tenant_id=tenant_id)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.post(
    "/redeem",
    status_code=status.HTTP_200_OK,
    response_model=RedeemInvitationResponse,
)
async def redeem_invitation(
    request: RedeemInvitationRequest,
    origin: Optional[str] = Header(None),
    uow: UnitOfWork = Depends(get_unit_of_work),
    codec: TokenCodec = Depends(get_token_codec),
):
    """
    Redeem Invitation

    The token is the credential; no session is required.

    Raises:
        - 401 Unauthorized: TOKEN_INVALID
        - 403 Forbidden: RESTRICTION_VIOLATED
        - 409 Conflict: INVITATION_ALREADY_REDEEMED
        - 410 Gone: TOKEN_EXPIRED, TOKEN_REVOKED
    """
    use_case = RedeemInvitationUseCase(
        uow,
        codec,
        session_ttl=timedelta(minutes=ApplicationConfig.ACCESS_TOKEN_TTL_MINUTES),
    )
    result = await use_case.execute(request.token, origin=origin)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.post(
    "/{invitation_id}/revoke",
    status_code=status.HTTP_200_OK,
    response_model=RevokeInvitationResponse,
)
async def revoke_invitation(
    invitation_id: UUID,
    request: RevokeInvitationRequest,
    caller: Caller = Depends(get_current_caller),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Revoke Invitation

    Raises:
        - 403 Forbidden: AUTHORIZATION_DENIED
        - 404 Not Found: INVITATION_NOT_FOUND
        - 409 Conflict: INVALID_TRANSITION
    """
    use_case = RevokeInvitationUseCase(uow)
    result = await use_case.execute(caller, invitation_id, reason=request.reason)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.post(
    "/{invitation_id}/identity",
    status_code=status.HTTP_200_OK,
    response_model=DecodedIdentityResponse,
)
async def decode_invitation_identity(
    invitation_id: UUID,
    caller: Caller = Depends(get_current_caller),
    uow: UnitOfWork = Depends(get_unit_of_work),
    codec: TokenCodec = Depends(get_token_codec),
):
    """Decode Invitation Identity (audited)"""
    use_case = DecodeInvitationIdentityUseCase(uow, codec)
    result = await use_case.execute(caller, invitation_id)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.post(
    "/{invitation_id}/deliver",
    status_code=status.HTTP_200_OK,
    response_model=DeliveryResponse,
)
async def deliver_invitation(
    invitation_id: UUID,
    caller: Caller = Depends(get_current_caller),
    uow: UnitOfWork = Depends(get_unit_of_work),
    delivery: IDeliveryService = Depends(get_delivery_service),
    renderer: ITemplateRenderer = Depends(get_template_renderer),
):
    """
    Deliver Invitation - one attempt

    Raises:
        - 404 Not Found: INVITATION_NOT_FOUND
        - 409 Conflict: INVALID_TRANSITION
        - 502 Bad Gateway: DELIVERY_FAILED
    """
    use_case = DeliverInvitationUseCase(uow, delivery, renderer)
    result = await use_case.execute(caller, invitation_id)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value
