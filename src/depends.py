from contextlib import asynccontextmanager
from decimal import Decimal
from functools import lru_cache
from typing import List, Optional
from uuid import UUID

from fastapi import Depends, Header, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from libs.result import Error
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import ClientError
from src.api.utils.admin_auth import check_admin_api_key
from src.api.utils.jwt import verify_jwt
from src.app.services.delivery import (
    AcceptLinkRenderer,
    IDeliveryService,
    ITemplateRenderer,
    LoggingDeliveryService,
)
from src.app.services.token_codec import TokenCodec
from src.app.services.workflow_listeners import (
    IWorkflowActivationListener,
    LoggingActivationListener,
)
from src.domain.authorization import Caller, caller_tenant_id, resolve_caller
from src.domain.balance_alerts import BalanceThresholds

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer(auto_error=False)


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


@asynccontextmanager
async def unit_of_work_scope():
    """Unit of work outside a request (background jobs)"""
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


@lru_cache
def get_token_codec() -> TokenCodec:
    return TokenCodec(
        signing_keys=ApplicationConfig.TOKEN_SIGNING_KEYS,
        active_key_id=ApplicationConfig.TOKEN_ACTIVE_KEY_ID,
        encryption_key=ApplicationConfig.IDENTITY_ENCRYPTION_KEY,
        issuer=ApplicationConfig.TOKEN_ISSUER,
    )


def get_delivery_service() -> IDeliveryService:
    return LoggingDeliveryService()


def get_template_renderer() -> ITemplateRenderer:
    return AcceptLinkRenderer(ApplicationConfig.INVITATION_ACCEPT_URL)


def get_activation_listeners() -> List[IWorkflowActivationListener]:
    return [LoggingActivationListener()]


def get_base_price() -> Decimal:
    return Decimal(ApplicationConfig.CREDIT_BASE_PRICE)


def get_balance_thresholds() -> BalanceThresholds:
    return BalanceThresholds(
        low=int(ApplicationConfig.CREDIT_LOW_BALANCE_THRESHOLD),
        critical=int(ApplicationConfig.CREDIT_CRITICAL_BALANCE_THRESHOLD),
    )


async def get_current_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    x_admin_api_key: Optional[str] = Header(None),
) -> Caller:
    """
    Dependency resolving the caller once per request.

    The admin API key resolves to an Operator; otherwise the bearer JWT is
    verified and its claims mapped onto a caller variant. Anything else is
    rejected.

    Raises:
        ClientError: 401 if no valid credential is presented or the admin
            API key is invalid
    """
    if x_admin_api_key:
        return check_admin_api_key(x_admin_api_key)

    if credentials is None:
        raise ClientError(
            Error("NOT_AUTHENTICATED", "Not authenticated"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    payload = verify_jwt(credentials.credentials)
    caller = resolve_caller(payload)

    if caller is None:
        raise ClientError(
            Error("SESSION_INVALID", "Invalid or expired session token"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    return caller


def resolve_tenant(caller: Caller, requested: Optional[UUID]) -> UUID:
    """
    Tenant a request acts on.

    Tenant callers always act on their bound tenant; operators must name one.
    """
    bound = caller_tenant_id(caller)
    if bound is not None:
        return bound
    if requested is None:
        raise ClientError(
            Error("TENANT_REQUIRED", "tenant_id is required for operator requests"),
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    return requested
