"""
Invitation delivery use cases.

Each attempt is recorded on the invitation. Failed attempts are retried on
the 5 min / 30 min / 2 h schedule; after the last allowed attempt the
invitation is parked as failed until an operator requeues it.
"""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.delivery import (
    DeliveryError,
    IDeliveryService,
    ITemplateRenderer,
    retry_delay,
)
from src.app.services.policy import Policy
from src.app.services.unit_of_work import UnitOfWork
from src.domain.authorization import Operation, Resource, ResourceKind
from src.domain.base import utcnow
from src.domain.entities import DeliveryStatus, InvitationRecord, InvitationStatus

from .dtos import (
    DeliveryResponse,
    InvitationListResponse,
    RetryDeliveriesResponse,
    iso,
    summarize,
)

logger = logging.getLogger(__name__)


def _delivery_response(invitation: InvitationRecord) -> DeliveryResponse:
    return DeliveryResponse(
        invitation_id=str(invitation.id),
        delivery_status=invitation.delivery_status.value,
        delivery_attempts=invitation.delivery_attempts,
        next_delivery_attempt_at=iso(invitation.next_delivery_attempt_at),
    )


async def attempt_delivery(
    uow: UnitOfWork,
    invitation: InvitationRecord,
    delivery: IDeliveryService,
    renderer: ITemplateRenderer,
    now: datetime,
) -> bool:
    """
    Make one delivery attempt and record its outcome. Does not commit.

    Returns:
        True if the delivery service accepted the message
    """
    invitation.delivery_attempts += 1
    try:
        await delivery.send(invitation.token, renderer.render(invitation))
    except DeliveryError as e:
        invitation.last_delivery_error = str(e)[:1000]
        if invitation.delivery_attempts >= invitation.max_delivery_attempts:
            invitation.delivery_status = DeliveryStatus.failed
            invitation.next_delivery_attempt_at = None
            logger.warning(
                f"Delivery of invitation {invitation.id} failed permanently "
                f"after {invitation.delivery_attempts} attempts"
            )
        else:
            invitation.delivery_status = DeliveryStatus.retry_scheduled
            invitation.next_delivery_attempt_at = now + retry_delay(
                invitation.delivery_attempts
            )
            logger.warning(
                f"Delivery attempt {invitation.delivery_attempts} for invitation "
                f"{invitation.id} failed, retrying at {invitation.next_delivery_attempt_at}"
            )
        await uow.invitations.update(invitation)
        return False

    invitation.delivery_status = DeliveryStatus.sent
    invitation.delivered_at = now
    invitation.next_delivery_attempt_at = None
    invitation.last_delivery_error = None
    await uow.invitations.update(invitation)
    return True


class DeliverInvitationUseCase:
    """
    Business Rules:
    - Only pending invitations are delivered
    - Invitations parked as failed return DELIVERY_FAILED until requeued
    - A failed attempt is persisted before DELIVERY_FAILED is returned
    """

    def __init__(
        self, uow: UnitOfWork, delivery: IDeliveryService, renderer: ITemplateRenderer
    ):
        self.uow = uow
        self.delivery = delivery
        self.renderer = renderer

    async def execute(self, caller, invitation_id: UUID) -> Result[DeliveryResponse]:
        async with self.uow:
            invitation = await self.uow.invitations.get_by_id(invitation_id)
            if invitation is None:
                return Return.err(Error("INVITATION_NOT_FOUND", "Invitation not found"))

            denied = await Policy(self.uow).check(
                caller,
                Operation.invitation_deliver,
                Resource(ResourceKind.invitation, invitation.tenant_id, invitation.id),
            )
            if denied:
                return Return.err(denied)

            if invitation.status != InvitationStatus.pending:
                return Return.err(
                    Error("INVALID_TRANSITION", "Only pending invitations can be delivered")
                )

            if (
                invitation.delivery_status == DeliveryStatus.failed
                or invitation.delivery_attempts >= invitation.max_delivery_attempts
            ):
                return Return.err(
                    Error(
                        "DELIVERY_FAILED",
                        "Delivery attempts exhausted; the invitation needs manual intervention",
                    )
                )

            sent = await attempt_delivery(
                self.uow, invitation, self.delivery, self.renderer, utcnow()
            )
            await self.uow.commit()

            if not sent:
                return Return.err(
                    Error("DELIVERY_FAILED", "The invitation could not be delivered")
                )
            return Return.ok(_delivery_response(invitation))


class RetryDueDeliveriesUseCase:
    """Operator sweep over invitations whose retry time has come"""

    def __init__(
        self, uow: UnitOfWork, delivery: IDeliveryService, renderer: ITemplateRenderer
    ):
        self.uow = uow
        self.delivery = delivery
        self.renderer = renderer

    async def execute(
        self, caller, now: Optional[datetime] = None
    ) -> Result[RetryDeliveriesResponse]:
        async with self.uow:
            denied = await Policy(self.uow).check(
                caller, Operation.delivery_queue, Resource(ResourceKind.system, None)
            )
            if denied:
                return Return.err(denied)

            now = now or utcnow()
            due = await self.uow.invitations.get_due_for_delivery(now)

            sent = 0
            for invitation in due:
                if await attempt_delivery(
                    self.uow, invitation, self.delivery, self.renderer, now
                ):
                    sent += 1

            await self.uow.commit()

            return Return.ok(
                RetryDeliveriesResponse(
                    attempted=len(due),
                    sent=sent,
                    retry_scheduled=sum(
                        1 for i in due if i.delivery_status == DeliveryStatus.retry_scheduled
                    ),
                    failed=sum(1 for i in due if i.delivery_status == DeliveryStatus.failed),
                )
            )


class ListFailedDeliveriesUseCase:
    """Operator queue of invitations needing manual intervention"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, caller, tenant_id: Optional[UUID] = None
    ) -> Result[InvitationListResponse]:
        async with self.uow:
            denied = await Policy(self.uow).check(
                caller, Operation.delivery_queue, Resource(ResourceKind.system, None)
            )
            if denied:
                return Return.err(denied)

            invitations = await self.uow.invitations.get_failed_deliveries(tenant_id)
            return Return.ok(
                InvitationListResponse(invitations=[summarize(i) for i in invitations])
            )


class RequeueDeliveryUseCase:
    """Reset the attempt counter after manual intervention"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, caller, invitation_id: UUID) -> Result[DeliveryResponse]:
        async with self.uow:
            denied = await Policy(self.uow).check(
                caller, Operation.delivery_queue, Resource(ResourceKind.system, None)
            )
            if denied:
                return Return.err(denied)

            invitation = await self.uow.invitations.get_by_id(invitation_id)
            if invitation is None:
                return Return.err(Error("INVITATION_NOT_FOUND", "Invitation not found"))

            if invitation.status != InvitationStatus.pending:
                return Return.err(
                    Error("INVALID_TRANSITION", "Only pending invitations can be requeued")
                )

            invitation.delivery_attempts = 0
            invitation.delivery_status = DeliveryStatus.retry_scheduled
            invitation.next_delivery_attempt_at = utcnow()
            invitation.last_delivery_error = None
            await self.uow.invitations.update(invitation)

            await self.uow.commit()

            logger.info(f"Delivery of invitation {invitation_id} requeued")
            return Return.ok(_delivery_response(invitation))
