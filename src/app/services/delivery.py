"""
Invitation delivery collaborators.

Rendering and sending are external concerns; the use cases only depend on
these interfaces and on the attempt bookkeeping stored on the invitation.
"""

import logging
from abc import ABC, abstractmethod
from datetime import timedelta

from src.domain.entities import InvitationRecord

logger = logging.getLogger(__name__)

# Delay before attempt n+1 after n failures
RETRY_BACKOFF = (
    timedelta(minutes=5),
    timedelta(minutes=30),
    timedelta(hours=2),
)


def retry_delay(failed_attempts: int) -> timedelta:
    index = min(max(failed_attempts, 1), len(RETRY_BACKOFF)) - 1
    return RETRY_BACKOFF[index]


class DeliveryError(Exception):
    """Raised by a delivery service when a message could not be handed off"""


class ITemplateRenderer(ABC):
    @abstractmethod
    def render(self, invitation: InvitationRecord) -> str:
        """Render the message body for an invitation"""
        pass


class IDeliveryService(ABC):
    @abstractmethod
    async def send(self, token: str, rendered_template: str) -> None:
        """Send the invitation. Raises DeliveryError on failure."""
        pass


class AcceptLinkRenderer(ITemplateRenderer):
    """Minimal body pointing at the acceptance page"""

    def __init__(self, accept_url: str):
        self.accept_url = accept_url

    def render(self, invitation: InvitationRecord) -> str:
        return (
            "You have been invited to join a workspace.\n"
            f"Accept the invitation: {self.accept_url}?token={invitation.token}\n"
        )


class LoggingDeliveryService(IDeliveryService):
    """Development delivery service that only records the hand-off"""

    async def send(self, token: str, rendered_template: str) -> None:
        logger.info(f"Invitation message handed off ({len(rendered_template)} chars)")
