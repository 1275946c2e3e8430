"""
Invitation Use Cases

Invitation lifecycle, identity lookup and delivery.
"""

from .create_invitation_use_case import CreateInvitationUseCase
from .decode_invitation_identity_use_case import DecodeInvitationIdentityUseCase
from .deliver_invitation_use_case import (
    DeliverInvitationUseCase,
    ListFailedDeliveriesUseCase,
    RequeueDeliveryUseCase,
    RetryDueDeliveriesUseCase,
)
from .dtos import (
    CreateInvitationResponse,
    DecodedIdentityResponse,
    DeliveryResponse,
    InvitationListResponse,
    InvitationSummary,
    RedeemInvitationResponse,
    RetryDeliveriesResponse,
    RevokeInvitationResponse,
)
from .find_invitations_use_case import FindInvitationsByIdentityUseCase, ListInvitationsUseCase
from .redeem_invitation_use_case import RedeemInvitationUseCase
from .revoke_invitation_use_case import RevokeInvitationUseCase

__all__ = [
    "CreateInvitationUseCase",
    "RedeemInvitationUseCase",
    "RevokeInvitationUseCase",
    "DecodeInvitationIdentityUseCase",
    "FindInvitationsByIdentityUseCase",
    "ListInvitationsUseCase",
    "DeliverInvitationUseCase",
    "RetryDueDeliveriesUseCase",
    "ListFailedDeliveriesUseCase",
    "RequeueDeliveryUseCase",
    "CreateInvitationResponse",
    "RedeemInvitationResponse",
    "RevokeInvitationResponse",
    "DecodedIdentityResponse",
    "InvitationSummary",
    "InvitationListResponse",
    "DeliveryResponse",
    "RetryDeliveriesResponse",
]
