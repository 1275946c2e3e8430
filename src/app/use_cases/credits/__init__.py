"""
Credit Use Cases

Purchases, reservations, operator adjustments and read views over the
credit ledger. Consumption happens only through workflow activation.
"""

from .adjust_credits_use_case import AdjustCreditsUseCase
from .dtos import (
    BalanceResponse,
    PurchaseCreditsResponse,
    QuoteResponse,
    TransactionListResponse,
    TransactionResponse,
)
from .get_balance_use_case import GetBalanceUseCase, ListTransactionsUseCase, QuoteCreditsUseCase
from .purchase_credits_use_case import PurchaseCreditsUseCase
from .reserve_credits_use_case import ReleaseCreditsUseCase, ReserveCreditsUseCase

__all__ = [
    "PurchaseCreditsUseCase",
    "ReserveCreditsUseCase",
    "ReleaseCreditsUseCase",
    "AdjustCreditsUseCase",
    "GetBalanceUseCase",
    "ListTransactionsUseCase",
    "QuoteCreditsUseCase",
    "BalanceResponse",
    "PurchaseCreditsResponse",
    "QuoteResponse",
    "TransactionListResponse",
    "TransactionResponse",
]
