"""
Credit Use Case DTOs (Data Transfer Objects)
"""

from typing import List, Optional

from pydantic import BaseModel

from src.app.services.credit_ledger import BalanceView
from src.domain.entities import CreditTransaction
from src.domain.pricing import PriceQuote


class BalanceResponse(BaseModel):
    """Read-only balance view"""

    tenant_id: str
    purchased: int
    used: int
    reserved: int
    current: int
    available: int
    balance_status: str


class TransactionResponse(BaseModel):
    transaction_id: str
    kind: str
    amount: int
    unit_price: str
    total_amount: str
    currency: str
    pricing_tier: Optional[str] = None
    discount_percentage: str
    workflow_id: Optional[str] = None
    description: Optional[str] = None
    created_at: str


class TransactionListResponse(BaseModel):
    transactions: List[TransactionResponse]


class PurchaseCreditsResponse(BaseModel):
    transaction: TransactionResponse
    balance: BalanceResponse


class QuoteResponse(BaseModel):
    quantity: int
    pricing_tier: str
    base_unit_price: str
    discount_percentage: str
    unit_price: str
    total: str


def balance_response(view: BalanceView) -> BalanceResponse:
    return BalanceResponse(
        tenant_id=str(view.tenant_id),
        purchased=view.purchased,
        used=view.used,
        reserved=view.reserved,
        current=view.current,
        available=view.available,
        balance_status=view.balance_status.value,
    )


def transaction_response(tx: CreditTransaction) -> TransactionResponse:
    return TransactionResponse(
        transaction_id=str(tx.id),
        kind=tx.kind.value,
        amount=tx.amount,
        unit_price=str(tx.unit_price),
        total_amount=str(tx.total_amount),
        currency=tx.currency,
        pricing_tier=tx.pricing_tier.value if tx.pricing_tier else None,
        discount_percentage=str(tx.discount_percentage),
        workflow_id=str(tx.workflow_id) if tx.workflow_id else None,
        description=tx.description,
        created_at=tx.created_at.isoformat() + "Z",
    )


def quote_response(quote: PriceQuote) -> QuoteResponse:
    return QuoteResponse(
        quantity=quote.quantity,
        pricing_tier=quote.tier.value,
        base_unit_price=str(quote.base_unit_price),
        discount_percentage=str(quote.discount_percentage),
        unit_price=str(quote.unit_price),
        total=str(quote.total),
    )
