"""Pydantic schemas for the transactions domain."""

from typing import Literal, Optional

from pydantic import BaseModel, Field


class ExtractTransactionRequest(BaseModel):
    """Raw statement line, SMS alert or log entry to parse."""

    text: str = Field(..., min_length=1, description="Free-text transaction")


class TransactionOut(BaseModel):
    """A stored transaction as returned to the caller."""

    id: str
    date: str
    description: str
    amount: float
    type: Literal["debit", "credit"]
    balance: Optional[float] = None
    confidence: int = Field(ge=0, le=100)
    created_at: str


class ExtractTransactionResponse(BaseModel):
    """Response from text extraction."""

    success: bool = True
    transaction: TransactionOut


class TransactionPage(BaseModel):
    """One page of an organization's transactions, newest first."""

    transactions: list[TransactionOut]
    next_cursor: Optional[str] = None
    has_more: bool = False
