"""Transactions router — text extraction and paginated listing.

Both endpoints act on the caller's organization only; the tenant comes
from the bearer token, never from the request.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query
from supabase import Client

from apps.api.core.auth import TenantContext, get_tenant_context, get_user_client
from apps.api.core.config import settings
from apps.api.core.errors import ValidationError
from apps.api.domains.transactions import service
from apps.api.domains.transactions.schemas import (
    ExtractTransactionRequest,
    ExtractTransactionResponse,
    TransactionPage,
)

router = APIRouter(prefix="/transactions", tags=["transactions"])
logger = structlog.get_logger()

MAX_TEXT_CHARS = 10_000


@router.post("/extract", response_model=ExtractTransactionResponse)
async def extract_transaction(
    payload: ExtractTransactionRequest,
    client: Client = Depends(get_user_client),
    context: TenantContext = Depends(get_tenant_context),
):
    """Parse raw bank statement text and save it as a structured transaction."""
    max_chars = settings.MAX_TEXT_CHARS if settings else MAX_TEXT_CHARS
    if len(payload.text) > max_chars:
        logger.warning("extract_text_too_long", length=len(payload.text), max_chars=max_chars)
        raise ValidationError(f"Text too long (max {max_chars} characters)")

    return service.extract_transaction(client, payload.text, context)


@router.get("", response_model=TransactionPage)
async def list_transactions(
    cursor: Optional[str] = Query(default=None, description="Id of the last row seen"),
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    client: Client = Depends(get_user_client),
    context: TenantContext = Depends(get_tenant_context),
):
    """List the organization's transactions, newest first, with cursor pagination."""
    return service.list_transactions(client, context, cursor=cursor, limit=limit)
