"""Transactions service — parse, store and page through transactions.

Every read and write is scoped to the caller's organization. The
organization id comes from the authenticated TenantContext and is never
derived from the parsed text.

Listing uses cursor pagination: the cursor is the id of the last row of
the previous page, and rows are ordered by (created_at, id) descending so
that rows sharing a timestamp are neither skipped nor repeated.
"""

import uuid
from typing import Any, Optional

import structlog
from supabase import Client

from apps.api.core.auth import TenantContext
from apps.api.core.config import settings
from apps.api.core.errors import StorageError, ValidationError
from packages.ingestion_engine.text_parser import parse_transaction_text

logger = structlog.get_logger()

DEFAULT_TABLE = "transactions"
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

COLUMNS = "id, date, description, amount, type, balance, confidence, created_at"


def _table_name() -> str:
    return settings.TRANSACTIONS_TABLE if settings else DEFAULT_TABLE


def clamp_page_size(limit: Optional[int]) -> int:
    """Apply the default page size and the hard cap."""
    default = settings.DEFAULT_PAGE_SIZE if settings else DEFAULT_PAGE_SIZE
    cap = settings.MAX_PAGE_SIZE if settings else MAX_PAGE_SIZE
    if limit is None:
        limit = default
    return max(1, min(limit, cap))


def serialize_transaction(row: dict[str, Any]) -> dict[str, Any]:
    """Shape a stored row for the API response."""
    balance = row.get("balance")
    return {
        "id": str(row["id"]),
        "date": str(row["date"]),
        "description": row["description"],
        "amount": float(row["amount"]),
        "type": row["type"],
        "balance": float(balance) if balance is not None else None,
        "confidence": int(row["confidence"]),
        "created_at": str(row["created_at"]),
    }


def extract_transaction(client: Client, text: str, context: TenantContext) -> dict[str, Any]:
    """Parse ``text`` and store the result under the caller's organization."""
    parsed = parse_transaction_text(text)

    record = {
        "organization_id": context.organization_id,
        "user_id": context.user_id,
        "date": parsed.date.isoformat(),
        "description": parsed.description,
        "amount": parsed.amount,
        "type": parsed.type,
        "balance": parsed.balance,
        "confidence": parsed.confidence,
        "raw_text": text,
    }

    try:
        result = client.table(_table_name()).insert(record).execute()
    except Exception as e:
        logger.error("transaction_insert_failed", error=str(e))
        raise StorageError("Failed to save transaction")

    if not result.data:
        logger.error("transaction_insert_empty")
        raise StorageError("Failed to save transaction")

    saved = result.data[0]
    logger.info(
        "transaction_extracted",
        transaction_id=str(saved["id"]),
        type=parsed.type,
        confidence=parsed.confidence,
    )
    return {"success": True, "transaction": serialize_transaction(saved)}


def _load_cursor(client: Client, context: TenantContext, cursor: str) -> dict[str, Any]:
    """Fetch the row a cursor points at, within the caller's organization only."""
    try:
        cursor_id = str(uuid.UUID(cursor))
    except ValueError:
        raise ValidationError("Invalid cursor")

    try:
        result = (
            client.table(_table_name())
            .select("id, created_at")
            .eq("organization_id", context.organization_id)
            .eq("id", cursor_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.error("cursor_lookup_failed", error=str(e))
        raise StorageError("Failed to load transactions")

    if not result.data:
        # Unknown ids and ids of other organizations look the same.
        raise ValidationError("Invalid cursor")
    return result.data[0]


def list_transactions(
    client: Client,
    context: TenantContext,
    cursor: Optional[str] = None,
    limit: Optional[int] = None,
) -> dict[str, Any]:
    """Return one page of the organization's transactions, newest first."""
    page_size = clamp_page_size(limit)

    query = (
        client.table(_table_name())
        .select(COLUMNS)
        .eq("organization_id", context.organization_id)
    )

    if cursor:
        anchor = _load_cursor(client, context, cursor)
        created_at = anchor["created_at"]
        query = query.or_(
            f'created_at.lt."{created_at}",'
            f'and(created_at.eq."{created_at}",id.lt.{anchor["id"]})'
        )

    try:
        result = (
            query.order("created_at", desc=True)
            .order("id", desc=True)
            .limit(page_size + 1)
            .execute()
        )
    except Exception as e:
        logger.error("transaction_list_failed", error=str(e))
        raise StorageError("Failed to load transactions")

    rows = result.data or []
    has_more = len(rows) > page_size
    page = rows[:page_size]
    next_cursor = str(page[-1]["id"]) if has_more and page else None

    logger.info("transactions_listed", count=len(page), has_more=has_more)
    return {
        "transactions": [serialize_transaction(row) for row in page],
        "next_cursor": next_cursor,
        "has_more": has_more,
    }
