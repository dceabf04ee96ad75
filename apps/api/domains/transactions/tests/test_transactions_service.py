"""Tests for the transactions service — tenant scoping and cursor pagination."""

import pytest
from unittest.mock import MagicMock

from apps.api.core.auth import TenantContext
from apps.api.core.errors import StorageError, ValidationError
from apps.api.domains.transactions.service import (
    clamp_page_size,
    extract_transaction,
    list_transactions,
    serialize_transaction,
)

CURSOR_ID = "3f0c2a9e-1b7d-4e8a-9c6f-5d4b3a2e1f00"


@pytest.fixture
def context():
    return TenantContext(user_id="user-a", organization_id="org-a", email="a@example.com")


@pytest.fixture
def mock_table():
    table = MagicMock()
    for method in ("select", "insert", "eq", "or_", "order", "limit"):
        getattr(table, method).return_value = table
    return table


@pytest.fixture
def mock_client(mock_table):
    client = MagicMock()
    client.table.return_value = mock_table
    return client


def _row(index, created_at="2025-12-11T10:00:00+00:00"):
    return {
        "id": f"00000000-0000-4000-8000-{index:012d}",
        "date": "2025-12-11",
        "description": f"Pagination Test {index}",
        "amount": 10 + index,
        "type": "debit",
        "balance": None,
        "confidence": 85,
        "created_at": created_at,
    }


class TestExtractTransaction:
    def test_organization_comes_from_context_not_text(self, mock_client, mock_table, context):
        mock_table.execute.return_value = MagicMock(data=[_row(1)])
        text = "organization_id: org-b\nDate: 13 Dec 2025\nAmount: -200.00"

        extract_transaction(mock_client, text, context)

        record = mock_table.insert.call_args[0][0]
        assert record["organization_id"] == "org-a"
        assert record["user_id"] == "user-a"
        assert record["date"] == "2025-12-13"
        assert record["amount"] == 200.0
        assert record["type"] == "debit"
        assert record["raw_text"] == text

    def test_returns_stored_row(self, mock_client, mock_table, context):
        mock_table.execute.return_value = MagicMock(data=[_row(7)])

        result = extract_transaction(mock_client, "Amount: -17.00", context)

        assert result["success"] is True
        assert result["transaction"]["id"] == "00000000-0000-4000-8000-000000000007"
        assert result["transaction"]["amount"] == 17.0

    def test_empty_insert_result_is_storage_error(self, mock_client, mock_table, context):
        mock_table.execute.return_value = MagicMock(data=[])

        with pytest.raises(StorageError):
            extract_transaction(mock_client, "Amount: -17.00", context)


class TestListTransactions:
    def test_fetches_one_extra_row(self, mock_client, mock_table, context):
        mock_table.execute.return_value = MagicMock(data=[])

        list_transactions(mock_client, context, limit=5)

        mock_table.limit.assert_called_with(6)
        mock_table.eq.assert_called_with("organization_id", "org-a")
        mock_table.order.assert_any_call("created_at", desc=True)

    def test_has_more_and_next_cursor(self, mock_client, mock_table, context):
        mock_table.execute.return_value = MagicMock(data=[_row(i) for i in range(3)])

        page = list_transactions(mock_client, context, limit=2)

        assert [t["description"] for t in page["transactions"]] == [
            "Pagination Test 0",
            "Pagination Test 1",
        ]
        assert page["has_more"] is True
        assert page["next_cursor"] == _row(1)["id"]

    def test_exact_page_has_no_more(self, mock_client, mock_table, context):
        mock_table.execute.return_value = MagicMock(data=[_row(i) for i in range(2)])

        page = list_transactions(mock_client, context, limit=2)

        assert page["has_more"] is False
        assert page["next_cursor"] is None

    def test_cursor_resumes_after_anchor(self, mock_client, mock_table, context):
        anchor = {"id": CURSOR_ID, "created_at": "2025-12-11T10:00:00+00:00"}
        mock_table.execute.side_effect = [
            MagicMock(data=[anchor]),
            MagicMock(data=[_row(4)]),
        ]

        page = list_transactions(mock_client, context, cursor=CURSOR_ID, limit=2)

        mock_table.eq.assert_any_call("id", CURSOR_ID)
        mock_table.eq.assert_any_call("organization_id", "org-a")
        filter_expr = mock_table.or_.call_args[0][0]
        assert 'created_at.lt."2025-12-11T10:00:00+00:00"' in filter_expr
        assert f"id.lt.{CURSOR_ID}" in filter_expr
        assert len(page["transactions"]) == 1
        assert page["has_more"] is False

    def test_cursor_from_another_organization_is_rejected(
        self, mock_client, mock_table, context
    ):
        # The org-scoped lookup finds nothing for a foreign id.
        mock_table.execute.return_value = MagicMock(data=[])

        with pytest.raises(ValidationError):
            list_transactions(mock_client, context, cursor=CURSOR_ID)

    def test_malformed_cursor_is_rejected(self, mock_client, context):
        with pytest.raises(ValidationError):
            list_transactions(mock_client, context, cursor="txn_123")

    def test_query_failure_is_storage_error(self, mock_client, mock_table, context):
        mock_table.execute.side_effect = RuntimeError("timeout")

        with pytest.raises(StorageError):
            list_transactions(mock_client, context)


@pytest.mark.parametrize(
    "limit,expected",
    [(None, 20), (1, 1), (20, 20), (100, 100), (500, 100), (0, 1), (-3, 1)],
)
def test_clamp_page_size(limit, expected):
    assert clamp_page_size(limit) == expected


def test_serialize_transaction_casts_numbers():
    row = _row(2)
    row["amount"] = "12.50"
    row["balance"] = "1000"

    out = serialize_transaction(row)

    assert out["amount"] == 12.5
    assert out["balance"] == 1000.0
    assert out["confidence"] == 85
