"""
Tests for Bookkeeper

Test strategy:
1. Unit tests for individual components (models, ledger, aggregation)
2. Integration tests for flows (with the in-memory ledger service)
3. No real API calls in tests
"""

import pytest
from datetime import date, timedelta
from decimal import Decimal

from bookkeeper.models.ledger import (
    Account,
    AccountType,
    Category,
    CategoryKind,
    CollectItem,
    IncomeItem,
    LedgerSnapshot,
    PayItem,
    TransactionKind,
    is_temp_id,
    new_temp_id,
    normalize_account_name,
)
from bookkeeper.models.notification import (
    Notification,
    NotificationBuilder,
    NotificationSeverity,
    NotificationType,
)
from bookkeeper.models.remote import AccountRecord, TransactionRecord


class TestLedgerModels:
    """Tests for the in-memory ledger models."""

    def test_account_key_normalizes_name(self):
        """Test that the ledger key is lowercased with spaces removed."""
        account = Account(name="Credit Card", type=AccountType.CREDIT)
        assert account.key == "creditcard"

    def test_normalize_strips_all_whitespace(self):
        assert normalize_account_name("  Federal  Bank ") == "federalbank"

    def test_account_may_go_negative(self):
        """Test that no floor is enforced on balances."""
        account = Account(name="Cash", type=AccountType.CASH, balance=Decimal("-50"))
        assert account.balance == Decimal("-50")
        assert account.is_overdrawn is True

    def test_account_name_strips_whitespace(self):
        account = Account(name="  Kotak  ")
        assert account.name == "Kotak"

    def test_account_rejects_empty_name(self):
        with pytest.raises(ValueError):
            Account(name="   ")

    def test_item_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValueError):
            IncomeItem(name="Refund", amount=Decimal("-1"))

    def test_items_get_temporary_ids(self):
        item = CollectItem(name="Ashif", amount=Decimal("3800"))
        assert is_temp_id(item.id)
        assert item.completed is False

    def test_temp_id_detection(self):
        assert is_temp_id(new_temp_id())
        assert not is_temp_id("42")
        assert not is_temp_id(None)

    def test_item_kinds(self):
        assert CollectItem.kind == TransactionKind.COLLECT
        assert PayItem.kind == TransactionKind.PAY
        assert IncomeItem.kind == TransactionKind.INCOME
        assert TransactionKind.COLLECT.is_obligation
        assert not TransactionKind.EXPENSE.is_obligation

    def test_category_creation(self):
        category = Category(name="Salary", kind=CategoryKind.INCOME)
        assert category.kind == CategoryKind.INCOME
        assert category.color


class TestLedgerSnapshot:
    """Tests for snapshot lookups and forking."""

    def _snapshot(self) -> LedgerSnapshot:
        cash = Account(id="1", name="Cash", type=AccountType.CASH, balance=Decimal("10"))
        return LedgerSnapshot(
            accounts={cash.key: cash},
            account_index={cash.id: cash.key},
            income=[IncomeItem(id="5", name="Gift", amount=Decimal("10"), account_id="1")],
        )

    def test_find_account_by_id(self):
        snapshot = self._snapshot()
        assert snapshot.find_account("1").name == "Cash"
        assert snapshot.find_account("99") is None
        assert snapshot.find_account(None) is None

    def test_find_item(self):
        snapshot = self._snapshot()
        assert snapshot.find_item(TransactionKind.INCOME, "5").name == "Gift"
        assert snapshot.find_item(TransactionKind.EXPENSE, "5") is None

    def test_fork_is_independent(self):
        """Test that changes to a fork never leak into the published snapshot."""
        snapshot = self._snapshot()
        working = snapshot.fork()
        working.income[0].amount = Decimal("99")
        working.accounts["cash"].balance = Decimal("0")

        assert snapshot.income[0].amount == Decimal("10")
        assert snapshot.accounts["cash"].balance == Decimal("10")

    def test_loaded_at_is_timezone_aware(self):
        assert LedgerSnapshot().loaded_at.tzinfo is not None


class TestWireModels:
    """Tests for the remote wire records."""

    def test_transaction_payload_excludes_id(self):
        record = TransactionRecord(
            id=7,
            kind=TransactionKind.INCOME,
            amount=Decimal("12.50"),
            note="Tip",
            occurred_on=date(2024, 1, 2),
        )
        payload = record.to_payload()
        assert "id" not in payload
        assert payload["kind"] == "income"
        assert payload["amount"] == 12.5
        assert payload["occurred_on"] == "2024-01-02"
        assert payload["completed"] is False

    def test_account_record_ignores_unknown_fields(self):
        record = AccountRecord.model_validate(
            {"id": 1, "name": "Cash", "type": "cash", "amount": 5, "created_at": "x"}
        )
        assert record.amount == Decimal("5")


class TestNotificationModels:
    """Tests for notification models."""

    def test_notification_to_log_dict(self):
        note = Notification(
            notification_type=NotificationType.OPERATION_SUCCEEDED,
            title="Success",
            message="Income added",
            operation_key="add-income",
        )
        log_dict = note.to_log_dict()
        assert "notification_id" in log_dict
        assert log_dict["notification_type"] == "operation_succeeded"
        assert log_dict["operation_key"] == "add-income"

    def test_builder_operation_failed(self):
        note = NotificationBuilder.operation_failed("delete-pay", "Could not delete", "HTTP 500")
        assert note.severity == NotificationSeverity.ERROR
        assert note.is_error
        assert note.error_message == "HTTP 500"

    def test_builder_timed_out(self):
        note = NotificationBuilder.operation_timed_out("add-income", "Too slow", 2.5)
        assert note.notification_type == NotificationType.OPERATION_TIMED_OUT
        assert note.details["timeout_seconds"] == 2.5

    def test_timestamp_is_utc(self):
        note = NotificationBuilder.operation_succeeded("add-income", "Income added")
        assert note.timestamp.utcoffset() == timedelta(0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
