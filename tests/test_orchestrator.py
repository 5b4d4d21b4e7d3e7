"""
End-to-end tests for the bookkeeping service over the in-memory remote.
"""

import asyncio
import logging

import pytest
from decimal import Decimal

from bookkeeper.config import AppSettings
from bookkeeper.controller import OperationFailedError
from bookkeeper.models.ledger import AccountType, CategoryKind, SnapshotSource
from bookkeeper.models.notification import NotificationType
from bookkeeper.orchestrator import (
    BookkeepingService,
    create_app_components,
    require_wire_id,
    wire_id,
)
from bookkeeper.services.storage import InMemoryLedgerService, StorageError

from tests.conftest import BANK_ID, CASH_ID, FOOD_ID, SALARY_ID, run


def state(service: BookkeepingService) -> dict:
    return service.snapshot.model_dump(exclude={"loaded_at"})


class TestIncomeExpenseFlow:
    """Tests for add / update / delete of income and expense items."""

    def test_add_update_delete_income(self, service, remote):
        """Cash=1000 -> +200 income -> move to Bank at 150 -> delete."""
        item_id = run(service.add_income("Salary", Decimal("200"), account_id=CASH_ID))

        assert service.balance_of(CASH_ID) == Decimal("1200")
        assert service.totals.income == Decimal("200")
        assert remote.accounts[1].amount == Decimal("1200")

        run(service.update_income(item_id, "Salary", Decimal("150"), account_id=BANK_ID))

        assert service.balance_of(CASH_ID) == Decimal("1000")
        assert service.balance_of(BANK_ID) == Decimal("150")
        assert service.totals.income == Decimal("150")

        assert run(service.delete_income(item_id)) is True

        assert service.balance_of(CASH_ID) == Decimal("1000")
        assert service.balance_of(BANK_ID) == Decimal("0")
        assert service.totals.income == Decimal("0")
        assert remote.transactions == {}

    def test_server_id_replaces_temporary_id(self, service, remote):
        item_id = run(service.add_expense("Lunch", 120, category_id=FOOD_ID, account_id=CASH_ID))

        assert item_id.isdigit()
        assert int(item_id) in remote.transactions
        assert service.snapshot.expense[0].id == item_id
        assert remote.transactions[int(item_id)].category_id == int(FOOD_ID)

    def test_ledger_closure(self, service):
        """Balances equal starting balances plus the effects of all live items."""
        run(service.add_income("Gift", 50, account_id=BANK_ID))
        lunch = run(service.add_expense("Lunch", 30, account_id=CASH_ID))
        run(service.add_expense("Fuel", 70, account_id=BANK_ID))
        run(service.update_expense(lunch, "Lunch", 45, account_id=BANK_ID))

        assert service.balance_of(CASH_ID) == Decimal("1000")
        assert service.balance_of(BANK_ID) == Decimal("50") - Decimal("70") - Decimal("45")
        assert service.totals.profit == Decimal("-65")
        assert service.totals.loss == Decimal("65")

    def test_item_without_account_changes_no_balance(self, service):
        run(service.add_income("Cashback", 10, category_id=SALARY_ID))

        assert service.balance_of(CASH_ID) == Decimal("1000")
        assert service.totals.income == Decimal("10")
        assert service.totals.accounts == Decimal("1000")

    def test_invalid_amount_rejected_before_any_call(self, service, remote):
        calls = list(remote.calls)
        with pytest.raises(ValueError):
            run(service.add_income("Refund", Decimal("-5"), account_id=CASH_ID))
        assert remote.calls == calls

    def test_update_unknown_item_is_noop(self, service, remote):
        calls = list(remote.calls)
        assert run(service.update_expense("999", "Ghost", 1)) is None
        assert run(service.delete_expense("999")) is False
        assert remote.calls == calls


class TestObligations:
    """Tests for collect / pay items and completion."""

    def test_collect_earmarks_then_completes_as_income(self, service, remote):
        item_id = run(service.add_collect("Ashif", 300, account_id=CASH_ID))

        assert service.balance_of(CASH_ID) == Decimal("700")
        assert service.totals.collect == Decimal("300")

        income_id = run(service.mark_collect_completed(item_id, category_id=SALARY_ID))

        assert service.snapshot.collect[0].completed is True
        assert service.totals.collect == Decimal("0")
        assert service.totals.income == Decimal("300")
        assert service.balance_of(CASH_ID) == Decimal("1300")
        assert remote.transactions[int(income_id)].kind.value == "income"
        assert remote.transactions[int(item_id)].completed is True

    def test_completion_is_idempotent(self, service, remote):
        item_id = run(service.add_pay("College", 400, account_id=BANK_ID))
        run(service.mark_pay_completed(item_id))
        after_first = state(service)
        calls = list(remote.calls)

        assert run(service.mark_pay_completed(item_id)) is None
        assert state(service) == after_first
        assert remote.calls == calls
        assert service.balance_of(BANK_ID) == Decimal("-400")
        assert service.snapshot.find_account(BANK_ID).is_overdrawn

    def test_complete_into_another_account(self, service):
        item_id = run(service.add_collect("Fahis", 100, account_id=CASH_ID))
        run(service.mark_collect_completed(item_id, account_id=BANK_ID))

        assert service.balance_of(CASH_ID) == Decimal("1000")
        assert service.balance_of(BANK_ID) == Decimal("100")

    def test_update_collect_amount(self, service):
        item_id = run(service.add_collect("Ashif", 300, account_id=CASH_ID))
        run(service.update_collect(item_id, "Ashif", 250, account_id=CASH_ID))

        assert service.balance_of(CASH_ID) == Decimal("750")
        assert run(service.delete_collect(item_id)) is True
        assert service.balance_of(CASH_ID) == Decimal("1000")


class TestCategoriesAndAccounts:
    """Tests for category and account maintenance."""

    def test_delete_category_detaches_items(self, service, remote):
        item_id = run(service.add_expense("Lunch", 50, category_id=FOOD_ID, account_id=CASH_ID))

        assert run(service.delete_category(FOOD_ID)) is True

        assert service.snapshot.find_category(FOOD_ID) is None
        assert service.snapshot.expense[0].category_id is None
        assert remote.transactions[int(item_id)].category_id is None
        assert service.totals.expense == Decimal("50")

    def test_add_and_rename_category(self, service, remote):
        category_id = run(service.add_category("Rent", CategoryKind.EXPENSE, color="#f97316"))
        run(service.update_category(category_id, "House rent", CategoryKind.EXPENSE, "#f97316"))

        assert service.snapshot.find_category(category_id).name == "House rent"
        assert remote.categories[int(category_id)].name == "House rent"

    def test_add_account_then_post_to_it(self, service, remote):
        account_id = run(service.add_account("Federal", AccountType.BANK, 500))
        run(service.add_income("Interest", 5, account_id=account_id))

        assert service.snapshot.accounts["federal"].id == account_id
        assert service.balance_of(account_id) == Decimal("505")
        assert remote.accounts[int(account_id)].amount == Decimal("505")

    def test_delete_account_cascades(self, service, remote):
        item_id = run(service.add_income("Gift", 25, account_id=CASH_ID))

        assert run(service.delete_account(CASH_ID)) is True

        assert service.snapshot.find_account(CASH_ID) is None
        assert service.snapshot.income[0].account_id is None
        assert remote.transactions[int(item_id)].account_id is None
        assert 1 not in remote.accounts
        assert service.totals.income == Decimal("25")
        assert service.totals.accounts == Decimal("0")

    def test_rename_account(self, service, remote):
        run(service.update_account(CASH_ID, name="Wallet"))

        assert service.snapshot.find_account(CASH_ID).name == "Wallet"
        assert "wallet" in service.snapshot.accounts
        assert remote.accounts[1].name == "Wallet"

    def test_set_account_balance(self, service, remote):
        run(service.set_account_balance(BANK_ID, "250.75"))

        assert service.balance_of(BANK_ID) == Decimal("250.75")
        assert remote.accounts[2].amount == Decimal("250.75")

    def test_account_activity(self, service):
        run(service.add_income("Gift", 40, account_id=CASH_ID))
        run(service.add_expense("Tea", 15, category_id=FOOD_ID, account_id=CASH_ID))

        activity = {a.account_name: a for a in service.account_activity()}
        assert activity["Cash"].net == Decimal("25")
        assert service.category_totals(CategoryKind.EXPENSE)[0].category_name == "Food"


class TestFailureHandling:
    """Tests for rollback, timeouts and offline startup."""

    def test_failed_write_leaves_state_unchanged(self, service, remote):
        before = state(service)
        remote.fail_next("create_transaction")

        with pytest.raises(OperationFailedError):
            run(service.add_income("Salary", 200, account_id=CASH_ID))

        assert state(service) == before
        assert remote.transactions == {}
        assert remote.accounts[1].amount == Decimal("1000")
        types = [n.notification_type for n in service.notifications.recent]
        assert NotificationType.OPERATION_FAILED in types
        assert service.operation_loading["add-income"] is False

    def test_failed_balance_push_writes_nothing(self, service, remote):
        """Neither the item nor its balance effect reaches the server."""
        remote.fail_next("update_account")

        with pytest.raises(OperationFailedError):
            run(service.add_expense("Tea", 10, account_id=CASH_ID))

        spent = sum(item.amount for item in service.snapshot.expense)
        assert service.snapshot.expense == []
        assert remote.transactions == {}
        assert service.balance_of(CASH_ID) == Decimal("1000") - spent
        assert remote.accounts[1].amount == Decimal("1000")

    def test_failed_delete_restores_balance(self, service, remote):
        item_id = run(service.add_expense("Tea", 10, account_id=CASH_ID))
        remote.fail_next("delete_transaction")

        with pytest.raises(OperationFailedError):
            run(service.delete_expense(item_id))

        assert [item.id for item in service.snapshot.expense] == [item_id]
        assert service.balance_of(CASH_ID) == Decimal("990")
        assert remote.accounts[1].amount == Decimal("990")

    def test_failed_completion_restores_item_and_balances(self, service, remote):
        item_id = run(service.add_collect("Ashif", 300, account_id=CASH_ID))
        remote.fail_next("create_transaction")

        with pytest.raises(OperationFailedError):
            run(service.mark_collect_completed(item_id))

        assert remote.transactions[int(item_id)].completed is False
        assert len(remote.transactions) == 1
        assert remote.accounts[1].amount == Decimal("700")
        assert service.snapshot.collect[0].completed is False
        assert service.snapshot.income == []
        assert service.balance_of(CASH_ID) == Decimal("700")

    def test_concurrent_failure_does_not_leak_into_server(self, service, remote):
        """A failed operation's optimistic change is not persisted by a concurrent one."""
        remote.latency_seconds = 0.05
        remote.fail_next("create_transaction")

        async def scenario():
            return await asyncio.gather(
                service.add_income("Bonus", 100, account_id=CASH_ID),
                service.add_expense("Tea", 10, account_id=CASH_ID),
                return_exceptions=True,
            )

        income_result, expense_result = run(scenario())

        assert isinstance(income_result, OperationFailedError)
        assert expense_result.isdigit()
        assert remote.accounts[1].amount == Decimal("990")
        assert service.balance_of(CASH_ID) == Decimal("990")
        assert service.snapshot.income == []
        assert [item.name for item in service.snapshot.expense] == ["Tea"]

    def test_rename_keeps_server_amount(self, service, remote):
        remote.latency_seconds = 0.05
        remote.fail_next("create_transaction")

        async def scenario():
            return await asyncio.gather(
                service.add_income("Bonus", 100, account_id=BANK_ID),
                service.update_account(BANK_ID, name="Savings"),
                return_exceptions=True,
            )

        run(scenario())

        assert remote.transactions == {}
        assert remote.accounts[2].name == "Savings"
        assert remote.accounts[2].amount == Decimal("0")

    def test_loading_flag_while_pending(self, service, remote):
        remote.latency_seconds = 0.05

        async def scenario():
            task = asyncio.create_task(service.add_income("Gift", 10, account_id=CASH_ID))
            await asyncio.sleep(0.01)
            pending = (service.is_loading("add-income"), service.balance_of(CASH_ID))
            await task
            return pending

        loading, optimistic_balance = run(scenario())

        assert loading is True
        assert optimistic_balance == Decimal("1010")
        assert service.is_loading("add-income") is False

    def test_timeout_rolls_back(self, remote):
        service = BookkeepingService(remote, operation_timeout_seconds=0.02)
        run(service.load())
        remote.latency_seconds = 0.1

        with pytest.raises(OperationFailedError):
            run(service.add_expense("Rent", 500, account_id=CASH_ID))

        types = [n.notification_type for n in service.notifications.recent]
        assert NotificationType.OPERATION_TIMED_OUT in types
        assert service.balance_of(CASH_ID) == Decimal("1000")
        assert remote.transactions == {}

    def test_offline_startup_uses_seed(self, remote):
        remote.offline = True
        service = BookkeepingService(remote)
        snapshot = run(service.load())

        assert snapshot.source == SnapshotSource.SEED
        assert service.totals.accounts == sum(a.balance for a in snapshot.accounts.values())
        assert service.totals.collect > 0

    def test_refresh_keeps_snapshot_when_offline(self, service, remote):
        before = state(service)
        remote.offline = True

        assert run(service.refresh()) is False
        assert state(service) == before


class TestWireIds:
    """Tests for local-to-server id mapping."""

    def test_wire_id(self):
        assert wire_id("12") == 12
        assert wire_id("tmp-abc") is None
        assert wire_id(None) is None

    def test_require_wire_id(self):
        with pytest.raises(StorageError):
            require_wire_id("seed-cash", "account")


class TestAppComponents:
    """Tests for the settings-driven factory."""

    def test_factory_uses_settings(self, monkeypatch):
        monkeypatch.setenv("OPERATION_TIMEOUT_SECONDS", "5")
        monkeypatch.setenv("NOTIFICATION_HISTORY_SIZE", "3")
        remote = InMemoryLedgerService()
        service = create_app_components(service=remote)
        run(service.load())

        for _ in range(5):
            service.notifications.success("k", "ok")
        assert len(service.notifications.recent) == 3
        assert service.snapshot.accounts == {}

    def test_debug_mode_lowers_log_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "warning")
        monkeypatch.setenv("DEBUG_MODE", "true")

        create_app_components(service=InMemoryLedgerService())

        assert logging.getLogger("bookkeeper").level == logging.DEBUG

    def test_log_level_without_debug_mode(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "warning")
        monkeypatch.delenv("DEBUG_MODE", raising=False)

        assert AppSettings().effective_log_level == "WARNING"
        create_app_components(service=InMemoryLedgerService())
        assert logging.getLogger("bookkeeper").level == logging.WARNING


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
