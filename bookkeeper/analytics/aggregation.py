"""
Aggregation Engine

DESIGN DECISION: Aggregation is a pure function of a snapshot.
No I/O, no caching, no side effects - the store recomputes it on
every snapshot change and callers may call it as often as they like.

Totals:
- collect / pay: pending (non-completed) obligations only
- accounts: sum of all balances
- income / expense: every posted item
- profit, loss, expense_ratio, profit_margin, net_cash_after_obligations
"""

from decimal import Decimal
from typing import Iterable, Optional

from bookkeeper.models.ledger import (
    AccountActivity,
    CategoryKind,
    CategoryTotal,
    LedgerItem,
    LedgerSnapshot,
    LedgerTotals,
    ObligationItem,
)


ZERO = Decimal("0")
HUNDRED = Decimal("100")


def _sum_amounts(items: Iterable[LedgerItem]) -> Decimal:
    return sum((item.amount for item in items), ZERO)


def _pending(items: Iterable[ObligationItem]) -> list[ObligationItem]:
    return [item for item in items if not item.completed]


def percentage(numerator: Decimal, denominator: Decimal) -> Decimal:
    """numerator / denominator * 100, or 0 when the denominator is not positive."""
    if denominator <= 0:
        return ZERO
    return numerator / denominator * HUNDRED


def compute_totals(snapshot: LedgerSnapshot) -> LedgerTotals:
    """Derive every total and ratio from the snapshot."""
    total_collect = _sum_amounts(_pending(snapshot.collect))
    total_pay = _sum_amounts(_pending(snapshot.pay))
    total_accounts = sum((a.balance for a in snapshot.accounts.values()), ZERO)
    total_income = _sum_amounts(snapshot.income)
    total_expense = _sum_amounts(snapshot.expense)

    profit = total_income - total_expense

    return LedgerTotals(
        collect=total_collect,
        pay=total_pay,
        accounts=total_accounts,
        income=total_income,
        expense=total_expense,
        profit=profit,
        loss=max(ZERO, total_expense - total_income),
        expense_ratio=percentage(total_expense, total_income),
        profit_margin=percentage(profit, total_income),
        net_cash_after_obligations=total_accounts + total_collect - total_pay,
    )


def totals_by_account(snapshot: LedgerSnapshot) -> list[AccountActivity]:
    """
    Posted income and expense per account, in ledger order.

    Items whose account is unknown are left out.
    """
    activity: dict[str, AccountActivity] = {
        account.id: AccountActivity(account_id=account.id, account_name=account.name)
        for account in snapshot.accounts.values()
    }

    for item in snapshot.income:
        entry = activity.get(item.account_id or "")
        if entry is not None:
            entry.income += item.amount
    for item in snapshot.expense:
        entry = activity.get(item.account_id or "")
        if entry is not None:
            entry.expense += item.amount

    return list(activity.values())


def totals_by_category(
    snapshot: LedgerSnapshot,
    kind: CategoryKind,
) -> list[CategoryTotal]:
    """
    Sum of income or expense items per category, largest first.

    Items without a (known) category are grouped under "Uncategorized".
    """
    items = snapshot.income if kind == CategoryKind.INCOME else snapshot.expense
    known = {c.id: c for c in snapshot.categories if c.kind == kind}

    groups: dict[Optional[str], CategoryTotal] = {}
    for item in items:
        category = known.get(item.category_id or "")
        group_id = category.id if category else None
        if group_id not in groups:
            groups[group_id] = CategoryTotal(
                category_id=group_id,
                category_name=category.name if category else "Uncategorized",
                color=category.color if category else None,
            )
        groups[group_id].total += item.amount
        groups[group_id].item_count += 1

    return sorted(groups.values(), key=lambda g: g.total, reverse=True)
