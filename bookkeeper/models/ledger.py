"""
Core Data Models for Bookkeeper

These models define the in-memory shape of the ledger:
accounts, categories, the four item lists, and the snapshot that
holds them together.

DESIGN DECISION: Money is always Decimal. Amounts on items are
non-negative; the sign of their effect on an account comes from the
item kind, never from the amount itself.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


TEMP_ID_PREFIX = "tmp-"


def new_temp_id() -> str:
    """Client-side id used until the server assigns a real one."""
    return f"{TEMP_ID_PREFIX}{uuid4().hex}"


def is_temp_id(item_id: Optional[str]) -> bool:
    return bool(item_id) and item_id.startswith(TEMP_ID_PREFIX)


def normalize_account_name(name: str) -> str:
    """
    Derive the ledger key for an account name.

    Lowercased with all whitespace removed: "Credit Card" -> "creditcard".
    """
    return "".join(name.lower().split())


# =============================================================================
# ENUMS
# =============================================================================

class AccountType(str, Enum):
    """Kinds of money pools."""
    CASH = "cash"
    BANK = "bank"
    CREDIT = "credit"


class CategoryKind(str, Enum):
    """Which transaction list a category applies to."""
    INCOME = "income"
    EXPENSE = "expense"


class TransactionKind(str, Enum):
    """
    The four item categories stored in the remote Transactions collection.

    COLLECT and PAY are obligations (not yet posted).
    INCOME and EXPENSE are posted movements of money.
    """
    COLLECT = "collect"
    PAY = "pay"
    INCOME = "income"
    EXPENSE = "expense"

    @property
    def is_obligation(self) -> bool:
        return self in (TransactionKind.COLLECT, TransactionKind.PAY)


class SnapshotSource(str, Enum):
    """Where the current snapshot came from."""
    REMOTE = "remote"      # Loaded from the remote ledger service
    SEED = "seed"          # Built-in offline seed
    LOCAL = "local"        # Optimistic local state or restored rollback target


# =============================================================================
# ACCOUNTS & CATEGORIES
# =============================================================================

class Account(BaseModel):
    """
    A named money pool.

    Balances may go negative for every account type; nothing here
    enforces a floor.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(
        default_factory=new_temp_id,
        description="Server-assigned id (temporary until confirmed)"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name, also the source of the ledger key"
    )
    type: AccountType = Field(
        default=AccountType.BANK,
        description="Account type"
    )
    balance: Decimal = Field(
        default=Decimal("0"),
        description="Current signed balance"
    )

    @property
    def key(self) -> str:
        return normalize_account_name(self.name)

    @property
    def is_overdrawn(self) -> bool:
        return self.balance < 0


class Category(BaseModel):
    """Label for income/expense items."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=new_temp_id)
    name: str = Field(..., min_length=1, max_length=100)
    kind: CategoryKind
    color: str = Field(
        default="#6b7280",
        max_length=32,
        description="Display color (hex or CSS name)"
    )


# =============================================================================
# ITEMS
# =============================================================================

class LedgerItem(BaseModel):
    """Fields shared by all four item kinds."""
    model_config = ConfigDict(str_strip_whitespace=True)

    kind: ClassVar[TransactionKind]

    id: str = Field(default_factory=new_temp_id)
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Who/what the item is for (stored remotely as the note)"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Non-negative amount"
    )
    account_id: Optional[str] = Field(
        default=None,
        description="Account the item's effect is posted against"
    )
    occurred_on: date = Field(default_factory=date.today)


class ObligationItem(LedgerItem):
    """Money expected to arrive or leave that has not hit an account yet."""

    completed: bool = Field(
        default=False,
        description="Terminal flag: excluded from pending totals once set"
    )


class CollectItem(ObligationItem):
    """Money owed to the user."""
    kind: ClassVar[TransactionKind] = TransactionKind.COLLECT


class PayItem(ObligationItem):
    """Money the user owes."""
    kind: ClassVar[TransactionKind] = TransactionKind.PAY


class TransactionItem(LedgerItem):
    """A posted, categorized movement of money."""

    category_id: Optional[str] = Field(
        default=None,
        description="Category reference; None once the category is deleted"
    )


class IncomeItem(TransactionItem):
    kind: ClassVar[TransactionKind] = TransactionKind.INCOME


class ExpenseItem(TransactionItem):
    kind: ClassVar[TransactionKind] = TransactionKind.EXPENSE


ITEM_TYPES: dict[TransactionKind, type[LedgerItem]] = {
    TransactionKind.COLLECT: CollectItem,
    TransactionKind.PAY: PayItem,
    TransactionKind.INCOME: IncomeItem,
    TransactionKind.EXPENSE: ExpenseItem,
}


# =============================================================================
# SNAPSHOT
# =============================================================================

class LedgerSnapshot(BaseModel):
    """
    The complete in-memory copy of the ledger at a point in time.

    CRITICAL: Snapshots are never mutated in place once published.
    Changes are made on a deep copy which then replaces the old one.
    """

    accounts: dict[str, Account] = Field(
        default_factory=dict,
        description="Ledger key (normalized name) -> account"
    )
    account_index: dict[str, str] = Field(
        default_factory=dict,
        description="Account id -> ledger key"
    )
    categories: list[Category] = Field(default_factory=list)
    collect: list[CollectItem] = Field(default_factory=list)
    pay: list[PayItem] = Field(default_factory=list)
    income: list[IncomeItem] = Field(default_factory=list)
    expense: list[ExpenseItem] = Field(default_factory=list)

    source: SnapshotSource = SnapshotSource.LOCAL
    loaded_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def items(self, kind: TransactionKind) -> list:
        """The item list for a transaction kind."""
        return getattr(self, kind.value)

    def find_item(self, kind: TransactionKind, item_id: str) -> Optional[LedgerItem]:
        for item in self.items(kind):
            if item.id == item_id:
                return item
        return None

    def find_account(self, account_id: Optional[str]) -> Optional[Account]:
        if not account_id:
            return None
        key = self.account_index.get(account_id)
        if key is None:
            return None
        return self.accounts.get(key)

    def find_category(self, category_id: Optional[str]) -> Optional[Category]:
        for category in self.categories:
            if category.id == category_id:
                return category
        return None

    def fork(self) -> "LedgerSnapshot":
        """Deep copy for a copy-on-write mutation."""
        return self.model_copy(deep=True, update={"source": SnapshotSource.LOCAL})


# =============================================================================
# RECONCILIATION VALUES
# =============================================================================

class Posting(BaseModel):
    """The effect-relevant part of an item: which account, how much."""
    model_config = ConfigDict(frozen=True)

    account_id: Optional[str] = None
    amount: Decimal = Field(default=Decimal("0"), ge=0)


class Adjustment(BaseModel):
    """A single signed change to one account's balance."""
    model_config = ConfigDict(frozen=True)

    account_id: str
    delta: Decimal


# =============================================================================
# AGGREGATES
# =============================================================================

class LedgerTotals(BaseModel):
    """
    Totals and analytics derived from a snapshot.

    Ratios are percentages and are 0 when there is no income.
    """

    collect: Decimal = Decimal("0")
    pay: Decimal = Decimal("0")
    accounts: Decimal = Decimal("0")
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")

    profit: Decimal = Decimal("0")
    loss: Decimal = Decimal("0")
    expense_ratio: Decimal = Decimal("0")
    profit_margin: Decimal = Decimal("0")
    net_cash_after_obligations: Decimal = Decimal("0")


class AccountActivity(BaseModel):
    """Posted income/expense attributed to one account."""

    account_id: str
    account_name: str
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")

    @property
    def net(self) -> Decimal:
        return self.income - self.expense


class CategoryTotal(BaseModel):
    """Sum of one category's items; category_id None collects detached items."""

    category_id: Optional[str]
    category_name: str
    color: Optional[str] = None
    total: Decimal = Decimal("0")
    item_count: int = 0
