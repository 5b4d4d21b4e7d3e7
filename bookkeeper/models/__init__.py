"""
Data Models Package

This package contains all Pydantic models used in Bookkeeper:
the in-memory ledger, the remote wire records, and notifications.
"""

from bookkeeper.models.ledger import (
    ITEM_TYPES,
    Account,
    AccountActivity,
    AccountType,
    Adjustment,
    Category,
    CategoryKind,
    CategoryTotal,
    CollectItem,
    ExpenseItem,
    IncomeItem,
    LedgerItem,
    LedgerSnapshot,
    LedgerTotals,
    ObligationItem,
    PayItem,
    Posting,
    SnapshotSource,
    TransactionItem,
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
from bookkeeper.models.remote import (
    AccountRecord,
    CategoryRecord,
    TransactionRecord,
)

__all__ = [
    # Ledger models
    "ITEM_TYPES",
    "Account",
    "AccountActivity",
    "AccountType",
    "Adjustment",
    "Category",
    "CategoryKind",
    "CategoryTotal",
    "CollectItem",
    "ExpenseItem",
    "IncomeItem",
    "LedgerItem",
    "LedgerSnapshot",
    "LedgerTotals",
    "ObligationItem",
    "PayItem",
    "Posting",
    "SnapshotSource",
    "TransactionItem",
    "TransactionKind",
    "is_temp_id",
    "new_temp_id",
    "normalize_account_name",
    # Notification models
    "Notification",
    "NotificationBuilder",
    "NotificationSeverity",
    "NotificationType",
    # Wire models
    "AccountRecord",
    "CategoryRecord",
    "TransactionRecord",
]
