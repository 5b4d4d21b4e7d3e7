"""
Built-in Seed Snapshot

Shown when the remote ledger service cannot be reached at startup,
so the dashboard never opens half-loaded.
"""

from decimal import Decimal

from bookkeeper.models.ledger import (
    Account,
    AccountType,
    CollectItem,
    LedgerSnapshot,
    PayItem,
    SnapshotSource,
)


SEED_ACCOUNTS = [
    ("seed-cash", "Cash", AccountType.CASH, "15740"),
    ("seed-kotak", "Kotak", AccountType.BANK, "94337.83"),
    ("seed-federal", "Federal", AccountType.BANK, "60791"),
    ("seed-credit-card", "Credit Card", AccountType.CREDIT, "24836.04"),
]

SEED_COLLECT = [
    ("CODO 129310", "10000"),
    ("Ashif", "3800"),
    ("Kunjani", "1500"),
    ("Kunjaka", "680"),
    ("Sathyabalan", "740"),
    ("Nabeel", "2930"),
    ("Ajmal P", "345"),
    ("Fahis", "500"),
    ("Kasargod", "5000"),
]

SEED_PAY = [
    ("Uppappa", "40000"),
    ("College", "10000"),
]


def seed_snapshot() -> LedgerSnapshot:
    """A fresh copy of the seed data. Obligations carry no account."""
    accounts = [
        Account(id=account_id, name=name, type=account_type, balance=Decimal(balance))
        for account_id, name, account_type, balance in SEED_ACCOUNTS
    ]
    return LedgerSnapshot(
        accounts={account.key: account for account in accounts},
        account_index={account.id: account.key for account in accounts},
        collect=[
            CollectItem(id=f"seed-collect-{n}", name=name, amount=Decimal(amount))
            for n, (name, amount) in enumerate(SEED_COLLECT, start=1)
        ],
        pay=[
            PayItem(id=f"seed-pay-{n}", name=name, amount=Decimal(amount))
            for n, (name, amount) in enumerate(SEED_PAY, start=1)
        ],
        source=SnapshotSource.SEED,
    )
