"""Account ledger, posting rules and transfer reconciliation."""

from bookkeeper.ledger.account_ledger import AccountLedger
from bookkeeper.ledger.effects import (
    EFFECT_SIGNS,
    effect_of,
    effect_sign,
    posting_of,
    reversal_of,
)
from bookkeeper.ledger.reconciler import plan_transfer, reconcile_transfer

__all__ = [
    "AccountLedger",
    "EFFECT_SIGNS",
    "effect_of",
    "effect_sign",
    "plan_transfer",
    "posting_of",
    "reconcile_transfer",
    "reversal_of",
]
