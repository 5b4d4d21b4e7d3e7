"""
Transfer Reconciler

When an existing item's amount and/or account changes, move its effect
without replaying history:

1. Same account on both sides: one adjustment of sign * (new - old).
2. Different accounts: reverse the old effect on the old account and
   apply the full new effect on the new account.
3. Only one side has an account: apply just that side.

The result always equals "delete the old item, create the new one".
"""

from decimal import Decimal
from typing import Optional

from bookkeeper.ledger.account_ledger import AccountLedger
from bookkeeper.ledger.effects import effect_of, effect_sign, reversal_of
from bookkeeper.models.ledger import Adjustment, Posting, TransactionKind


def _has_account(posting: Optional[Posting]) -> bool:
    return posting is not None and bool(posting.account_id)


def plan_transfer(
    kind: TransactionKind,
    old: Optional[Posting],
    new: Optional[Posting],
) -> list[Adjustment]:
    """
    Compute the minimal adjustments that move an item's effect from
    `old` to `new`. Pure: nothing is applied.
    """
    if _has_account(old) and _has_account(new) and old.account_id == new.account_id:
        delta = Decimal(effect_sign(kind)) * (new.amount - old.amount)
        if delta == 0:
            return []
        return [Adjustment(account_id=new.account_id, delta=delta)]

    adjustments = []
    if _has_account(old):
        adjustments.extend(reversal_of(kind, old))
    if _has_account(new):
        adjustments.extend(effect_of(kind, new))
    return adjustments


def reconcile_transfer(
    ledger: AccountLedger,
    kind: TransactionKind,
    old: Optional[Posting],
    new: Optional[Posting],
) -> list[Adjustment]:
    """
    Apply the transfer to the ledger.

    Returns the adjustments that landed on a known account. These are
    exactly the deltas the remote store must receive for this change.
    """
    adjustments = plan_transfer(kind, old, new)
    touched = ledger.apply(adjustments)
    return [adj for adj in adjustments if adj.account_id in touched]
