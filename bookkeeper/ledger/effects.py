"""
Posting Rules

How each item kind moves its account's balance:

    income   +amount
    expense  -amount
    collect  -amount   (earmarked as already spent until collected)
    pay      +amount   (held back for the upcoming payment)

A completed collect/pay item has no active effect: completion reverses
the earmark and posts a separate income/expense instead.
"""

from decimal import Decimal
from typing import Optional

from bookkeeper.models.ledger import (
    Adjustment,
    LedgerItem,
    ObligationItem,
    Posting,
    TransactionKind,
)


EFFECT_SIGNS: dict[TransactionKind, int] = {
    TransactionKind.INCOME: 1,
    TransactionKind.EXPENSE: -1,
    TransactionKind.COLLECT: -1,
    TransactionKind.PAY: 1,
}


def effect_sign(kind: TransactionKind) -> int:
    return EFFECT_SIGNS[kind]


def posting_of(item: Optional[LedgerItem]) -> Optional[Posting]:
    """
    The balance-relevant part of an item, or None if it has no active effect.
    """
    if item is None or not item.account_id:
        return None
    if isinstance(item, ObligationItem) and item.completed:
        return None
    return Posting(account_id=item.account_id, amount=item.amount)


def effect_of(kind: TransactionKind, posting: Optional[Posting]) -> list[Adjustment]:
    """Adjustments that creating an item with this posting applies."""
    if posting is None or not posting.account_id or posting.amount == 0:
        return []
    delta = Decimal(effect_sign(kind)) * posting.amount
    return [Adjustment(account_id=posting.account_id, delta=delta)]


def reversal_of(kind: TransactionKind, posting: Optional[Posting]) -> list[Adjustment]:
    """Adjustments that deleting an item with this posting applies."""
    return [
        Adjustment(account_id=adj.account_id, delta=-adj.delta)
        for adj in effect_of(kind, posting)
    ]
