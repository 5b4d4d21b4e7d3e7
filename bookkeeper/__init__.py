"""
Bookkeeper - Source Package

The ledger reconciliation core of a personal bookkeeping dashboard.
Keeps named account balances consistent with CRUD operations on
collect, pay, income and expense items while the source of truth
lives in a remote store.

DESIGN PRINCIPLES:
1. Local change first → remote confirmation → resync from the server
2. Money is never silently created or destroyed
3. Stale references are no-ops, never crashes
4. Every failure ends in a consistent snapshot
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Bookkeeper Team"
