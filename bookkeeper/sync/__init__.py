"""Snapshot loading package."""

from bookkeeper.sync.loader import (
    SnapshotLoader,
    SnapshotUnavailableError,
    build_snapshot,
)
from bookkeeper.sync.seed import seed_snapshot

__all__ = [
    "SnapshotLoader",
    "SnapshotUnavailableError",
    "build_snapshot",
    "seed_snapshot",
]
