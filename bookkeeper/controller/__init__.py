"""Optimistic update controller package."""

from bookkeeper.controller.optimistic import OperationFailedError, OptimisticUpdateController

__all__ = ["OperationFailedError", "OptimisticUpdateController"]
