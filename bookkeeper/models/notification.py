"""
Notification Models for Bookkeeper

Every optimistic operation ends in exactly one user-facing
notification: a success toast or an error toast. Snapshot loading
emits warnings when it has to fall back.

These are transient messages, not a history of changes.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class NotificationType(str, Enum):
    """What a notification reports."""
    OPERATION_SUCCEEDED = "operation_succeeded"
    OPERATION_FAILED = "operation_failed"
    OPERATION_TIMED_OUT = "operation_timed_out"
    SNAPSHOT_LOADED = "snapshot_loaded"
    SNAPSHOT_FALLBACK = "snapshot_fallback"
    ROLLBACK_RESTORED = "rollback_restored"


class NotificationSeverity(str, Enum):
    """Severity level for notifications."""
    DEBUG = "debug"
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Notification(BaseModel):
    """A single message for the UI, also written to the structured log."""

    notification_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the notification was raised (UTC)"
    )

    notification_type: NotificationType
    severity: NotificationSeverity = NotificationSeverity.INFO

    operation_key: Optional[str] = Field(
        default=None,
        description="Operation that produced this notification, if any"
    )
    title: str = Field(..., max_length=120)
    message: str = Field(
        ...,
        max_length=500,
        description="Human-readable text shown to the user"
    )
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.severity == NotificationSeverity.ERROR

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "notification_id": str(self.notification_id),
            "timestamp": self.timestamp.isoformat(),
            "notification_type": self.notification_type.value,
            "severity": self.severity.value,
            "operation_key": self.operation_key,
            "title": self.title,
            "message": self.message,
            "details": self.details,
            "error_message": self.error_message,
        }


class NotificationBuilder:
    """
    Helper class to build notifications with common patterns.

    Usage:
        note = NotificationBuilder.operation_succeeded("add-income", "Income added")
        note = NotificationBuilder.operation_failed("add-income", "Could not add income", exc)
    """

    @staticmethod
    def operation_succeeded(
        operation_key: str,
        message: str,
    ) -> Notification:
        return Notification(
            notification_type=NotificationType.OPERATION_SUCCEEDED,
            severity=NotificationSeverity.SUCCESS,
            operation_key=operation_key,
            title="Success",
            message=message,
        )

    @staticmethod
    def operation_failed(
        operation_key: str,
        message: str,
        error_message: Optional[str] = None,
    ) -> Notification:
        return Notification(
            notification_type=NotificationType.OPERATION_FAILED,
            severity=NotificationSeverity.ERROR,
            operation_key=operation_key,
            title="Error",
            message=message,
            error_message=error_message,
        )

    @staticmethod
    def operation_timed_out(
        operation_key: str,
        message: str,
        timeout_seconds: float,
    ) -> Notification:
        return Notification(
            notification_type=NotificationType.OPERATION_TIMED_OUT,
            severity=NotificationSeverity.ERROR,
            operation_key=operation_key,
            title="Timed out",
            message=message,
            details={"timeout_seconds": timeout_seconds},
            error_message=f"No response after {timeout_seconds:g}s",
        )

    @staticmethod
    def snapshot_loaded(
        account_count: int,
        item_count: int,
    ) -> Notification:
        return Notification(
            notification_type=NotificationType.SNAPSHOT_LOADED,
            severity=NotificationSeverity.DEBUG,
            title="Synced",
            message=f"Loaded {account_count} accounts and {item_count} items",
            details={
                "account_count": account_count,
                "item_count": item_count,
            },
        )

    @staticmethod
    def snapshot_fallback(
        error_message: str,
    ) -> Notification:
        return Notification(
            notification_type=NotificationType.SNAPSHOT_FALLBACK,
            severity=NotificationSeverity.WARNING,
            title="Offline",
            message="Could not reach the ledger service; showing built-in data",
            error_message=error_message,
        )

    @staticmethod
    def rollback_restored(
        operation_key: str,
        error_message: str,
    ) -> Notification:
        return Notification(
            notification_type=NotificationType.ROLLBACK_RESTORED,
            severity=NotificationSeverity.WARNING,
            operation_key=operation_key,
            title="Changes reverted",
            message="Could not resync with the ledger service; restored the last known state",
            error_message=error_message,
        )
