"""
Notification Center

The one place user-facing messages come from. Every notification is:
1. Written to the structured log
2. Kept in a short in-memory history
3. Pushed to any subscribed sinks (the UI's toast handler)

A failing sink never breaks the operation that raised the notification.
"""

from collections import deque
from typing import Callable, Optional

import structlog

from bookkeeper.models.notification import (
    Notification,
    NotificationBuilder,
    NotificationSeverity,
)


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


NotificationSink = Callable[[Notification], None]


class NotificationCenter:
    """
    Central notification service.

    Logs locally, remembers the last `history_size` notifications and
    fans them out to subscribers.
    """

    def __init__(
        self,
        history_size: int = 50,
        sinks: Optional[list[NotificationSink]] = None,
    ):
        self._history: deque[Notification] = deque(maxlen=history_size)
        self._sinks: list[NotificationSink] = list(sinks or [])
        self._logger = structlog.get_logger("bookkeeper.notifications")

    @property
    def recent(self) -> list[Notification]:
        """Notifications in the order they were raised."""
        return list(self._history)

    @property
    def last(self) -> Optional[Notification]:
        return self._history[-1] if self._history else None

    def clear(self) -> None:
        self._history.clear()

    def subscribe(self, sink: NotificationSink) -> Callable[[], None]:
        """
        Register a sink. Returns a function that unsubscribes it.
        """
        self._sinks.append(sink)

        def unsubscribe() -> None:
            if sink in self._sinks:
                self._sinks.remove(sink)

        return unsubscribe

    def notify(self, notification: Notification) -> Notification:
        """Log, remember and dispatch one notification."""
        log_dict = notification.to_log_dict()

        if notification.severity == NotificationSeverity.ERROR:
            self._logger.error("notification", **log_dict)
        elif notification.severity == NotificationSeverity.WARNING:
            self._logger.warning("notification", **log_dict)
        elif notification.severity == NotificationSeverity.DEBUG:
            self._logger.debug("notification", **log_dict)
        else:
            self._logger.info("notification", **log_dict)

        self._history.append(notification)

        for sink in list(self._sinks):
            try:
                sink(notification)
            except Exception as e:
                self._logger.error(
                    "notification_sink_failed",
                    error=str(e),
                    notification_id=str(notification.notification_id),
                )

        return notification

    def success(self, operation_key: str, message: str) -> Notification:
        return self.notify(NotificationBuilder.operation_succeeded(operation_key, message))

    def error(
        self,
        operation_key: str,
        message: str,
        error_message: Optional[str] = None,
    ) -> Notification:
        return self.notify(
            NotificationBuilder.operation_failed(operation_key, message, error_message)
        )
