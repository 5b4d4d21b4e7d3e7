"""Notifications package."""

from bookkeeper.notifications.center import NotificationCenter, NotificationSink

__all__ = ["NotificationCenter", "NotificationSink"]
