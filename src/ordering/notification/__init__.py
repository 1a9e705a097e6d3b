"""Notification adapter abstraction: how customers hear about status changes."""

import os

_notifier_instance = None


def get_notifier():
    """Return the configured notification adapter (singleton).

    Uses the in-memory OutboxNotificationAdapter by default. Configure via the
    NOTIFICATION_ADAPTER environment variable.
    """
    global _notifier_instance
    if _notifier_instance is None:
        adapter = os.environ.get("NOTIFICATION_ADAPTER", "outbox")
        if adapter == "outbox":
            from ordering.notification.outbox_adapter import OutboxNotificationAdapter

            _notifier_instance = OutboxNotificationAdapter()
        else:
            raise ValueError(f"Unknown notification adapter: {adapter}")
    return _notifier_instance


def reset_notifier():
    """Reset the notifier singleton (useful for testing)."""
    global _notifier_instance
    _notifier_instance = None
