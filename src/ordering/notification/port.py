"""Notification port: abstract interface for customer status messages."""

from abc import ABC, abstractmethod


class NotificationPort(ABC):
    """Abstract interface for notification dispatch adapters."""

    @abstractmethod
    def send(self, to: str, body: str) -> dict:
        """Send a message to the customer's phone.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"), error (optional)
        """
        ...
