"""In-memory WhatsApp outbox for development and tests.

Nothing leaves the process: each message is kept as an :class:`OutboxMessage`
together with the ``wa.me`` deep link an operator would open to send it.
"""

from dataclasses import dataclass
from itertools import count

from ordering.notification.port import NotificationPort
from shared.whatsapp import build_deep_link, digits_only


@dataclass(frozen=True)
class OutboxMessage:
    message_id: str
    to: str
    body: str
    link: str


class OutboxNotificationAdapter(NotificationPort):
    def __init__(self):
        self.outbox: list[OutboxMessage] = []
        self._sequence = count(1)
        self._outage: str | None = None

    def fail_with(self, reason: str = "WhatsApp unreachable"):
        """Make every following ``send`` fail with ``reason`` until ``recover``."""
        self._outage = reason

    def recover(self):
        self._outage = None

    def send(self, to: str, body: str) -> dict:
        if self._outage:
            return {"message_id": None, "status": "failed", "error": self._outage}
        if not digits_only(to):
            return {"message_id": None, "status": "failed", "error": f"Cannot message {to!r}"}

        message = OutboxMessage(
            message_id=f"wa-{next(self._sequence):06d}",
            to=to,
            body=body,
            link=build_deep_link(to, body),
        )
        self.outbox.append(message)
        return {"message_id": message.message_id, "status": "sent"}

    def messages_to(self, phone: str) -> list[OutboxMessage]:
        wanted = digits_only(phone)
        return [message for message in self.outbox if digits_only(message.to) == wanted]
