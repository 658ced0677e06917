from abc import ABC, abstractmethod


class EmailDeliveryError(Exception):
    """Raised by senders when the transport rejects a message"""


class IEmailSender(ABC):
    """Outbound email transport - application layer"""

    @abstractmethod
    async def send(self, to: str, subject: str, html: str) -> None:
        pass
