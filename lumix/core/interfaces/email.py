"""Abstract interface for outbound email."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass
class EmailAttachment:
    """A file attached to an email. Content is base64-encoded."""

    filename: str
    content: str


@dataclass
class EmailMessage:
    """A structured outbound message."""

    sender: str
    to: list[str]
    subject: str
    text: str
    html: str
    attachments: list[EmailAttachment] = field(default_factory=list)


@dataclass
class EmailReceipt:
    """Provider acknowledgement of an accepted message."""

    message_id: str | None
    status_code: int


class IEmailSender(ABC):
    """Interface for transactional email delivery."""

    @abstractmethod
    async def send(self, message: EmailMessage) -> EmailReceipt:
        """
        Submit a message for delivery. Not retried.

        Raises:
            DeliveryError: On a non-success response or transport failure.
        """
        pass
