"""Outbound email infrastructure."""

from lumix.infrastructure.email.resend import ResendEmailSender

_sender: ResendEmailSender | None = None


def get_email_sender() -> ResendEmailSender:
    """Get singleton email sender instance."""
    global _sender
    if _sender is None:
        _sender = ResendEmailSender()
    return _sender


async def close_email_sender() -> None:
    """Close the shared email client, if one was created."""
    global _sender
    if _sender is not None:
        await _sender.aclose()
        _sender = None


__all__ = ["ResendEmailSender", "close_email_sender", "get_email_sender"]
