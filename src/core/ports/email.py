"""
Email port.

Account emails (verification, password reset) go through this interface.
The shipped adapter logs instead of sending; a real provider only needs
to implement ``send_email``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Protocol


class EmailStatus(Enum):
    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"  # Dev adapter


@dataclass
class EmailResult:
    """Result of an email send attempt."""

    status: EmailStatus
    message_id: str | None = None
    error: str | None = None
    sent_at: datetime | None = None
    recipient: str = ""

    @classmethod
    def success(cls, recipient: str, message_id: str | None = None) -> EmailResult:
        return cls(
            status=EmailStatus.SENT,
            message_id=message_id,
            recipient=recipient,
            sent_at=datetime.now(UTC),
        )

    @classmethod
    def failed(cls, recipient: str, error: str) -> EmailResult:
        return cls(status=EmailStatus.FAILED, recipient=recipient, error=error)


class EmailPort(Protocol):
    def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str | None = None,
    ) -> EmailResult:
        """
        Send a transactional email.

        Must not raise; delivery problems are reported as a FAILED result.
        """
        ...


def verification_email(name: str, link: str) -> tuple[str, str, str]:
    """Subject, HTML body and text body for the email verification message."""
    subject = "Verify your email address"
    html = (
        f"<p>Hello {name or 'there'},</p>"
        f'<p>Please confirm your email address by following <a href="{link}">this link</a>.</p>'
    )
    text = f"Hello {name or 'there'},\n\nConfirm your email address: {link}\n"
    return subject, html, text


def password_reset_email(name: str, link: str, ttl_minutes: int) -> tuple[str, str, str]:
    subject = "Reset your password"
    html = (
        f"<p>Hello {name or 'there'},</p>"
        f'<p>You can <a href="{link}">reset your password here</a>. '
        f"The link expires in {ttl_minutes} minutes.</p>"
    )
    text = (
        f"Hello {name or 'there'},\n\nReset your password: {link}\n"
        f"The link expires in {ttl_minutes} minutes.\n"
    )
    return subject, html, text
