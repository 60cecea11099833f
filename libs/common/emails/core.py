"""
Core email sending utilities over SMTP.
"""

import asyncio
import smtplib
from email.message import EmailMessage
from typing import Optional

from libs.common.config import Settings, get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)


def build_message(
    sender: str,
    to_email: str,
    subject: str,
    body: str,
    html_body: Optional[str] = None,
) -> EmailMessage:
    """Plain text message, with an HTML alternative when one is given."""
    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = sender
    msg["To"] = to_email
    msg.set_content(body)
    if html_body:
        msg.add_alternative(html_body, subtype="html")
    return msg


def _deliver(settings: Settings, msg: EmailMessage) -> None:
    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30) as server:
        server.starttls()
        server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
        server.send_message(msg)


async def send_email(
    to_email: str,
    subject: str,
    body: str,
    html_body: Optional[str] = None,
    from_email: Optional[str] = None,
    from_name: Optional[str] = None,
) -> bool:
    """
    Send an email through the configured SMTP relay.

    The SMTP conversation is blocking, so it runs in a worker thread.

    Args:
        to_email: Recipient email address
        subject: Email subject line
        body: Plain text body
        html_body: Optional HTML alternative
        from_email: Sender email (defaults to DEFAULT_FROM_EMAIL)
        from_name: Sender name (defaults to DEFAULT_FROM_NAME)

    Returns:
        True if the relay accepted the message, False otherwise
    """
    settings = get_settings()

    if not settings.SMTP_PASSWORD or not settings.SMTP_USERNAME:
        logger.warning("SMTP credentials not configured - email not sent")
        logger.info("Would have sent email to %s: %s", to_email, subject)
        return False

    sender = (
        f"{from_name or settings.DEFAULT_FROM_NAME} "
        f"<{from_email or settings.DEFAULT_FROM_EMAIL}>"
    )
    msg = build_message(sender, to_email, subject, body, html_body)

    try:
        await asyncio.to_thread(_deliver, settings, msg)
    except smtplib.SMTPAuthenticationError as e:
        logger.error("SMTP authentication failed: %s", e)
        return False
    except (smtplib.SMTPException, OSError) as e:
        logger.error("SMTP error sending email to %s: %s", to_email, e)
        return False

    logger.info("Email sent to %s: %s", to_email, subject)
    return True
