# core/emails.py
"""
Outbound email.

Messages are fire-and-forget: ``queue_email`` hands the message to a Celery
task once the surrounding transaction commits, and delivery failures are
logged, never retried, and never reach the caller.
"""
import logging
import smtplib

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.db import transaction
from django.utils.html import strip_tags

logger = logging.getLogger("demoday.emails")


def send_email(to: str, subject: str, html: str) -> bool:
    """
    Send one HTML message (with a plain-text alternative).
    Returns False instead of raising when delivery fails.
    """
    if not to:
        return False

    message = EmailMultiAlternatives(
        subject=subject,
        body=strip_tags(html),
        from_email=getattr(settings, "DEFAULT_FROM_EMAIL", None),
        to=[to],
    )
    message.attach_alternative(html, "text/html")

    try:
        message.send()
    except (smtplib.SMTPException, OSError):
        logger.exception("Failed to send email to=%s subject=%r", to, subject)
        return False

    logger.info("Email sent to=%s subject=%r", to, subject)
    return True


def _dispatch(to: str, subject: str, html: str) -> None:
    from .tasks import send_email_task

    try:
        send_email_task.delay(to, subject, html)
    except Exception:
        # Broker/transport errors surface here; the triggering write is already committed
        logger.exception("Failed to dispatch email to=%s subject=%r", to, subject)


def queue_email(to: str, subject: str, html: str) -> None:
    """
    Schedule ``send_email`` to run after the current transaction commits.
    Dispatch failures are logged and never reach the caller.
    """
    if not to:
        return

    transaction.on_commit(lambda: _dispatch(to, subject, html))


def frontend_url(path: str = "") -> str:
    base = settings.DEMODAY.get("FRONTEND_URL", "").rstrip("/")
    return f"{base}/{path.lstrip('/')}" if path else base
