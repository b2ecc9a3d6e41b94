# core/tasks.py

from celery import shared_task

from .emails import send_email


@shared_task(ignore_result=True)
def send_email_task(to: str, subject: str, html: str):
    """
    Async wrapper for sending one notification email.
    No retries: send_email logs and swallows delivery failures.
    """
    return send_email(to, subject, html)
