# projects/emails.py
from django.utils.html import escape

from core.emails import frontend_url, queue_email

STATUS_LABELS = {
    "submitted": "submetido",
    "approved": "aprovado",
    "rejected": "não aprovado",
    "finalist": "finalista",
    "winner": "vencedor",
}


def notify_submission_received(submission):
    """Confirmation sent to the author once the submission is stored."""
    project = submission.project
    demoday = submission.demoday
    author = project.author

    subject = f"Submissão recebida: {project.title}"
    html = (
        f"<p>Olá {escape(author.display_name)},</p>"
        f"<p>Recebemos a submissão do projeto <strong>{escape(project.title)}</strong> "
        f"para o <strong>{escape(demoday.name)}</strong>.</p>"
        f"<p>Acompanhe o status em <a href=\"{frontend_url('dashboard')}\">sua área</a>.</p>"
    )
    queue_email(author.email, subject, html)


def notify_status_changed(submission):
    """Tell the author their submission moved to a new status."""
    project = submission.project
    author = project.author
    label = STATUS_LABELS.get(submission.status, submission.status)

    subject = f"Seu projeto foi {label}: {project.title}"
    html = (
        f"<p>Olá {escape(author.display_name)},</p>"
        f"<p>O projeto <strong>{escape(project.title)}</strong> no "
        f"<strong>{escape(submission.demoday.name)}</strong> agora está com status "
        f"<strong>{label}</strong>.</p>"
    )
    queue_email(author.email, subject, html)
