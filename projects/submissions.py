# projects/submissions.py
"""
Submission gate.

A project can only enter a demoday while that demoday is active and its
submission phase (phase 1) is open. Checks run in a fixed order so the
caller always gets the most fundamental reason first:

    NotFound -> PhaseClosed(event_not_active) -> PhaseClosed(submission_phase_missing)
    -> PhaseClosed(submission_window_closed) -> ValidationError

The Project and its ProjectSubmission are written in one transaction; the
confirmation email is queued after commit.
"""
from datetime import datetime
from typing import Optional
import logging

from django.db import transaction
from django.db.models import Q

from core.exceptions import NotFound, PhaseClosed, ValidationError
from core.policies import authorize, require
from demoday.models import Demoday, DemodayPhase
from demoday.phases import get_demoday, now as local_now, window_contains

from .emails import notify_status_changed, notify_submission_received
from .models import Project, ProjectSubmission
from .serializers import SubmissionInputSerializer

logger = logging.getLogger("demoday.projects")

# Review statuses that may only be set while a given phase is open
REVIEW_PHASES = {
    ProjectSubmission.STATUS_APPROVED: DemodayPhase.APPROVAL,
    ProjectSubmission.STATUS_REJECTED: DemodayPhase.APPROVAL,
    ProjectSubmission.STATUS_FINALIST: DemodayPhase.POPULAR_VOTING,
    ProjectSubmission.STATUS_WINNER: DemodayPhase.FINAL_VOTING,
}


def submit_project(demoday_id, author, data: dict, now: Optional[datetime] = None) -> ProjectSubmission:
    require(author, "submission.create")
    now = now or local_now()

    demoday = get_demoday(demoday_id)

    if not demoday.active or demoday.status != Demoday.STATUS_ACTIVE:
        logger.warning("Submission rejected: demoday=%s not active, author=%s", demoday.id, author.id)
        raise PhaseClosed("Este Demoday não está ativo no momento.", code="event_not_active")

    phase = demoday.phases.filter(phase_number=DemodayPhase.SUBMISSION).first()
    if phase is None:
        logger.warning("Submission rejected: demoday=%s has no submission phase", demoday.id)
        raise PhaseClosed(
            "Fase de submissão não configurada para este Demoday.",
            code="submission_phase_missing",
        )

    if not window_contains(phase, now):
        logger.warning("Submission rejected: demoday=%s window closed at %s", demoday.id, now)
        raise PhaseClosed(
            "O período de submissão não está aberto no momento.",
            code="submission_window_closed",
        )

    serializer = SubmissionInputSerializer(data=data, context={"demoday": demoday})
    if not serializer.is_valid():
        raise ValidationError("Dados inválidos.", fields=serializer.errors)
    validated = serializer.validated_data

    with transaction.atomic():
        project = Project.objects.create(
            author=author,
            title=validated["title"],
            description=validated["description"],
            type=validated["type"],
            category_id=validated["category_id"],
            authors=validated["authors"],
            development_year=validated["development_year"],
            video_url=validated["video_url"],
            repository_url=validated["repository_url"],
            contact_email=validated["contact_email"],
            contact_phone=validated["contact_phone"],
            advisor=validated["advisor"],
            work_category=validated["work_category"],
        )
        submission = ProjectSubmission.objects.create(
            project=project,
            demoday=demoday,
            status=ProjectSubmission.STATUS_SUBMITTED,
        )
        notify_submission_received(submission)

    logger.info(
        "Submission created: submission=%s project=%s demoday=%s author=%s",
        submission.id, project.id, demoday.id, author.id,
    )
    return submission


def list_submissions(demoday: Demoday, viewer, status: Optional[str] = None):
    """
    Submissions of ``demoday`` visible to ``viewer``.

    Admins and professors see everything; everyone else sees public
    statuses plus their own submissions.
    """
    qs = (
        ProjectSubmission.objects
        .filter(demoday=demoday)
        .select_related("project", "project__author", "project__category", "demoday")
    )
    if not authorize(viewer, "submission.view_all"):
        visible = Q(status__in=ProjectSubmission.PUBLIC_STATUSES)
        if getattr(viewer, "is_authenticated", False):
            visible |= Q(project__author=viewer)
        qs = qs.filter(visible)
    if status:
        qs = qs.filter(status=status)
    return qs.order_by("created_at", "id")


def list_user_submissions(user, demoday: Optional[Demoday] = None):
    qs = (
        ProjectSubmission.objects
        .filter(project__author=user)
        .select_related("project", "project__category", "demoday")
    )
    if demoday is not None:
        qs = qs.filter(demoday=demoday)
    return qs.order_by("-created_at")


def get_submission(submission_id) -> ProjectSubmission:
    try:
        return ProjectSubmission.objects.select_related("project", "demoday").get(pk=submission_id)
    except (ProjectSubmission.DoesNotExist, ValueError, TypeError):
        raise NotFound("Submissão não encontrada.", code="submission_not_found")


def update_submission_status(actor, submission: ProjectSubmission, status: str,
                             now: Optional[datetime] = None) -> ProjectSubmission:
    """
    Admin review of a submission.

    Approval/rejection, finalist and winner decisions are only accepted
    while their phase (2, 3 and 4) is open, when the demoday defines it.
    """
    require(actor, "submission.review")
    now = now or local_now()

    if status not in dict(ProjectSubmission.STATUS_CHOICES):
        raise ValidationError(
            f"Status inválido: {status}",
            fields={"status": ["Status inválido."]},
        )

    if status == submission.status:
        return submission

    phase_number = REVIEW_PHASES.get(status)
    if phase_number is not None:
        phase = submission.demoday.phases.filter(phase_number=phase_number).first()
        if phase is not None and not window_contains(phase, now):
            logger.warning(
                "Status change rejected outside phase %s: submission=%s to=%s",
                phase_number, submission.id, status,
            )
            raise PhaseClosed(
                f"Este status só pode ser definido durante a fase {phase_number} ({phase.name}).",
                code="review_window_closed",
            )

    old_status = submission.status
    with transaction.atomic():
        submission.status = status
        submission.save(update_fields=["status", "updated_at"])
        notify_status_changed(submission)

    logger.info(
        "Submission status changed: submission=%s from=%s to=%s actor=%s",
        submission.id, old_status, status, actor.id,
    )
    return submission
