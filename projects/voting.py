# projects/voting.py
"""
Voting gate.

Phase 3 is the popular vote (every approved or finalist project), phase 4
the final vote (finalists only). A user votes at most once per project per
phase; the database constraint on (user, project, vote_phase) is the last
word when two requests race.
"""
from datetime import datetime
from typing import Optional
import logging

from django.conf import settings
from django.db import IntegrityError, transaction

from core.exceptions import Conflict, NotFound, PhaseClosed, ValidationError
from core.policies import effective_role, require
from demoday.models import DemodayPhase
from demoday.phases import current_phase, get_demoday, is_in_phase, now as local_now

from .models import Project, ProjectSubmission, Vote

logger = logging.getLogger("demoday.votes")

PHASE_BY_NUMBER = {
    DemodayPhase.POPULAR_VOTING: Vote.PHASE_POPULAR,
    DemodayPhase.FINAL_VOTING: Vote.PHASE_FINAL,
}
NUMBER_BY_PHASE = {v: k for k, v in PHASE_BY_NUMBER.items()}


def vote_weight(user, vote_phase: str) -> int:
    """Popular votes weigh 1; professors and admins weigh more in the final."""
    if vote_phase == Vote.PHASE_FINAL and user.is_privileged_voter:
        return settings.DEMODAY["PRIVILEGED_FINAL_VOTE_WEIGHT"]
    return 1


def _get_project(project_id) -> Project:
    try:
        return Project.objects.get(pk=project_id)
    except (Project.DoesNotExist, ValueError, TypeError):
        raise NotFound("Projeto não encontrado.", code="project_not_found")


def resolve_voting_phase(demoday, now: datetime) -> Optional[str]:
    """Vote phase open for ``demoday`` at ``now`` (None outside phases 3/4)."""
    if not demoday.active:
        return None
    phase = current_phase(demoday.phases.all(), now)
    if phase is None:
        return None
    return PHASE_BY_NUMBER.get(phase.phase_number)


def cast_vote(user, project_id, demoday_id, requested_phase: Optional[str] = None,
              rating: Optional[int] = None, now: Optional[datetime] = None) -> Vote:
    require(user, "vote.cast")
    now = now or local_now()

    project = _get_project(project_id)
    demoday = get_demoday(demoday_id)
    submission = ProjectSubmission.objects.filter(project=project, demoday=demoday).first()
    if submission is None:
        raise NotFound("Projeto não foi submetido a este Demoday.", code="submission_not_found")

    if submission.status not in ProjectSubmission.VOTABLE_STATUSES:
        raise ValidationError(
            "Projeto não está disponível para votação.",
            code="submission_not_votable",
        )

    vote_phase = resolve_voting_phase(demoday, now)
    if vote_phase is None:
        logger.warning("Vote rejected outside voting window: user=%s project=%s", user.id, project.id)
        raise PhaseClosed("Fora do período de votação.", code="not_voting_window")

    if requested_phase and requested_phase != vote_phase:
        logger.warning(
            "Vote rejected: requested phase %s but %s is open (user=%s project=%s)",
            requested_phase, vote_phase, user.id, project.id,
        )
        raise PhaseClosed(
            "A fase de votação solicitada não está aberta.",
            code="not_voting_window",
        )

    if vote_phase == Vote.PHASE_FINAL and submission.status != ProjectSubmission.STATUS_FINALIST:
        raise PhaseClosed(
            "Apenas projetos finalistas podem receber votos nesta fase.",
            code="not_finalist",
        )

    if rating is not None and not 1 <= rating <= 5:
        raise ValidationError(
            "A nota deve estar entre 1 e 5.",
            fields={"rating": ["A nota deve estar entre 1 e 5."]},
        )

    if Vote.objects.filter(user=user, project=project, vote_phase=vote_phase).exists():
        raise Conflict("Você já votou neste projeto.", code="already_voted")

    try:
        with transaction.atomic():
            vote = Vote.objects.create(
                user=user,
                project=project,
                demoday=demoday,
                voter_role=effective_role(user),
                vote_phase=vote_phase,
                weight=vote_weight(user, vote_phase),
                rating=rating,
            )
    except IntegrityError:
        raise Conflict("Você já votou neste projeto.", code="already_voted")

    logger.info(
        "Vote cast: vote=%s user=%s project=%s demoday=%s phase=%s weight=%s",
        vote.id, user.id, project.id, demoday.id, vote_phase, vote.weight,
    )
    return vote


def has_voted(user, project_id, vote_phase: Optional[str] = None) -> bool:
    qs = Vote.objects.filter(user=user, project_id=project_id)
    if vote_phase:
        qs = qs.filter(vote_phase=vote_phase)
    return qs.exists()


def withdraw_vote(user, project_id, vote_phase: Optional[str] = None,
                  now: Optional[datetime] = None) -> None:
    """
    Remove the user's vote on a project.

    Only allowed while the vote's phase is still open. Without an explicit
    phase, the most recent vote is withdrawn.
    """
    require(user, "vote.cast")
    now = now or local_now()

    qs = Vote.objects.filter(user=user, project_id=project_id).select_related("demoday")
    if vote_phase:
        qs = qs.filter(vote_phase=vote_phase)
    vote = qs.order_by("-created_at", "-id").first()
    if vote is None:
        raise NotFound("Voto não encontrado.", code="vote_not_found")

    if not vote.demoday.active or not is_in_phase(vote.demoday, NUMBER_BY_PHASE[vote.vote_phase], now):
        raise PhaseClosed(
            "Não é possível remover o voto fora do período de votação.",
            code="not_voting_window",
        )

    vote_id = vote.id
    vote.delete()
    logger.info("Vote withdrawn: vote=%s user=%s project=%s", vote_id, user.id, project_id)
