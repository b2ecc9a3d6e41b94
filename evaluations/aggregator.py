# evaluations/aggregator.py
"""
Professor evaluations.

Each professor scores every evaluation criterion of the submission's
demoday on a 0..EVALUATION_MAX_SCORE scale. The stored ``total_score`` is
the approval percentage, rounded half up:

    total_score = round(sum(scores) / (criteria_count * max_score) * 100)

A professor has at most one evaluation per submission; evaluating again
replaces the previous scores in place.
"""
from datetime import datetime
from typing import List, Optional
import logging

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Avg, Count

from core.exceptions import Conflict, NotFound, ValidationError
from core.policies import require
from demoday.phases import get_active_demoday, now as local_now
from projects.models import ProjectSubmission
from projects.submissions import get_submission

from .models import EvaluationScore, ProfessorEvaluation

logger = logging.getLogger("demoday.evaluations")


def approval_percentage(total: int, criteria_count: int, max_score: Optional[int] = None) -> int:
    """Integer percentage of ``total`` over the maximum attainable, half up."""
    max_score = max_score or settings.DEMODAY["EVALUATION_MAX_SCORE"]
    attainable = criteria_count * max_score
    if attainable <= 0:
        return 0
    return (2 * total * 100 + attainable) // (2 * attainable)


def _validate_scores(scores: List[dict], criteria_by_id: dict, max_score: int) -> None:
    if not isinstance(scores, list) or not scores:
        raise ValidationError(
            "Informe as notas da avaliação.",
            fields={"scores": ["Lista de notas vazia."]},
        )

    for item in scores:
        if item.get("criterion_id") not in criteria_by_id:
            raise NotFound(
                "Critério de avaliação não encontrado para este Demoday.",
                code="criterion_not_found",
            )

    seen = [item["criterion_id"] for item in scores]
    if len(seen) != len(set(seen)):
        raise ValidationError(
            "Cada critério deve ser avaliado apenas uma vez.",
            fields={"scores": ["Critério repetido."]},
        )

    missing = set(criteria_by_id) - set(seen)
    if missing:
        raise ValidationError(
            "Todos os critérios devem ser avaliados.",
            fields={"scores": [f"Critérios sem nota: {sorted(missing)}"]},
        )

    for item in scores:
        score = item.get("score")
        if isinstance(score, bool) or not isinstance(score, int) or not 0 <= score <= max_score:
            raise ValidationError(
                f"As notas devem ser inteiros entre 0 e {max_score}.",
                fields={"scores": [f"Critério {item['criterion_id']}: nota inválida."]},
            )


def record_evaluation(submission_id, professor, scores: List[dict],
                      now: Optional[datetime] = None) -> ProfessorEvaluation:
    """
    Create or replace ``professor``'s evaluation of a submission.

    ``scores`` is a list of ``{"criterion_id", "score", "comment"?}``.
    """
    require(professor, "evaluation.record")
    now = now or local_now()

    submission = get_submission(submission_id)
    criteria_by_id = {c.id: c for c in submission.demoday.evaluation_criteria.all()}
    if not criteria_by_id:
        raise ValidationError(
            "Este Demoday não possui critérios de avaliação.",
            code="no_evaluation_criteria",
        )

    max_score = settings.DEMODAY["EVALUATION_MAX_SCORE"]
    _validate_scores(scores, criteria_by_id, max_score)

    total = sum(item["score"] for item in scores)
    percentage = approval_percentage(total, len(criteria_by_id), max_score)

    try:
        with transaction.atomic():
            evaluation, created = ProfessorEvaluation.objects.select_for_update().get_or_create(
                submission=submission,
                professor=professor,
            )
            evaluation.scores.all().delete()
            EvaluationScore.objects.bulk_create([
                EvaluationScore(
                    evaluation=evaluation,
                    criterion=criteria_by_id[item["criterion_id"]],
                    score=item["score"],
                    comment=item.get("comment") or "",
                )
                for item in scores
            ])
            evaluation.total_score = percentage
            evaluation.completed_at = now
            evaluation.save(update_fields=["total_score", "completed_at", "updated_at"])
    except IntegrityError:
        raise Conflict("Avaliação já registrada por outra requisição.", code="evaluation_conflict")

    logger.info(
        "Evaluation %s: evaluation=%s submission=%s professor=%s total=%s%%",
        "created" if created else "updated", evaluation.id, submission.id, professor.id, percentage,
    )
    return evaluation


def summarize_evaluations(submission: ProjectSubmission) -> dict:
    """Per-criterion averages plus the overall approval average."""
    evaluations = ProfessorEvaluation.objects.filter(submission=submission)
    overall = evaluations.aggregate(average=Avg("total_score"), count=Count("id"))

    per_criterion = (
        EvaluationScore.objects
        .filter(evaluation__submission=submission)
        .values("criterion_id", "criterion__name")
        .annotate(average=Avg("score"), count=Count("id"))
        .order_by("criterion_id")
    )

    return {
        "submission_id": submission.id,
        "evaluation_count": overall["count"],
        "average_score": round(overall["average"] or 0, 2),
        "criteria": [
            {
                "criterion_id": row["criterion_id"],
                "name": row["criterion__name"],
                "average": round(row["average"] or 0, 2),
                "count": row["count"],
            }
            for row in per_criterion
        ],
    }


def list_evaluation_queue(professor) -> dict:
    """Submissions of the active demoday, flagged with whether ``professor`` evaluated them."""
    require(professor, "evaluation.view")

    demoday = get_active_demoday()
    if demoday is None:
        raise NotFound("Nenhum Demoday ativo.", code="no_active_demoday")

    submissions = list(
        ProjectSubmission.objects
        .filter(demoday=demoday)
        .select_related("project", "project__category")
        .order_by("created_at", "id")
    )
    evaluated = dict(
        ProfessorEvaluation.objects
        .filter(professor=professor, submission__demoday=demoday)
        .values_list("submission_id", "total_score")
    )

    return {
        "demoday": demoday,
        "criteria": list(demoday.evaluation_criteria.all()),
        "submissions": [
            {
                "submission": submission,
                "evaluated": submission.id in evaluated,
                "total_score": evaluated.get(submission.id),
            }
            for submission in submissions
        ],
    }


def get_evaluation(evaluation_id) -> ProfessorEvaluation:
    try:
        return (
            ProfessorEvaluation.objects
            .select_related("submission", "submission__project", "professor")
            .prefetch_related("scores__criterion")
            .get(pk=evaluation_id)
        )
    except (ProfessorEvaluation.DoesNotExist, ValueError, TypeError):
        raise NotFound("Avaliação não encontrada.", code="evaluation_not_found")
