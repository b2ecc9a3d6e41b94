# demoday/scoring.py
"""
Ranking, finalist selection, results and export.

One formula everywhere:

    total_weighted_score = popular_votes
                           + final_votes * FINAL_VOTE_MULTIPLIER
                           + evaluation_average

Vote counts are unweighted; ``evaluation_average`` is the mean approval
percentage of the submission's professor evaluations (0 when none). Ties
are broken by popular votes (more first), then by submission order.
"""
from dataclasses import asdict, dataclass
from typing import Dict, List, Optional
import csv
import io
import logging

from django.conf import settings
from django.db import transaction
from django.db.models import Avg, Count

from core.policies import require
from evaluations.models import ProfessorEvaluation
from projects.models import ProjectSubmission, Vote

from .phases import get_demoday

logger = logging.getLogger("demoday.scoring")

UNCATEGORIZED_NAME = "Projetos Gerais"

CSV_HEADER = [
    "ID Projeto",
    "Título",
    "Descrição",
    "Tipo",
    "Categoria",
    "Autores",
    "Autor Principal",
    "Email Autor",
    "Status",
    "Votos Populares",
    "Votos Finais",
    "Pontuação Final",
    "Número Avaliações",
    "Nota Média Avaliações",
    "Data Submissão",
    "URL Vídeo",
    "URL Repositório",
    "Ano Desenvolvimento",
]


@dataclass
class RankingEntry:
    submission_id: int
    project_id: int
    title: str
    category_id: Optional[int]
    status: str
    popular_votes: int
    final_votes: int
    evaluation_count: int
    evaluation_average: float
    total_weighted_score: float

    def as_dict(self) -> dict:
        data = asdict(self)
        data["evaluation_average"] = round(self.evaluation_average, 2)
        data["total_weighted_score"] = round(self.total_weighted_score, 2)
        return data


def weighted_score(popular_votes: int, final_votes: int, evaluation_average: float) -> float:
    multiplier = settings.DEMODAY["FINAL_VOTE_MULTIPLIER"]
    return popular_votes + final_votes * multiplier + evaluation_average


def _vote_counts(demoday) -> Dict[int, Dict[str, int]]:
    counts: Dict[int, Dict[str, int]] = {}
    rows = (
        Vote.objects
        .filter(demoday=demoday)
        .values("project_id", "vote_phase")
        .annotate(n=Count("id"))
        .order_by()
    )
    for row in rows:
        counts.setdefault(row["project_id"], {})[row["vote_phase"]] = row["n"]
    return counts


def _evaluation_stats(demoday) -> Dict[int, dict]:
    rows = (
        ProfessorEvaluation.objects
        .filter(submission__demoday=demoday)
        .values("submission_id")
        .annotate(average=Avg("total_score"), count=Count("id"))
        .order_by()
    )
    return {row["submission_id"]: row for row in rows}


def _rank(submissions, demoday) -> List[RankingEntry]:
    votes = _vote_counts(demoday)
    evaluations = _evaluation_stats(demoday)

    entries = []
    for submission in submissions:
        project = submission.project
        project_votes = votes.get(project.id, {})
        popular = project_votes.get(Vote.PHASE_POPULAR, 0)
        final = project_votes.get(Vote.PHASE_FINAL, 0)
        stats = evaluations.get(submission.id, {})
        average = float(stats.get("average") or 0)

        entries.append(RankingEntry(
            submission_id=submission.id,
            project_id=project.id,
            title=project.title,
            category_id=project.category_id,
            status=submission.status,
            popular_votes=popular,
            final_votes=final,
            evaluation_count=stats.get("count", 0),
            evaluation_average=average,
            total_weighted_score=weighted_score(popular, final, average),
        ))

    # Stable sort: submissions arrive in creation order
    entries.sort(key=lambda e: (-e.total_weighted_score, -e.popular_votes))
    return entries


def _submissions(demoday, statuses=None):
    qs = (
        ProjectSubmission.objects
        .filter(demoday=demoday)
        .select_related("project", "project__author", "project__category")
        .order_by("created_at", "id")
    )
    if statuses:
        qs = qs.filter(status__in=statuses)
    return qs


def compute_ranking(demoday_id) -> List[RankingEntry]:
    """All submissions of the demoday, best first."""
    demoday = get_demoday(demoday_id)
    return _rank(_submissions(demoday), demoday)


def _category_groups(demoday, entries: List[RankingEntry]) -> List[dict]:
    """Split ranked entries by category, keeping rank order inside each group."""
    groups = {
        category.id: {
            "category_id": category.id,
            "name": category.name,
            "max_finalists": category.max_finalists,
            "entries": [],
        }
        for category in demoday.categories.all()
    }
    uncategorized = {
        "category_id": None,
        "name": UNCATEGORIZED_NAME,
        "max_finalists": demoday.max_finalists,
        "entries": [],
    }
    for entry in entries:
        groups.get(entry.category_id, uncategorized)["entries"].append(entry)
    return list(groups.values()) + [uncategorized]


def select_finalists(actor, demoday_id) -> List[dict]:
    """
    Mark the best approved submissions of each category as finalists.

    Previous finalist marks of the demoday are reset to approved first, so
    running it again recomputes from the current votes and evaluations.
    """
    require(actor, "finalists.select")
    demoday = get_demoday(demoday_id)

    with transaction.atomic():
        reset = (
            ProjectSubmission.objects
            .filter(demoday=demoday, status=ProjectSubmission.STATUS_FINALIST)
            .update(status=ProjectSubmission.STATUS_APPROVED)
        )

        approved = _submissions(demoday, statuses=[ProjectSubmission.STATUS_APPROVED])
        results = []
        for group in _category_groups(demoday, _rank(approved, demoday)):
            chosen = group["entries"][:group["max_finalists"]]
            ids = [entry.submission_id for entry in chosen]
            if ids:
                ProjectSubmission.objects.filter(pk__in=ids).update(
                    status=ProjectSubmission.STATUS_FINALIST,
                )
            if group["entries"]:
                results.append({
                    "category_id": group["category_id"],
                    "category_name": group["name"],
                    "max_finalists": group["max_finalists"],
                    "finalists": [
                        {"submission_id": e.submission_id, "title": e.title,
                         "total_weighted_score": round(e.total_weighted_score, 2)}
                        for e in chosen
                    ],
                })

    logger.info(
        "Finalists selected: demoday=%s actor=%s reset=%s selected=%s",
        demoday.id, actor.id, reset, sum(len(r["finalists"]) for r in results),
    )
    return results


def get_results(demoday_id) -> dict:
    """Per-category rankings plus overall participation numbers."""
    demoday = get_demoday(demoday_id)
    submissions = list(_submissions(demoday))
    entries = _rank(submissions, demoday)

    categories = [
        {
            "category_id": group["category_id"],
            "name": group["name"],
            "projects": [entry.as_dict() for entry in group["entries"]],
        }
        for group in _category_groups(demoday, entries)
        if group["entries"]
    ]

    totals = dict(
        Vote.objects
        .filter(demoday=demoday)
        .values_list("vote_phase")
        .annotate(n=Count("id"))
        .order_by()
    )

    return {
        "demoday_id": demoday.id,
        "demoday_name": demoday.name,
        "categories": categories,
        "overall_stats": {
            "total_submitted_projects": len(submissions),
            "total_unique_participants": len({s.project.author_id for s in submissions}),
            "total_popular_votes": totals.get(Vote.PHASE_POPULAR, 0),
            "total_final_votes": totals.get(Vote.PHASE_FINAL, 0),
        },
    }


def export_csv(demoday_id) -> str:
    """One CSV row per submission, ordered by ranking."""
    demoday = get_demoday(demoday_id)
    submissions = {s.id: s for s in _submissions(demoday)}
    entries = _rank(submissions.values(), demoday)
    category_names = {c.id: c.name for c in demoday.categories.all()}

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL)
    writer.writerow(CSV_HEADER)
    for entry in entries:
        submission = submissions[entry.submission_id]
        project = submission.project
        writer.writerow([
            project.id,
            project.title,
            project.description,
            project.type,
            category_names.get(project.category_id, "Sem categoria"),
            project.authors,
            project.author.display_name,
            project.author.email,
            submission.status,
            entry.popular_votes,
            entry.final_votes,
            f"{entry.total_weighted_score:.2f}",
            entry.evaluation_count,
            f"{entry.evaluation_average:.2f}",
            submission.created_at.isoformat(),
            project.video_url,
            project.repository_url,
            project.development_year,
        ])

    logger.info("Export generated: demoday=%s rows=%s", demoday.id, len(entries))
    return buffer.getvalue()
