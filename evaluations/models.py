from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class ProfessorEvaluation(models.Model):
    """One professor's rubric evaluation of one submission."""
    submission = models.ForeignKey(
        "projects.ProjectSubmission",
        on_delete=models.CASCADE,
        related_name="evaluations",
    )
    professor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="evaluations",
    )
    # Approval percentage (0..100) over all criteria of the demoday
    total_score = models.PositiveIntegerField(default=0)
    completed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["submission", "professor"],
                name="unique_evaluation_per_professor",
            ),
        ]

    def __str__(self):
        return f"{self.professor} -> {self.submission_id} ({self.total_score}%)"


class EvaluationScore(models.Model):
    evaluation = models.ForeignKey(
        ProfessorEvaluation,
        on_delete=models.CASCADE,
        related_name="scores",
    )
    criterion = models.ForeignKey(
        "demoday.EvaluationCriterion",
        on_delete=models.CASCADE,
        related_name="scores",
    )
    score = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(0), MaxValueValidator(10)],
    )
    comment = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["criterion_id"]
        constraints = [
            models.UniqueConstraint(
                fields=["evaluation", "criterion"],
                name="unique_score_per_criterion",
            ),
        ]

    def __str__(self):
        return f"{self.criterion}: {self.score}"
