# demoday/models.py
from django.conf import settings
from django.db import models
from django.db.models import Q


def _default_demoday_max_finalists():
    return settings.DEMODAY["DEFAULT_DEMODAY_MAX_FINALISTS"]


def _default_category_max_finalists():
    return settings.DEMODAY["DEFAULT_CATEGORY_MAX_FINALISTS"]


class Demoday(models.Model):
    STATUS_ACTIVE = "active"
    STATUS_FINISHED = "finished"
    STATUS_CANCELED = "canceled"

    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_FINISHED, "Finished"),
        (STATUS_CANCELED, "Canceled"),
    ]

    name = models.CharField(max_length=255)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="created_demodays",
    )
    active = models.BooleanField(default=False)
    status = models.CharField(
        max_length=32,
        choices=STATUS_CHOICES,
        default=STATUS_ACTIVE,
    )
    # Finalist quota for projects without a category
    max_finalists = models.PositiveIntegerField(default=_default_demoday_max_finalists)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            # Storage-level guard for "one active demoday at a time"
            models.UniqueConstraint(
                fields=["active"],
                condition=Q(active=True),
                name="single_active_demoday",
            ),
        ]
        indexes = [
            models.Index(fields=["active"], name="demoday_active_idx"),
        ]

    def __str__(self):
        return self.name

    def ordered_phases(self):
        return list(self.phases.order_by("phase_number"))


class DemodayPhase(models.Model):
    # Phase numbers with workflow meaning; others are informational
    SUBMISSION = 1
    APPROVAL = 2
    POPULAR_VOTING = 3
    FINAL_VOTING = 4

    demoday = models.ForeignKey(
        Demoday,
        on_delete=models.CASCADE,
        related_name="phases",
    )
    name = models.CharField(max_length=255)
    description = models.TextField()
    phase_number = models.PositiveIntegerField()
    # Inclusive, whole days in the local timezone
    start_date = models.DateField()
    end_date = models.DateField()

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["phase_number"]
        constraints = [
            models.UniqueConstraint(
                fields=["demoday", "phase_number"],
                name="unique_phase_number_per_demoday",
            ),
        ]

    def __str__(self):
        return f"{self.demoday.name} - {self.phase_number}. {self.name}"


class ProjectCategory(models.Model):
    demoday = models.ForeignKey(
        Demoday,
        on_delete=models.CASCADE,
        related_name="categories",
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    max_finalists = models.PositiveIntegerField(default=_default_category_max_finalists)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "project categories"

    def __str__(self):
        return self.name


class Criterion(models.Model):
    """A named rubric dimension scoped to one demoday."""
    name = models.CharField(max_length=255)
    description = models.TextField()

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ["id"]

    def __str__(self):
        return self.name


class RegistrationCriterion(Criterion):
    demoday = models.ForeignKey(
        Demoday,
        on_delete=models.CASCADE,
        related_name="registration_criteria",
    )

    class Meta(Criterion.Meta):
        verbose_name_plural = "registration criteria"


class EvaluationCriterion(Criterion):
    demoday = models.ForeignKey(
        Demoday,
        on_delete=models.CASCADE,
        related_name="evaluation_criteria",
    )

    class Meta(Criterion.Meta):
        verbose_name_plural = "evaluation criteria"
