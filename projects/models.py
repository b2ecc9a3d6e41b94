from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class Project(models.Model):
    """
    A student work entered into a demoday.

    The project holds the authored content; its participation in a given
    demoday (and the review outcome) lives on ProjectSubmission.
    """
    TYPE_DISCIPLINA = "Disciplina"
    TYPE_IC = "IC"
    TYPE_TCC = "TCC"
    TYPE_MESTRADO = "Mestrado"
    TYPE_DOUTORADO = "Doutorado"

    TYPE_CHOICES = [
        (TYPE_DISCIPLINA, "Disciplina"),
        (TYPE_IC, "Iniciação Científica"),
        (TYPE_TCC, "TCC"),
        (TYPE_MESTRADO, "Mestrado"),
        (TYPE_DOUTORADO, "Doutorado"),
    ]

    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="projects",
    )
    title = models.CharField(max_length=100)
    description = models.TextField()
    type = models.CharField(max_length=32, choices=TYPE_CHOICES)
    category = models.ForeignKey(
        "demoday.ProjectCategory",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="projects",
    )

    authors = models.TextField(help_text="Comma-separated list of authors")
    development_year = models.CharField(max_length=4)
    video_url = models.URLField(max_length=2048)
    repository_url = models.URLField(max_length=2048, blank=True, default="")
    contact_email = models.EmailField()
    contact_phone = models.CharField(max_length=32)
    advisor = models.CharField(max_length=255)
    work_category = models.CharField(max_length=255, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.title


class ProjectSubmission(models.Model):
    STATUS_SUBMITTED = "submitted"
    STATUS_APPROVED = "approved"
    STATUS_REJECTED = "rejected"
    STATUS_FINALIST = "finalist"
    STATUS_WINNER = "winner"

    STATUS_CHOICES = [
        (STATUS_SUBMITTED, "Submitted"),
        (STATUS_APPROVED, "Approved"),
        (STATUS_REJECTED, "Rejected"),
        (STATUS_FINALIST, "Finalist"),
        (STATUS_WINNER, "Winner"),
    ]

    # Statuses that make a project visible to the public and votable
    PUBLIC_STATUSES = (STATUS_APPROVED, STATUS_FINALIST, STATUS_WINNER)
    VOTABLE_STATUSES = (STATUS_APPROVED, STATUS_FINALIST)

    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name="submissions",
    )
    demoday = models.ForeignKey(
        "demoday.Demoday",
        on_delete=models.CASCADE,
        related_name="submissions",
    )
    status = models.CharField(
        max_length=32,
        choices=STATUS_CHOICES,
        default=STATUS_SUBMITTED,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["demoday", "status"], name="submission_demoday_status_idx"),
        ]

    def __str__(self):
        return f"{self.project.title} @ {self.demoday.name} ({self.status})"


class Vote(models.Model):
    PHASE_POPULAR = "popular"
    PHASE_FINAL = "final"

    PHASE_CHOICES = [
        (PHASE_POPULAR, "Popular"),
        (PHASE_FINAL, "Final"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="votes",
    )
    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name="votes",
    )
    demoday = models.ForeignKey(
        "demoday.Demoday",
        on_delete=models.CASCADE,
        related_name="votes",
    )
    voter_role = models.CharField(max_length=32)
    vote_phase = models.CharField(max_length=16, choices=PHASE_CHOICES)
    weight = models.PositiveIntegerField(default=1)
    rating = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(5)],
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "project", "vote_phase"],
                name="unique_vote_per_phase",
            ),
        ]
        indexes = [
            models.Index(fields=["demoday", "vote_phase"], name="vote_demoday_phase_idx"),
        ]

    def __str__(self):
        return f"{self.user} -> {self.project} ({self.vote_phase})"
