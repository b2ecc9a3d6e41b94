from rest_framework import serializers

from demoday.models import ProjectCategory
from demoday.sanitizers import sanitize_html, sanitize_text, sanitize_title
from .models import Project, ProjectSubmission, Vote


# -----------------------------------------
# SUBMISSION INPUT
# -----------------------------------------
class SubmissionInputSerializer(serializers.Serializer):
    """
    Validates a project submission.

    Expects ``demoday`` in the serializer context so the optional category
    can be checked against it.
    """
    title = serializers.CharField(min_length=2, max_length=100)
    description = serializers.CharField(min_length=5, max_length=5000)
    type = serializers.ChoiceField(choices=[choice for choice, _ in Project.TYPE_CHOICES])
    authors = serializers.CharField(min_length=3)
    development_year = serializers.RegexField(
        r"^\d{4}$",
        error_messages={"invalid": "Informe o ano com 4 dígitos."},
    )
    video_url = serializers.URLField(max_length=2048)
    repository_url = serializers.URLField(max_length=2048, required=False, allow_blank=True, default="")
    contact_email = serializers.EmailField()
    contact_phone = serializers.CharField(min_length=10, max_length=20)
    advisor = serializers.CharField(min_length=2, max_length=255)
    category_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    work_category = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)

    def validate_title(self, value):
        value = sanitize_title(value, max_length=100)
        if len(value) < 2:
            raise serializers.ValidationError("O título deve ter pelo menos 2 caracteres.")
        return value

    def validate_description(self, value):
        value = sanitize_html(value, max_length=5000)
        if len(value) < 5:
            raise serializers.ValidationError("A descrição deve ter pelo menos 5 caracteres.")
        return value

    def validate_authors(self, value):
        return sanitize_text(value)

    def validate_advisor(self, value):
        return sanitize_title(value)

    def validate_category_id(self, value):
        if value is None:
            return None
        demoday = self.context.get("demoday")
        exists = ProjectCategory.objects.filter(pk=value, demoday=demoday).exists()
        if not exists:
            raise serializers.ValidationError("Categoria não pertence a este Demoday.")
        return value


# -----------------------------------------
# OUTPUT
# -----------------------------------------
class ProjectSerializer(serializers.ModelSerializer):
    author_name = serializers.CharField(source="author.display_name", read_only=True)
    category_name = serializers.CharField(source="category.name", read_only=True, default=None)

    class Meta:
        model = Project
        fields = [
            "id",
            "author",
            "author_name",
            "title",
            "description",
            "type",
            "category",
            "category_name",
            "authors",
            "development_year",
            "video_url",
            "repository_url",
            "contact_email",
            "contact_phone",
            "advisor",
            "work_category",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PublicProjectSerializer(ProjectSerializer):
    """Project data safe to show to any participant."""

    class Meta(ProjectSerializer.Meta):
        fields = [
            f for f in ProjectSerializer.Meta.fields
            if f not in ("contact_email", "contact_phone")
        ]
        read_only_fields = fields


class ProjectSubmissionSerializer(serializers.ModelSerializer):
    project = ProjectSerializer(read_only=True)
    demoday_name = serializers.CharField(source="demoday.name", read_only=True)

    class Meta:
        model = ProjectSubmission
        fields = [
            "id",
            "project",
            "demoday",
            "demoday_name",
            "status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PublicSubmissionSerializer(ProjectSubmissionSerializer):
    project = PublicProjectSerializer(read_only=True)


class SubmissionStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[choice for choice, _ in ProjectSubmission.STATUS_CHOICES])


# -----------------------------------------
# VOTES
# -----------------------------------------
class VoteInputSerializer(serializers.Serializer):
    project_id = serializers.IntegerField()
    demoday_id = serializers.IntegerField()
    vote_phase = serializers.ChoiceField(
        choices=[choice for choice, _ in Vote.PHASE_CHOICES],
        required=False,
        allow_null=True,
        default=None,
    )
    rating = serializers.IntegerField(min_value=1, max_value=5, required=False, allow_null=True, default=None)


class VoteSerializer(serializers.ModelSerializer):
    class Meta:
        model = Vote
        fields = [
            "id",
            "user",
            "project",
            "demoday",
            "voter_role",
            "vote_phase",
            "weight",
            "rating",
            "created_at",
        ]
        read_only_fields = fields
