from rest_framework import serializers

from demoday.serializers import EvaluationCriterionSerializer
from projects.serializers import PublicProjectSerializer
from .models import EvaluationScore, ProfessorEvaluation


class ScoreInputSerializer(serializers.Serializer):
    criterion_id = serializers.IntegerField()
    score = serializers.IntegerField()
    comment = serializers.CharField(allow_blank=True, required=False, default="")


class EvaluationInputSerializer(serializers.Serializer):
    submission_id = serializers.IntegerField()
    scores = ScoreInputSerializer(many=True, allow_empty=False)


class EvaluationScoreSerializer(serializers.ModelSerializer):
    criterion_name = serializers.CharField(source="criterion.name", read_only=True)

    class Meta:
        model = EvaluationScore
        fields = ["id", "criterion", "criterion_name", "score", "comment"]
        read_only_fields = fields


class ProfessorEvaluationSerializer(serializers.ModelSerializer):
    scores = EvaluationScoreSerializer(many=True, read_only=True)
    professor_name = serializers.CharField(source="professor.display_name", read_only=True)
    project_title = serializers.CharField(source="submission.project.title", read_only=True)

    class Meta:
        model = ProfessorEvaluation
        fields = [
            "id",
            "submission",
            "project_title",
            "professor",
            "professor_name",
            "total_score",
            "completed_at",
            "scores",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class QueueItemSerializer(serializers.Serializer):
    submission_id = serializers.IntegerField(source="submission.id")
    status = serializers.CharField(source="submission.status")
    project = PublicProjectSerializer(source="submission.project")
    evaluated = serializers.BooleanField()
    total_score = serializers.IntegerField(allow_null=True)


class EvaluationQueueSerializer(serializers.Serializer):
    demoday_id = serializers.IntegerField(source="demoday.id")
    demoday_name = serializers.CharField(source="demoday.name")
    criteria = EvaluationCriterionSerializer(many=True)
    submissions = QueueItemSerializer(many=True)
