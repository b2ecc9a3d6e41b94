from rest_framework import serializers

from .models import (
    Demoday,
    DemodayPhase,
    EvaluationCriterion,
    ProjectCategory,
    RegistrationCriterion,
)


# -----------------------------------------
# NESTED INPUT
# -----------------------------------------
class PhaseInputSerializer(serializers.Serializer):
    phase_number = serializers.IntegerField(min_value=1)
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(allow_blank=True, required=False, default="")
    start_date = serializers.DateField()
    end_date = serializers.DateField()

    def validate(self, attrs):
        if attrs["end_date"] < attrs["start_date"]:
            raise serializers.ValidationError(
                {"end_date": "A data final deve ser igual ou posterior à data inicial."}
            )
        return attrs


class CategoryInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(allow_blank=True, required=False, default="")
    max_finalists = serializers.IntegerField(min_value=1, required=False)


class CriterionInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(allow_blank=True, required=False, default="")


# -----------------------------------------
# OUTPUT
# -----------------------------------------
class PhaseSerializer(serializers.ModelSerializer):
    class Meta:
        model = DemodayPhase
        fields = ["id", "phase_number", "name", "description", "start_date", "end_date"]
        read_only_fields = fields


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = ProjectCategory
        fields = ["id", "name", "description", "max_finalists"]
        read_only_fields = fields


class RegistrationCriterionSerializer(serializers.ModelSerializer):
    class Meta:
        model = RegistrationCriterion
        fields = ["id", "name", "description"]
        read_only_fields = fields


class EvaluationCriterionSerializer(serializers.ModelSerializer):
    class Meta:
        model = EvaluationCriterion
        fields = ["id", "name", "description"]
        read_only_fields = fields


class DemodaySummarySerializer(serializers.ModelSerializer):
    created_by_name = serializers.CharField(source="created_by.display_name", read_only=True)

    class Meta:
        model = Demoday
        fields = [
            "id",
            "name",
            "active",
            "status",
            "max_finalists",
            "created_by",
            "created_by_name",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class DemodaySerializer(DemodaySummarySerializer):
    phases = PhaseSerializer(many=True, read_only=True)
    categories = CategorySerializer(many=True, read_only=True)
    registration_criteria = RegistrationCriterionSerializer(many=True, read_only=True)
    evaluation_criteria = EvaluationCriterionSerializer(many=True, read_only=True)

    class Meta(DemodaySummarySerializer.Meta):
        fields = DemodaySummarySerializer.Meta.fields + [
            "phases",
            "categories",
            "registration_criteria",
            "evaluation_criteria",
        ]
        read_only_fields = fields


# -----------------------------------------
# WRITE PAYLOADS
# -----------------------------------------
class DemodayCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    max_finalists = serializers.IntegerField(min_value=1, required=False)
    phases = PhaseInputSerializer(many=True)
    categories = CategoryInputSerializer(many=True, required=False, default=list)
    registration_criteria = CriterionInputSerializer(many=True, required=False, default=list)
    evaluation_criteria = CriterionInputSerializer(many=True, required=False, default=list)


class DemodayUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    max_finalists = serializers.IntegerField(min_value=1, required=False)
    phases = PhaseInputSerializer(many=True, required=False)


class DemodayStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[choice for choice, _ in Demoday.STATUS_CHOICES])


class CriteriaSerializer(serializers.Serializer):
    registration_criteria = CriterionInputSerializer(many=True, required=False, default=list)
    evaluation_criteria = CriterionInputSerializer(many=True, required=False, default=list)
