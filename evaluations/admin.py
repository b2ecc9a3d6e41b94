from django.contrib import admin

from .models import EvaluationScore, ProfessorEvaluation


class EvaluationScoreInline(admin.TabularInline):
    model = EvaluationScore
    extra = 0


@admin.register(ProfessorEvaluation)
class ProfessorEvaluationAdmin(admin.ModelAdmin):
    list_display = ("id", "submission", "professor", "total_score", "completed_at")
    list_filter = ("submission__demoday",)
    search_fields = ("submission__project__title", "professor__username", "professor__email")
    inlines = [EvaluationScoreInline]
