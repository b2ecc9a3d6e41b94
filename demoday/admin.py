from django.contrib import admin
from .models import (
    Demoday, DemodayPhase, ProjectCategory, RegistrationCriterion, EvaluationCriterion
)


class DemodayPhaseInline(admin.TabularInline):
    model = DemodayPhase
    extra = 0


class ProjectCategoryInline(admin.TabularInline):
    model = ProjectCategory
    extra = 0


@admin.register(Demoday)
class DemodayAdmin(admin.ModelAdmin):
    list_display = ('name', 'status', 'active', 'max_finalists', 'created_by', 'created_at')
    list_filter = ('status', 'active')
    search_fields = ('name', 'created_by__username')
    inlines = [DemodayPhaseInline, ProjectCategoryInline]

@admin.register(DemodayPhase)
class DemodayPhaseAdmin(admin.ModelAdmin):
    list_display = ('demoday', 'phase_number', 'name', 'start_date', 'end_date')
    list_filter = ('demoday',)
    ordering = ('demoday', 'phase_number')

@admin.register(ProjectCategory)
class ProjectCategoryAdmin(admin.ModelAdmin):
    list_display = ('name', 'demoday', 'max_finalists')
    list_filter = ('demoday',)
    search_fields = ('name',)

@admin.register(RegistrationCriterion)
class RegistrationCriterionAdmin(admin.ModelAdmin):
    list_display = ('name', 'demoday')
    list_filter = ('demoday',)

@admin.register(EvaluationCriterion)
class EvaluationCriterionAdmin(admin.ModelAdmin):
    list_display = ('name', 'demoday')
    list_filter = ('demoday',)
