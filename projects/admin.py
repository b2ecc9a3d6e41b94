from django.contrib import admin
from .models import Project, ProjectSubmission, Vote

@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ('title', 'type', 'author', 'category', 'development_year', 'created_at')
    list_filter = ('type', 'category')
    search_fields = ('title', 'authors', 'author__username', 'advisor')

@admin.register(ProjectSubmission)
class ProjectSubmissionAdmin(admin.ModelAdmin):
    list_display = ('project', 'demoday', 'status', 'created_at')
    list_filter = ('status', 'demoday')
    search_fields = ('project__title',)

@admin.register(Vote)
class VoteAdmin(admin.ModelAdmin):
    list_display = ('user', 'project', 'vote_phase', 'voter_role', 'weight', 'rating', 'created_at')
    list_filter = ('vote_phase', 'voter_role', 'demoday')
    search_fields = ('user__username', 'project__title')
