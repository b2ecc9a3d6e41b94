from django.urls import path

from .views import EvaluationDetailView, EvaluationQueueView, EvaluationRecordView, EvaluationSummaryView

urlpatterns = [
    path("", EvaluationRecordView.as_view(), name="evaluation-record"),
    path("queue/", EvaluationQueueView.as_view(), name="evaluation-queue"),
    path("<int:evaluation_id>/", EvaluationDetailView.as_view(), name="evaluation-detail"),
    path(
        "submissions/<int:submission_id>/summary/",
        EvaluationSummaryView.as_view(),
        name="evaluation-summary",
    ),
]
