from django.urls import path

from projects.views import DemodaySubmissionsView, MyDemodaySubmissionsView, SubmitProjectView
from .views import (
    CheckFinishedView,
    CurrentPhaseView,
    DemodayCriteriaView,
    DemodayDetailView,
    DemodayListCreateView,
    DemodayStatusView,
    ExportView,
    RankingView,
    ResultsView,
    SelectFinalistsView,
)

urlpatterns = [
    path("", DemodayListCreateView.as_view(), name="demoday-list"),
    path("current-phase/", CurrentPhaseView.as_view(), name="demoday-current-phase"),
    path("check-finished/", CheckFinishedView.as_view(), name="demoday-check-finished-all"),

    path("<int:demoday_id>/", DemodayDetailView.as_view(), name="demoday-detail"),
    path("<int:demoday_id>/status/", DemodayStatusView.as_view(), name="demoday-status"),
    path("<int:demoday_id>/criteria/", DemodayCriteriaView.as_view(), name="demoday-criteria"),
    path("<int:demoday_id>/check-finished/", CheckFinishedView.as_view(), name="demoday-check-finished"),

    # Submissions
    path("<int:demoday_id>/submit/", SubmitProjectView.as_view(), name="demoday-submit"),
    path("<int:demoday_id>/submissions/", DemodaySubmissionsView.as_view(), name="demoday-submissions"),
    path(
        "<int:demoday_id>/submissions/mine/",
        MyDemodaySubmissionsView.as_view(),
        name="demoday-my-submissions",
    ),

    # Scoring
    path("<int:demoday_id>/ranking/", RankingView.as_view(), name="demoday-ranking"),
    path("<int:demoday_id>/results/", ResultsView.as_view(), name="demoday-results"),
    path("<int:demoday_id>/export/", ExportView.as_view(), name="demoday-export"),
    path(
        "<int:demoday_id>/select-finalists/",
        SelectFinalistsView.as_view(),
        name="demoday-select-finalists",
    ),
]
