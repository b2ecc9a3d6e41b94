from django.urls import path

from .views import (
    MySubmissionsView,
    ProjectVoteView,
    SubmissionDetailView,
    SubmissionStatusView,
    VoteView,
)

urlpatterns = [
    path("vote/", VoteView.as_view(), name="vote-cast"),
    path("<int:project_id>/vote/", ProjectVoteView.as_view(), name="project-vote"),
    path("submissions/mine/", MySubmissionsView.as_view(), name="my-submissions"),
    path("submissions/<int:submission_id>/", SubmissionDetailView.as_view(), name="submission-detail"),
    path(
        "submissions/<int:submission_id>/status/",
        SubmissionStatusView.as_view(),
        name="submission-status",
    ),
]
