from rest_framework import status
from rest_framework.response import Response

from core.exceptions import Forbidden
from core.policies import authorize, require
from demoday.phases import get_demoday
from demoday.views.generics import DemodayAPIView, validated_data
from .models import Vote
from .serializers import (
    ProjectSubmissionSerializer,
    PublicSubmissionSerializer,
    SubmissionStatusSerializer,
    VoteInputSerializer,
    VoteSerializer,
)
from .submissions import (
    get_submission,
    list_submissions,
    list_user_submissions,
    submit_project,
    update_submission_status,
)
from .voting import cast_vote, has_voted, withdraw_vote


class SubmitProjectView(DemodayAPIView):
    """POST /api/demodays/<id>/submit/"""

    def post(self, request, demoday_id):
        submission = submit_project(demoday_id, request.user, request.data)
        return Response(ProjectSubmissionSerializer(submission).data, status=status.HTTP_201_CREATED)


class DemodaySubmissionsView(DemodayAPIView):
    """
    GET /api/demodays/<id>/submissions/?status=approved

    Staff see every submission with contact data; everyone else sees the
    public ones.
    """

    def get(self, request, demoday_id):
        demoday = get_demoday(demoday_id)
        submissions = list_submissions(demoday, request.user, request.query_params.get("status"))
        if authorize(request.user, "submission.view_all"):
            serializer_class = ProjectSubmissionSerializer
        else:
            serializer_class = PublicSubmissionSerializer
        return Response(serializer_class(submissions, many=True).data)


class MyDemodaySubmissionsView(DemodayAPIView):
    """GET /api/demodays/<id>/submissions/mine/"""

    def get(self, request, demoday_id):
        demoday = get_demoday(demoday_id)
        submissions = list_user_submissions(request.user, demoday)
        return Response(ProjectSubmissionSerializer(submissions, many=True).data)


class MySubmissionsView(DemodayAPIView):
    """GET /api/projects/submissions/mine/"""

    def get(self, request):
        submissions = list_user_submissions(request.user)
        return Response(ProjectSubmissionSerializer(submissions, many=True).data)


class SubmissionDetailView(DemodayAPIView):
    """GET /api/projects/submissions/<id>/  (author or staff)"""

    def get(self, request, submission_id):
        submission = get_submission(submission_id)
        if submission.project.author_id != request.user.id and not authorize(request.user, "submission.view_all"):
            raise Forbidden("Acesso negado.")
        return Response(ProjectSubmissionSerializer(submission).data)


class SubmissionStatusView(DemodayAPIView):
    """PATCH /api/projects/submissions/<id>/status/  (admin)"""

    def patch(self, request, submission_id):
        require(request.user, "submission.review")
        submission = get_submission(submission_id)
        data = validated_data(SubmissionStatusSerializer, request.data)
        submission = update_submission_status(request.user, submission, data["status"])
        return Response(ProjectSubmissionSerializer(submission).data)


class VoteView(DemodayAPIView):
    """POST /api/projects/vote/  {"project_id", "demoday_id", "vote_phase"?, "rating"?}"""

    def post(self, request):
        data = validated_data(VoteInputSerializer, request.data)
        vote = cast_vote(
            request.user,
            data["project_id"],
            data["demoday_id"],
            requested_phase=data["vote_phase"],
            rating=data["rating"],
        )
        return Response(VoteSerializer(vote).data, status=status.HTTP_201_CREATED)


class ProjectVoteView(DemodayAPIView):
    """
    GET    /api/projects/<id>/vote/?phase=popular  -> has the user voted?
    DELETE /api/projects/<id>/vote/?phase=popular  -> withdraw while the phase is open
    """

    def _phase(self, request):
        phase = request.query_params.get("phase")
        return phase if phase in dict(Vote.PHASE_CHOICES) else None

    def get(self, request, project_id):
        phase = self._phase(request)
        return Response({
            "project_id": project_id,
            "vote_phase": phase,
            "has_voted": has_voted(request.user, project_id, phase),
        })

    def delete(self, request, project_id):
        withdraw_vote(request.user, project_id, self._phase(request))
        return Response(status=status.HTTP_204_NO_CONTENT)
