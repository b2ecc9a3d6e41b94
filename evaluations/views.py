from rest_framework import status
from rest_framework.response import Response

from core.policies import require
from demoday.views.generics import DemodayAPIView, validated_data
from projects.submissions import get_submission
from .aggregator import get_evaluation, list_evaluation_queue, record_evaluation, summarize_evaluations
from .serializers import EvaluationInputSerializer, EvaluationQueueSerializer, ProfessorEvaluationSerializer


class EvaluationQueueView(DemodayAPIView):
    """GET /api/evaluations/queue/  -> active demoday submissions for the professor"""

    def get(self, request):
        queue = list_evaluation_queue(request.user)
        return Response(EvaluationQueueSerializer(queue).data)


class EvaluationRecordView(DemodayAPIView):
    """
    POST /api/evaluations/
    {"submission_id": 1, "scores": [{"criterion_id": 3, "score": 8, "comment": ""}]}

    Evaluating the same submission again replaces the previous scores.
    """

    def post(self, request):
        require(request.user, "evaluation.record")
        data = validated_data(EvaluationInputSerializer, request.data)
        evaluation = record_evaluation(data["submission_id"], request.user, data["scores"])
        return Response(ProfessorEvaluationSerializer(evaluation).data, status=status.HTTP_201_CREATED)


class EvaluationDetailView(DemodayAPIView):
    """GET /api/evaluations/<id>/"""

    def get(self, request, evaluation_id):
        require(request.user, "evaluation.view")
        return Response(ProfessorEvaluationSerializer(get_evaluation(evaluation_id)).data)


class EvaluationSummaryView(DemodayAPIView):
    """GET /api/evaluations/submissions/<id>/summary/"""

    def get(self, request, submission_id):
        require(request.user, "evaluation.view")
        return Response(summarize_evaluations(get_submission(submission_id)))
