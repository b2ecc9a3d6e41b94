from rest_framework import status
from rest_framework.response import Response

from core.policies import require
from demoday import state_machine
from demoday.models import Demoday
from demoday.phases import get_demoday
from demoday.serializers import (
    CriteriaSerializer,
    DemodayCreateSerializer,
    DemodaySerializer,
    DemodayStatusSerializer,
    DemodaySummarySerializer,
    DemodayUpdateSerializer,
    EvaluationCriterionSerializer,
    RegistrationCriterionSerializer,
)
from .generics import DemodayAPIView, validated_data


class DemodayListCreateView(DemodayAPIView):
    """
    GET  /api/demodays/  -> every demoday, newest first
    POST /api/demodays/  -> create a demoday (admin); it becomes the active one
    """

    def get(self, request):
        demodays = Demoday.objects.select_related("created_by").order_by("-created_at")
        return Response(DemodaySummarySerializer(demodays, many=True).data)

    def post(self, request):
        require(request.user, "demoday.manage")
        data = validated_data(DemodayCreateSerializer, request.data)
        demoday = state_machine.create_demoday(
            request.user,
            name=data["name"],
            phases=data["phases"],
            categories=data["categories"],
            registration_criteria=data["registration_criteria"],
            evaluation_criteria=data["evaluation_criteria"],
            max_finalists=data.get("max_finalists"),
        )
        return Response(DemodaySerializer(demoday).data, status=status.HTTP_201_CREATED)


class DemodayDetailView(DemodayAPIView):
    """GET / PATCH / DELETE /api/demodays/<id>/"""

    def get(self, request, demoday_id):
        return Response(DemodaySerializer(get_demoday(demoday_id)).data)

    def patch(self, request, demoday_id):
        require(request.user, "demoday.manage")
        demoday = get_demoday(demoday_id)
        data = validated_data(DemodayUpdateSerializer, request.data)
        demoday = state_machine.update_demoday(
            request.user,
            demoday,
            name=data.get("name"),
            phases=data.get("phases"),
            max_finalists=data.get("max_finalists"),
        )
        return Response(DemodaySerializer(demoday).data)

    put = patch

    def delete(self, request, demoday_id):
        require(request.user, "demoday.manage")
        state_machine.delete_demoday(request.user, get_demoday(demoday_id))
        return Response(status=status.HTTP_204_NO_CONTENT)


class DemodayStatusView(DemodayAPIView):
    """PATCH /api/demodays/<id>/status/  {"status": "finished"}"""

    def patch(self, request, demoday_id):
        require(request.user, "demoday.manage")
        demoday = get_demoday(demoday_id)
        data = validated_data(DemodayStatusSerializer, request.data)
        demoday = state_machine.change_status(request.user, demoday, data["status"])
        return Response({
            "id": demoday.id,
            "status": demoday.status,
            "active": demoday.active,
            "allowed_transitions": state_machine.get_allowed_transitions(demoday),
        })


class DemodayCriteriaView(DemodayAPIView):
    """
    GET /api/demodays/<id>/criteria/  -> both criteria sets
    PUT /api/demodays/<id>/criteria/  -> replace both sets (admin)
    """

    def _payload(self, demoday):
        return {
            "demoday_id": demoday.id,
            "registration_criteria": RegistrationCriterionSerializer(
                demoday.registration_criteria.all(), many=True
            ).data,
            "evaluation_criteria": EvaluationCriterionSerializer(
                demoday.evaluation_criteria.all(), many=True
            ).data,
        }

    def get(self, request, demoday_id):
        return Response(self._payload(get_demoday(demoday_id)))

    def put(self, request, demoday_id):
        require(request.user, "demoday.manage")
        demoday = get_demoday(demoday_id)
        data = validated_data(CriteriaSerializer, request.data)
        state_machine.replace_criteria(
            request.user,
            demoday,
            registration=data["registration_criteria"],
            evaluation=data["evaluation_criteria"],
        )
        return Response(self._payload(demoday))


class CheckFinishedView(DemodayAPIView):
    """
    POST /api/demodays/<id>/check-finished/  -> finish this demoday if its last phase ended
    POST /api/demodays/check-finished/       -> same sweep over every active demoday
    """

    def post(self, request, demoday_id=None):
        if demoday_id is None:
            finished = state_machine.finish_expired_demodays()
            return Response({"finished": [d.id for d in finished]})

        demoday = get_demoday(demoday_id)
        finished = state_machine.check_finished(demoday)
        return Response({
            "id": demoday.id,
            "finished": finished,
            "status": demoday.status,
            "active": demoday.active,
        })
