from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from demoday.phases import get_current_phase_info
from demoday.serializers import DemodaySummarySerializer, PhaseSerializer
from .generics import DemodayAPIView


class CurrentPhaseView(DemodayAPIView):
    """
    GET /api/demodays/current-phase/

    Public snapshot of the active demoday's calendar.
    """
    permission_classes = [AllowAny]

    def get(self, request):
        info = get_current_phase_info()
        demoday = info["demoday"]
        phase = info["current_phase"]
        return Response({
            "demoday": DemodaySummarySerializer(demoday).data if demoday else None,
            "phases": PhaseSerializer(info["phases"], many=True).data,
            "current_phase": PhaseSerializer(phase).data if phase else None,
            "is_voting_phase": info["is_voting_phase"],
            "is_final_voting_phase": info["is_final_voting_phase"],
        })
