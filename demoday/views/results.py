from django.http import HttpResponse
from rest_framework.response import Response

from core.policies import require
from demoday import scoring
from .generics import DemodayAPIView


class RankingView(DemodayAPIView):
    """GET /api/demodays/<id>/ranking/  (admin)"""

    def get(self, request, demoday_id):
        require(request.user, "ranking.view")
        ranking = scoring.compute_ranking(demoday_id)
        return Response([entry.as_dict() for entry in ranking])


class ResultsView(DemodayAPIView):
    """GET /api/demodays/<id>/results/"""

    def get(self, request, demoday_id):
        return Response(scoring.get_results(demoday_id))


class ExportView(DemodayAPIView):
    """GET /api/demodays/<id>/export/  -> CSV download (admin)"""

    def get(self, request, demoday_id):
        require(request.user, "ranking.view")
        content = scoring.export_csv(demoday_id)
        return HttpResponse(
            content,
            content_type="text/csv; charset=utf-8",
            headers={"Content-Disposition": f'attachment; filename="demoday-{demoday_id}-export.csv"'},
        )


class SelectFinalistsView(DemodayAPIView):
    """POST /api/demodays/<id>/select-finalists/  (admin)"""

    def post(self, request, demoday_id):
        results = scoring.select_finalists(request.user, demoday_id)
        return Response({
            "demoday_id": demoday_id,
            "categories": results,
            "total_finalists": sum(len(r["finalists"]) for r in results),
        })
