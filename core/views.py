import logging
import time

from django.conf import settings
from django.db import DatabaseError, connections
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from demoday.phases import get_current_phase_info

logger = logging.getLogger("demoday.health")


def _database_ok() -> bool:
    try:
        with connections["default"].cursor() as cursor:
            cursor.execute("SELECT 1")
    except DatabaseError:
        return False
    return True


def _event_snapshot() -> dict:
    """Which demoday is running and where it stands in its calendar."""
    info = get_current_phase_info()
    demoday = info["demoday"]
    phase = info["current_phase"]
    return {
        "active_demoday": (
            {"id": demoday.id, "name": demoday.name, "status": demoday.status}
            if demoday else None
        ),
        "current_phase": phase.phase_number if phase else None,
    }


class HealthCheckView(APIView):
    """
    Public uptime probe.

    Reports database reachability, whether emails are dispatched in-process
    or through the worker, and the active demoday's current phase. Answers
    503 when the database is unreachable.
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request, *args, **kwargs):
        start = time.monotonic()
        db_ok = _database_ok()

        payload = {
            "status": "ok" if db_ok else "degraded",
            "db": db_ok,
            "env": getattr(settings, "ENV", "unknown"),
            "email_dispatch": "eager" if settings.CELERY_TASK_ALWAYS_EAGER else "worker",
        }
        if db_ok:
            payload.update(_event_snapshot())
        else:
            logger.error("Health check degraded: database unreachable")

        payload["latency_ms"] = int((time.monotonic() - start) * 1000)
        return Response(
            payload,
            status=status.HTTP_200_OK if db_ok else status.HTTP_503_SERVICE_UNAVAILABLE,
        )
