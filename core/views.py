import logging
import time

from django.conf import settings
from django.db import DatabaseError, connection
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

logger = logging.getLogger('cocreate.api')


def _database_round_trip():
    """Run a trivial query; returns (ok, elapsed milliseconds)."""
    started = time.perf_counter()
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except DatabaseError as e:
        logger.error(f"Health check could not reach the database: {e}")
        return False, None
    return True, round((time.perf_counter() - started) * 1000, 2)


class HealthCheckView(APIView):
    """
    GET /api/health/

    Public uptime check. Answers 503 while the database is unreachable so a
    load balancer can take the instance out of rotation.
    """
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = []

    def get(self, request):
        db_ok, db_ms = _database_round_trip()
        return Response(
            {
                "status": "ok" if db_ok else "degraded",
                "db": db_ok,
                "db_latency_ms": db_ms,
                "env": settings.ENV,
                "version": settings.APP_VERSION,
            },
            status=status.HTTP_200_OK if db_ok else status.HTTP_503_SERVICE_UNAVAILABLE,
        )
