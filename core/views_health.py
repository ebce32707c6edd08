"""
Health check endpoints for monitoring.

/health/       - Liveness check (always returns 200)
/health/ready/ - Readiness check (verifies DB, staging dir, verification backlog)
"""
import logging
import os

from django.conf import settings
from django.db import DatabaseError, connection
from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

logger = logging.getLogger(__name__)


@method_decorator(csrf_exempt, name='dispatch')
class HealthCheckView(View):
    """Liveness probe: always returns 200 if Django is running."""

    def get(self, request):
        return JsonResponse({"status": "ok"})


@method_decorator(csrf_exempt, name='dispatch')
class ReadinessCheckView(View):
    """Readiness probe: checks database and upload staging."""

    def get(self, request):
        checks = {}

        # 1. Database connectivity
        try:
            with connection.cursor() as cursor:
                cursor.execute("SELECT 1")
            checks["database"] = "ok"
        except DatabaseError as e:
            logger.exception("Readiness: database check failed")
            checks["database"] = f"error: {e}"

        # 2. Staging directory writable
        staging_dir = settings.WAQTI_CONFIG.get("staging_dir", "")
        try:
            os.makedirs(staging_dir, exist_ok=True)
            checks["staging_dir"] = "ok" if os.access(staging_dir, os.W_OK) else "not writable"
        except OSError as e:
            checks["staging_dir"] = f"error: {e}"

        # 3. Verification backlog (basic data sanity)
        if checks["database"] == "ok":
            from verification.models import FreelancerVerification
            checks["pending_verifications"] = FreelancerVerification.objects.filter(
                status=FreelancerVerification.Status.UNDER_REVIEW,
            ).count()

        all_ok = checks["database"] == "ok" and checks["staging_dir"] == "ok"

        return JsonResponse(
            {"status": "ready" if all_ok else "degraded", "checks": checks},
            status=200 if all_ok else 503,
        )
