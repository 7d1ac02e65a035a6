import logging
import secrets

from django.conf import settings
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from apps.core.exceptions import JobExecutionError
from apps.core.http import json_error

from .runner import JOBS, run_job

logger = logging.getLogger(__name__)


def _authorized(request) -> bool:
    secret = getattr(settings, "FLEET_CRON_SECRET", "")
    if not secret:
        return False
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme != "Bearer" or not token:
        return False
    return secrets.compare_digest(token.encode(), secret.encode())


@csrf_exempt
@require_POST
def run(request, job: str):
    """Scheduler entry point: POST with ``Authorization: Bearer <FLEET_CRON_SECRET>``."""
    if not _authorized(request):
        logger.warning("Rejected job trigger for %r from %s", job, request.META.get("REMOTE_ADDR"))
        return json_error(401, "Unauthorized")

    if job not in JOBS:
        return json_error(404, f"Unknown job: {job}")

    try:
        summary = run_job(job)
    except JobExecutionError as e:
        return json_error(500, str(e))

    return JsonResponse(summary)
