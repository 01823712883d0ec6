"""
Core views providing infrastructure endpoints.

This module contains views that are not part of the business domain but are
essential for running the service, such as health checks.
"""

import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import DatabaseError, connection
from django.http import JsonResponse

logger = logging.getLogger(__name__)


def health_check(request):
    """
    Health check endpoint for Docker, Kubernetes probes and load balancers.

    Returns:
        JsonResponse with status and component health:
        - status: "healthy" or "unhealthy"
        - database: "connected" or "disconnected"
        - channel_layer: "connected" or "disconnected"

    HTTP Status Codes:
        200: Database reachable (channel layer failures only degrade)
        503: Database unreachable

    Example Response:
        {
            "status": "healthy",
            "database": "connected",
            "channel_layer": "connected"
        }
    """
    health_status = {
        "status": "healthy",
        "database": "unknown",
        "channel_layer": "unknown",
    }
    is_healthy = True

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        health_status["database"] = "connected"
    except DatabaseError:
        logger.exception("Health check: database unreachable")
        health_status["database"] = "disconnected"
        health_status["status"] = "unhealthy"
        is_healthy = False

    # Change notices are best-effort, so the feed being down only degrades
    channel_layer = get_channel_layer()
    if channel_layer is None:
        health_status["channel_layer"] = "disabled"
    else:
        try:
            async_to_sync(channel_layer.group_send)(
                "health_check", {"type": "health.ping"}
            )
            health_status["channel_layer"] = "connected"
        except Exception:
            logger.warning("Health check: channel layer unreachable", exc_info=True)
            health_status["channel_layer"] = "disconnected"

    status_code = 200 if is_healthy else 503
    return JsonResponse(health_status, status=status_code)
