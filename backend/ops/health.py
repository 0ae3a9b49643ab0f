"""
Health check endpoints for operations monitoring.

Endpoints:
- /_health/live    - liveness check (is the process running?)
- /_health/ready   - readiness check (database and Redis broker reachable?)
- /_health/full    - full health report (for debugging/dashboards)
"""
import logging
import time
from typing import Any, Dict

import redis
from django.conf import settings
from django.db import connections
from django.http import JsonResponse
from django.views import View

logger = logging.getLogger(__name__)

# Read by the admin stats endpoint for process uptime
PROCESS_STARTED_AT = time.time()


def uptime_seconds() -> float:
    return round(time.time() - PROCESS_STARTED_AT, 3)


class HealthCheck:
    """Health check implementation."""

    @staticmethod
    def check_database(alias: str = "default") -> Dict[str, Any]:
        """Check database connectivity."""
        start = time.time()
        try:
            conn = connections[alias]
            conn.ensure_connection()
            with conn.cursor() as cursor:
                cursor.execute("SELECT 1")
                cursor.fetchone()
            duration_ms = (time.time() - start) * 1000
            return {
                "status": "healthy",
                "alias": alias,
                "duration_ms": round(duration_ms, 2),
            }
        except Exception as e:
            logger.warning("Database health check failed", extra={"alias": alias, "error": str(e)})
            duration_ms = (time.time() - start) * 1000
            return {
                "status": "unhealthy",
                "alias": alias,
                "error": str(e),
                "duration_ms": round(duration_ms, 2),
            }

    @staticmethod
    def check_redis() -> Dict[str, Any]:
        """Check the Celery broker (skipped when tasks run eagerly)."""
        broker_url = getattr(settings, "CELERY_BROKER_URL", None)
        if not broker_url or getattr(settings, "CELERY_TASK_ALWAYS_EAGER", False):
            return {"status": "skipped", "reason": "Broker not in use"}

        start = time.time()
        try:
            client = redis.from_url(broker_url, socket_connect_timeout=2)
            client.ping()
            duration_ms = (time.time() - start) * 1000
            return {
                "status": "healthy",
                "duration_ms": round(duration_ms, 2),
            }
        except redis.RedisError as e:
            logger.warning("Redis health check failed", extra={"error": str(e)})
            duration_ms = (time.time() - start) * 1000
            return {
                "status": "unhealthy",
                "error": str(e),
                "duration_ms": round(duration_ms, 2),
            }

    @staticmethod
    def get_full_health() -> Dict[str, Any]:
        """Get comprehensive health report."""
        checks = {
            "database": HealthCheck.check_database("default"),
            "redis": HealthCheck.check_redis(),
        }

        statuses = [c.get("status", "unknown") for c in checks.values()]
        if all(s in ("healthy", "skipped") for s in statuses):
            overall = "healthy"
        else:
            overall = "unhealthy"

        return {
            "status": overall,
            "checks": checks,
            "version": getattr(settings, "VERSION", "unknown"),
            "environment": getattr(settings, "ENVIRONMENT", "development"),
            "uptime_seconds": uptime_seconds(),
        }


class LivenessView(View):
    """
    Liveness check.

    Returns 200 if the process is running. Checks no external dependency.
    """

    def get(self, request):
        return JsonResponse({"status": "alive"})


class ReadinessView(View):
    """
    Readiness check.

    Returns 200 if the database and broker answer, 503 otherwise.
    """

    def get(self, request):
        health = HealthCheck.get_full_health()
        ready = health["status"] == "healthy"
        return JsonResponse(
            {"status": "ready" if ready else "not_ready", **health["checks"]},
            status=200 if ready else 503,
        )


class FullHealthView(View):
    """
    Full health check for debugging and dashboards.

    Should be protected in production (internal network only).
    """

    def get(self, request):
        health = HealthCheck.get_full_health()

        status_code = 200 if health["status"] == "healthy" else 503
        return JsonResponse(health, status=status_code)
