import time
from typing import Any, Dict

import structlog
from django.core.cache import cache
from django.db import connections
from django.http import HttpRequest, JsonResponse
from django.utils import timezone

logger = structlog.get_logger(__name__)


def _probe_database() -> Dict[str, Any]:
    start = time.monotonic()
    conn = connections["default"]
    conn.ensure_connection()
    with conn.cursor() as cursor:
        cursor.execute("SELECT 1")
        cursor.fetchone()
    return {
        "status": "up",
        "response_time_ms": round((time.monotonic() - start) * 1000, 2),
    }


def _probe_cache() -> Dict[str, Any]:
    start = time.monotonic()
    cache.set("_health_check", "ok", 10)
    if cache.get("_health_check") != "ok":
        raise ConnectionError("Cache read failed")
    return {
        "status": "up",
        "response_time_ms": round((time.monotonic() - start) * 1000, 2),
    }


def health_check(request: HttpRequest) -> JsonResponse:
    """Public liveness probe: datastore and cache round-trips."""
    services: Dict[str, Dict[str, Any]] = {}
    overall_healthy = True

    for name, probe in (("database", _probe_database), ("cache", _probe_cache)):
        try:
            services[name] = probe()
        except Exception as exc:
            services[name] = {"status": "down"}
            overall_healthy = False
            logger.error(f"health_check_{name}_failure", error=str(exc))

    status_code = 200 if overall_healthy else 503

    logger.info(
        "health_check_completed", status="healthy" if overall_healthy else "unhealthy"
    )

    return JsonResponse(
        {
            "status": "healthy" if overall_healthy else "unhealthy",
            "timestamp": timezone.now().isoformat(),
            "services": services,
        },
        status=status_code,
    )
