"""
Health check endpoint.

Returns a snapshot of the running process: uptime, memory usage and
environment.  Intended for load balancers and uptime monitors, so it
is not protected.
"""

import logging
import platform
from datetime import datetime, timezone
from typing import Any, Dict

import psutil
from fastapi import APIRouter, Depends

from guest_registry_api.app.core.context import AppContext, get_context

logger = logging.getLogger(__name__)

router = APIRouter()


def _megabytes(value: int) -> str:
    return f"{round(value / 1024 / 1024)} MB"


@router.get("/health")
async def health_check(context: AppContext = Depends(get_context)) -> Dict[str, Any]:
    memory = psutil.Process().memory_info()
    health = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": context.uptime,
        "version": context.settings.api_version,
        "environment": context.settings.environment,
        "memory": {
            "used": _megabytes(memory.rss),
            "total": _megabytes(memory.vms),
        },
        "system": {
            "platform": platform.system().lower(),
            "pythonVersion": platform.python_version(),
        },
    }
    logger.debug("Health check requested: %s", health)
    return health
