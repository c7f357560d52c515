import time
from datetime import datetime, timezone

import psutil
from fastapi import APIRouter, Depends, Request

from gallery.api.deps import get_settings
from gallery.core.config import Settings
from gallery.models.memory import HealthStatus

router = APIRouter()


@router.get("/health", response_model=HealthStatus)
def health_check(request: Request, app_settings: Settings = Depends(get_settings)):
    """
    Liveness probe with process uptime and memory usage.
    """
    mem = psutil.Process().memory_info()
    return HealthStatus(
        status="OK",
        timestamp=datetime.now(timezone.utc).isoformat(),
        uptime=time.monotonic() - request.app.state.started_at,
        memory={"rss": mem.rss, "vms": mem.vms},
        version=app_settings.APP_VERSION,
    )
