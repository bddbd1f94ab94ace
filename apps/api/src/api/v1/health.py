# apps/api/src/api/v1/health.py

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.v1.deps import get_page_provider
from core.settings import settings
from integrations.sources.base import PageProvider

log = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health", summary="Liveness probe")
def health():
    """
    Liveness probe.

    Only proves the process is up and FastAPI answers.
    ❗ No external dependencies (no browser, no network).
    """
    return {
        "status": "ok",
        "service": settings.app_name,
        "env": settings.env,
        "timestamp": _now_iso(),
    }


@router.get("/ready", summary="Upstream probe")
async def readiness(page_provider: PageProvider = Depends(get_page_provider)):
    """
    Readiness probe.

    Starts a real browser and opens HEALTH_CHECK_URL, so it proves that:
    - Chromium can be launched
    - OLX answers within HEALTH_CHECK_TIMEOUT_MS

    Expensive: do not poll it at liveness frequency.
    """
    start = time.time()

    try:
        async with page_provider.acquire() as page:
            await page.navigate(
                settings.health_check_url,
                wait_until="domcontentloaded",
                timeout_ms=settings.health_check_timeout_ms,
            )
            title = await page.title()
    except Exception as e:
        log.warning(f"[HEALTH][WARN] upstream check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "olx_accessible": False,
                "error": str(e),
                "timestamp": _now_iso(),
            },
        )

    return {
        "status": "healthy",
        "olx_accessible": True,
        "page_title": title,
        "timestamp": _now_iso(),
        "latency_ms": int((time.time() - start) * 1000),
    }
