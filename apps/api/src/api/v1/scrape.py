# apps/api/src/api/v1/scrape.py

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from api.v1.deps import get_orchestrator
from core.errors import ScrapeError, ValidationError
from core.settings import settings
from data_pipeline.normalize import parse_date_filter
from integrations.sources.olx import build_search_url
from services.scrape_service import ScrapeOrchestrator, ScrapeParameters, ScrapeResult

log = logging.getLogger(__name__)

router = APIRouter(tags=["Scrape"])

SCRAPE_EXAMPLE = "/scrape?url=https://www.olx.com.br/celulares/estado-mg?q=iphone&limit=10"
SCRAPE_OLX_EXAMPLE = "/scrape-olx?q=iphone&state=sp&category=celulares"


# =========================
# PARAM HELPERS
# =========================

def parse_limit(raw: Optional[str]) -> int:
    """Missing -> DEFAULT_LIMIT; always clamped to 1..MAX_LIMIT."""
    raw = (raw or "").strip()
    if not raw:
        return settings.clamp_limit(settings.default_limit)

    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(
            f"Parâmetro limit deve ser um número inteiro (recebido: {raw!r})",
            example=SCRAPE_EXAMPLE,
        )

    return settings.clamp_limit(value)


def require_url(url: Optional[str]) -> str:
    url = (url or "").strip()
    if not url:
        raise ValidationError("Parâmetro url é obrigatório", example=SCRAPE_EXAMPLE)
    if not url.startswith(("http://", "https://")):
        raise ValidationError(
            f"Parâmetro url deve ser uma URL http(s) (recebido: {url!r})",
            example=SCRAPE_EXAMPLE,
        )
    return url


async def run_scrape(orchestrator: ScrapeOrchestrator, params: ScrapeParameters) -> ScrapeResult:
    try:
        return await orchestrator.run(params)
    except ScrapeError:
        raise
    except Exception as e:
        log.exception(f"[SCRAPE][ERROR] unexpected failure for {params.url}")
        raise ScrapeError(str(e) or type(e).__name__) from e


# =========================
# ENDPOINTS
# =========================

@router.get(
    "/scrape",
    response_model=ScrapeResult,
    summary="Scrape an OLX listing page",
)
async def scrape(
    url: Optional[str] = None,
    limit: Optional[str] = None,
    date_from: Optional[str] = None,
    orchestrator: ScrapeOrchestrator = Depends(get_orchestrator),
):
    """
    Renders `url`, extracts the ad cards and returns them normalized.

    - limit: default 20, clamped to 1..MAX_LIMIT
    - date_from: YYYY-MM-DD or DD/MM/YYYY; ads without a date are kept
    """
    params = ScrapeParameters(
        url=require_url(url),
        limit=parse_limit(limit),
        date_from=parse_date_filter(date_from),
    )
    return await run_scrape(orchestrator, params)


@router.get(
    "/scrape-olx",
    response_model=ScrapeResult,
    summary="Search OLX by keyword",
)
async def scrape_olx(
    q: Optional[str] = None,
    state: str = "mg",
    category: Optional[str] = None,
    limit: Optional[str] = None,
    date_from: Optional[str] = None,
    orchestrator: ScrapeOrchestrator = Depends(get_orchestrator),
):
    """Builds the OLX search URL and runs the same flow as /scrape."""
    q = (q or "").strip()
    if not q:
        raise ValidationError('Parâmetro "q" (query) é obrigatório', example=SCRAPE_OLX_EXAMPLE)

    url = build_search_url(q, state=state, category=category, base_url=settings.olx_base_url)
    log.info(f"[SCRAPE] built url={url}")

    params = ScrapeParameters(
        url=url,
        limit=parse_limit(limit),
        date_from=parse_date_filter(date_from),
    )
    return await run_scrape(orchestrator, params)
