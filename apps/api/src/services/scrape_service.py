import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Callable, List, Optional

from pydantic import BaseModel

from core.settings import Settings
from data_pipeline.extract import ListingExtractor
from data_pipeline.filters import filter_results
from data_pipeline.models import NormalizedListing, RawListing
from data_pipeline.normalize import normalize_listings
from integrations.sources.base import PageProvider, RenderedPage

log = logging.getLogger(__name__)


# =========================
# SCHEMAS
# =========================

@dataclass(frozen=True)
class ScrapeParameters:
    url: str
    limit: int  # already clamped by the caller
    date_from: Optional[date] = None


class ScrapeMeta(BaseModel):
    source: str
    scraped_at: str
    requested_limit: int
    returned: int
    total_candidates: int
    filtered_by_date: Optional[str] = None


class ScrapeResult(BaseModel):
    success: bool = True
    meta: ScrapeMeta
    items: List[NormalizedListing]


class ScrapeState(str, Enum):
    IDLE = "idle"
    PAGE_ACQUIRED = "page_acquired"
    NAVIGATED = "navigated"
    LISTINGS_SETTLED = "listings_settled"
    SCROLLED = "scrolled"
    EXTRACTED = "extracted"
    NORMALIZED = "normalized"
    FILTERED = "filtered"
    DONE = "done"
    FAILED = "failed"


# =========================
# ORCHESTRATOR
# =========================

class ScrapeOrchestrator:
    """
    page -> navigate -> wait listings -> scroll -> extract -> normalize -> filter

    One page per run(), released on every exit path (the provider's
    context manager). No retries: a failure is reported once.
    """

    def __init__(
        self,
        settings: Settings,
        page_provider: PageProvider,
        extractor: ListingExtractor,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.settings = settings
        self.page_provider = page_provider
        self.extractor = extractor
        self.clock = clock

    async def run(self, params: ScrapeParameters) -> ScrapeResult:
        started_at = time.time()
        state = ScrapeState.IDLE
        log.info(f"[SCRAPE] start url={params.url} limit={params.limit} date_from={params.date_from}")

        try:
            async with self.page_provider.acquire() as page:
                state = self._advance(ScrapeState.PAGE_ACQUIRED)

                await page.navigate(
                    params.url,
                    wait_until=self.settings.navigation_wait_until,
                    timeout_ms=self.settings.navigation_timeout_ms,
                )
                state = self._advance(ScrapeState.NAVIGATED)

                await self._wait_for_listings(page)
                state = self._advance(ScrapeState.LISTINGS_SETTLED)

                await self._scroll(page)
                state = self._advance(ScrapeState.SCROLLED)

                raw: List[RawListing] = await page.evaluate_in_page(self.extractor.extract)
                state = self._advance(ScrapeState.EXTRACTED)

            now = self.clock()

            normalized = normalize_listings(raw, now=now)
            state = self._advance(ScrapeState.NORMALIZED)

            items = filter_results(normalized, params.date_from, params.limit)
            state = self._advance(ScrapeState.FILTERED)

        except asyncio.CancelledError:
            log.warning(f"[SCRAPE][CANCELLED] url={params.url} state={state.value}")
            raise
        except Exception as e:
            log.error(f"[SCRAPE][ERROR] url={params.url} state={state.value} -> {ScrapeState.FAILED.value}: {e}")
            raise

        self._advance(ScrapeState.DONE)
        latency_ms = int((time.time() - started_at) * 1000)
        log.info(
            f"[SCRAPE] done url={params.url} candidates={len(raw)} "
            f"returned={len(items)} latency_ms={latency_ms}"
        )

        return ScrapeResult(
            meta=ScrapeMeta(
                source=params.url,
                scraped_at=now.astimezone().isoformat(),
                requested_limit=params.limit,
                returned=len(items),
                total_candidates=len(raw),
                filtered_by_date=params.date_from.isoformat() if params.date_from else None,
            ),
            items=items,
        )

    # -------------------------
    # PAGE STEPS
    # -------------------------

    async def _wait_for_listings(self, page: RenderedPage) -> None:
        found = await page.wait_for_selector_presence(
            self.extractor.config.card_selectors,
            timeout_ms=self.settings.listings_timeout_ms,
        )
        if not found:
            # no cards is not an error: extraction just returns nothing
            log.warning("[SCRAPE][WARN] listings not detected before timeout, continuing")

    async def _scroll(self, page: RenderedPage) -> None:
        """Fixed number of cycles: lazy loading has no reliable end signal."""
        for _ in range(self.settings.scroll_cycles):
            await page.scroll_by(self.settings.scroll_viewport_factor)
            await page.sleep(self.settings.scroll_pause_ms)

        await page.scroll_to_top()
        await page.sleep(self.settings.settle_pause_ms)

    @staticmethod
    def _advance(state: ScrapeState) -> ScrapeState:
        log.debug(f"[SCRAPE] state={state.value}")
        return state
