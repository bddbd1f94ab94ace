from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

import pytest
from bs4 import BeautifulSoup

from core.settings import Settings
from data_pipeline.extract import ListingExtractor
from integrations.sources.base import PageProvider, PageRoutine, RenderedPage
from services.scrape_service import ScrapeOrchestrator

FIXTURES = Path(__file__).parent / "fixtures"
PAGE_URL = "https://www.olx.com.br/celulares/estado-mg?q=iphone"
FIXED_NOW = datetime(2024, 11, 20, 15, 0, 0)


def load_fixture(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8")


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


class FakePage(RenderedPage):
    """Serves fixture HTML through the same contract as the Playwright page."""

    def __init__(
        self,
        html: str,
        url: str = PAGE_URL,
        listings_present: bool = True,
        title: str = "Celulares em MG | OLX",
        navigation_error: Optional[BaseException] = None,
        evaluate_error: Optional[BaseException] = None,
    ):
        self.html = html
        self.url = url
        self.listings_present = listings_present
        self._title = title
        self.navigation_error = navigation_error
        self.evaluate_error = evaluate_error
        self.calls: List[tuple] = []
        self.disposed = 0

    async def navigate(self, url: str, wait_until: str, timeout_ms: int) -> None:
        self.calls.append(("navigate", url, wait_until, timeout_ms))
        if self.navigation_error:
            raise self.navigation_error

    async def wait_for_selector_presence(self, selectors: Sequence[str], timeout_ms: int) -> bool:
        self.calls.append(("wait", tuple(selectors), timeout_ms))
        return self.listings_present

    async def scroll_by(self, viewport_factor: float) -> None:
        self.calls.append(("scroll_by", viewport_factor))

    async def scroll_to_top(self) -> None:
        self.calls.append(("scroll_to_top",))

    async def sleep(self, ms: int) -> None:
        self.calls.append(("sleep", ms))

    async def title(self) -> str:
        return self._title

    async def evaluate_in_page(self, routine: PageRoutine) -> List:
        self.calls.append(("evaluate",))
        if self.evaluate_error:
            raise self.evaluate_error
        return routine(parse_html(self.html), self.url)

    async def dispose(self) -> None:
        self.disposed += 1


class FakeProvider(PageProvider):
    def __init__(self, page: Optional[FakePage] = None, acquire_error: Optional[Exception] = None):
        self.page = page
        self.acquire_error = acquire_error
        self.acquired = 0

    @asynccontextmanager
    async def acquire(self):
        if self.acquire_error:
            raise self.acquire_error
        self.acquired += 1
        try:
            yield self.page
        finally:
            await self.page.dispose()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(scroll_cycles=3, scroll_pause_ms=10, settle_pause_ms=5)


@pytest.fixture
def cards_html() -> str:
    return load_fixture("cards.html")


@pytest.fixture
def fallback_html() -> str:
    return load_fixture("fallback.html")


def make_orchestrator(settings: Settings, provider: PageProvider) -> ScrapeOrchestrator:
    return ScrapeOrchestrator(
        settings,
        provider,
        ListingExtractor(),
        clock=lambda: FIXED_NOW,
    )
