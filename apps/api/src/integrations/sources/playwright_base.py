# apps/api/src/integrations/sources/playwright_base.py

import asyncio
import logging
import random
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional, Sequence

from bs4 import BeautifulSoup
from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    async_playwright,
)

from core.errors import NavigationError, ResourceAcquisitionError
from core.settings import Settings
from integrations.sources.base import PageProvider, PageRoutine, RenderedPage

log = logging.getLogger(__name__)


class PlaywrightPage(RenderedPage):
    def __init__(self, page: Page, context: BrowserContext):
        self.page = page
        self.context = context
        self._disposed = False

    async def navigate(self, url: str, wait_until: str, timeout_ms: int) -> None:
        try:
            await self.page.goto(url, wait_until=wait_until, timeout=timeout_ms)
        except PlaywrightError as e:
            raise NavigationError(f"failed to load {url}: {e}") from e

    async def wait_for_selector_presence(self, selectors: Sequence[str], timeout_ms: int) -> bool:
        try:
            await self.page.wait_for_selector(
                ", ".join(selectors),
                state="attached",
                timeout=timeout_ms,
            )
            return True
        except PlaywrightError:
            return False

    async def scroll_by(self, viewport_factor: float) -> None:
        await self.page.evaluate(
            "f => window.scrollBy(0, window.innerHeight * f)",
            viewport_factor,
        )

    async def scroll_to_top(self) -> None:
        await self.page.evaluate("() => window.scrollTo(0, 0)")

    async def sleep(self, ms: int) -> None:
        await self.page.wait_for_timeout(ms)

    async def title(self) -> str:
        return await self.page.title()

    async def evaluate_in_page(self, routine: PageRoutine) -> List:
        html = await self.page.content()
        url = self.page.url
        # parsing + extraction is CPU bound, keep it off the event loop
        return await asyncio.to_thread(lambda: routine(BeautifulSoup(html, "html.parser"), url))

    async def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        await self.context.close()


class PlaywrightBase(PageProvider):
    """
    Headless Chromium, one browser per acquire().

    Holds only configuration, so a single instance can serve concurrent
    requests: every acquire() launches and tears down its own browser.
    """

    def __init__(self, settings: Settings, proxy: Optional[str] = None):
        self.settings = settings
        self.proxy = proxy

    async def launch(self, pw: Playwright) -> Browser:
        return await pw.chromium.launch(
            headless=self.settings.headless,
            args=self.settings.browser_args,
            proxy={"server": self.proxy} if self.proxy else None,
        )

    async def new_page(self, browser: Browser) -> PlaywrightPage:
        context = await browser.new_context(
            user_agent=random.choice(self.settings.user_agents),
            viewport={
                "width": self.settings.viewport_width,
                "height": self.settings.viewport_height,
            },
            locale="pt-BR",
            ignore_https_errors=True,
            extra_http_headers={
                "accept-language": self.settings.accept_language,
                "cache-control": "no-cache",
                "pragma": "no-cache",
            },
        )
        page = await context.new_page()
        return PlaywrightPage(page, context)

    @staticmethod
    async def close(browser: Optional[Browser], pw: Optional[Playwright]) -> None:
        """Never raises, failures are only logged."""
        if browser is not None:
            try:
                await browser.close()
            except Exception as e:
                log.warning(f"[BROWSER][WARN] browser close failed: {e}")
        if pw is not None:
            try:
                await pw.stop()
            except Exception as e:
                log.warning(f"[BROWSER][WARN] playwright stop failed: {e}")
        log.debug("[BROWSER] closed")

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[RenderedPage]:
        pw: Optional[Playwright] = None
        browser: Optional[Browser] = None

        try:
            pw = await async_playwright().start()
            browser = await self.launch(pw)
            page = await self.new_page(browser)
        except Exception as e:
            await self.close(browser, pw)
            raise ResourceAcquisitionError(f"browser/page creation failed: {e}") from e
        except asyncio.CancelledError:
            await self.close(browser, pw)
            raise

        log.debug("[BROWSER] page acquired")
        try:
            yield page
        finally:
            try:
                await page.dispose()
            except Exception as e:
                log.warning(f"[BROWSER][WARN] page dispose failed: {e}")
            await self.close(browser, pw)
