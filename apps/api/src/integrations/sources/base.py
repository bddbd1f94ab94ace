# apps/api/src/integrations/sources/base.py

from abc import ABC, abstractmethod
from typing import AsyncContextManager, Callable, List, Sequence, TypeVar

from bs4 import BeautifulSoup

T = TypeVar("T")

# (document, page_url) -> extracted data
PageRoutine = Callable[[BeautifulSoup, str], T]


class RenderedPage(ABC):
    """
    A rendered browser page, as seen by the scrape flow.

    navigate()  -> raises NavigationError
    wait_*()    -> soft: False on timeout, never raises
    dispose()   -> idempotent
    """

    @abstractmethod
    async def navigate(self, url: str, wait_until: str, timeout_ms: int) -> None:
        pass

    @abstractmethod
    async def wait_for_selector_presence(self, selectors: Sequence[str], timeout_ms: int) -> bool:
        pass

    @abstractmethod
    async def scroll_by(self, viewport_factor: float) -> None:
        pass

    @abstractmethod
    async def scroll_to_top(self) -> None:
        pass

    @abstractmethod
    async def sleep(self, ms: int) -> None:
        pass

    @abstractmethod
    async def title(self) -> str:
        pass

    @abstractmethod
    async def evaluate_in_page(self, routine: PageRoutine) -> List:
        """Run `routine` against the current DOM and return its plain result."""
        pass

    @abstractmethod
    async def dispose(self) -> None:
        pass


class PageProvider(ABC):
    @abstractmethod
    def acquire(self) -> AsyncContextManager[RenderedPage]:
        """
        Scoped page: the page (and whatever backs it) is released on every
        exit path, including errors and cancellation.
        Raises ResourceAcquisitionError if no page can be created.
        """
        pass
