# apps/api/src/api/v1/deps.py

import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Optional

import soupsieve as sv
from fastapi import Depends

from core.settings import settings
from data_pipeline.extract import ListingExtractor
from data_pipeline.selectors import load_extraction_config
from integrations.sources.base import PageProvider
from integrations.sources.playwright_base import PlaywrightBase
from services.scrape_service import ScrapeOrchestrator

log = logging.getLogger(__name__)


def build_listing_extractor(selectors_path: Optional[Path] = None) -> ListingExtractor:
    """Configured selectors, or the built-in ones when they do not compile."""
    config = load_extraction_config(selectors_path)
    try:
        return ListingExtractor(config)
    except (sv.SelectorSyntaxError, re.error) as e:
        log.warning(f"[EXTRACT][WARN] bad selector in {selectors_path}, using defaults: {e}")
        return ListingExtractor()


@lru_cache(maxsize=1)
def get_extractor() -> ListingExtractor:
    # selectors are read once per process; restart to pick up a new file
    return build_listing_extractor(settings.selectors_path)


def get_page_provider() -> PageProvider:
    return PlaywrightBase(settings)


def get_orchestrator(
    page_provider: PageProvider = Depends(get_page_provider),
    extractor: ListingExtractor = Depends(get_extractor),
) -> ScrapeOrchestrator:
    return ScrapeOrchestrator(settings, page_provider, extractor)
