# apps/api/src/data_pipeline/extract.py

import logging
import re
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Set, Tuple
from urllib.parse import urljoin

import soupsieve as sv
from bs4 import Tag

from data_pipeline.models import RawListing, PRICE_NOT_INFORMED, LOCATION_NOT_INFORMED
from data_pipeline.normalize import clean_text
from data_pipeline.selectors import ExtractionConfig, FieldRule, TitleAttempt

log = logging.getLogger(__name__)

ANY_ANCHOR = sv.compile("a[href]")


# =========================
# FIELD EXTRACTORS
# =========================

class FieldExtractor(ABC):
    """
    Reads one field from a card. Every element matching `css` is tried
    in document order; the first acceptable non-empty value wins.
    """

    def __init__(self, css: str):
        self.css = css
        self._matcher = sv.compile(css)

    def extract(self, scope: Tag) -> Optional[str]:
        for node in self._matcher.select(scope):
            value = self.read(node)
            if value and self.accepts(value):
                return value
        return None

    @abstractmethod
    def read(self, node: Tag) -> Optional[str]:
        ...

    def accepts(self, value: str) -> bool:
        return True

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.css!r})"


class TextSelector(FieldExtractor):
    def read(self, node: Tag) -> Optional[str]:
        return clean_text(node.get_text(" "))


class AttributeSelector(FieldExtractor):
    def __init__(self, css: str, attr: str):
        super().__init__(css)
        self.attr = attr

    def read(self, node: Tag) -> Optional[str]:
        value = node.get(self.attr)
        if isinstance(value, list):
            value = " ".join(value)
        return clean_text(value)


class RegexValidatedSelector(FieldExtractor):
    """Wraps another extractor; values not matching `pattern` fall through."""

    def __init__(self, inner: FieldExtractor, pattern: str):
        super().__init__(inner.css)
        self.inner = inner
        self.pattern = re.compile(pattern)

    def read(self, node: Tag) -> Optional[str]:
        return self.inner.read(node)

    def accepts(self, value: str) -> bool:
        return bool(self.pattern.search(value))


def build_field_extractor(rule: FieldRule) -> FieldExtractor:
    extractor: FieldExtractor
    if rule.attr:
        extractor = AttributeSelector(rule.css, rule.attr)
    else:
        extractor = TextSelector(rule.css)

    if rule.pattern:
        extractor = RegexValidatedSelector(extractor, rule.pattern)
    return extractor


def first_value(extractors: Sequence[FieldExtractor], scope: Tag) -> Optional[str]:
    for extractor in extractors:
        value = extractor.extract(scope)
        if value:
            return value
    return None


# =========================
# LISTING EXTRACTOR
# =========================

class ListingExtractor:
    """
    Rendered results page -> RawListing list.

    1) primary: listing cards (config.card_selectors), fields via rule cascades
    2) fallback: only if (1) found nothing, scan ad-looking anchors and read
       the fields from the closest card-like ancestor

    Pure function of (document, base_url). The document is a BeautifulSoup
    tree of the live page markup.
    """

    def __init__(self, config: Optional[ExtractionConfig] = None):
        self.config = config or ExtractionConfig()

        self._cards = sv.compile(self.config.card_selector)
        self._title_attempts: List[Tuple[TitleAttempt, sv.SoupSieve]] = [
            (attempt, sv.compile(attempt.css)) for attempt in self.config.title_attempts
        ]

        self._price = [build_field_extractor(r) for r in self.config.price_rules]
        self._location = [build_field_extractor(r) for r in self.config.location_rules]
        self._date = [build_field_extractor(r) for r in self.config.date_rules]
        self._image = [build_field_extractor(r) for r in self.config.image_rules]

        fallback = self.config.fallback
        self._fallback_anchors = sv.compile(fallback.anchor_selector)
        self._fallback_href = re.compile(fallback.href_pattern)
        self._fallback_container = sv.compile(fallback.container_selector)

    # -------------------------
    # ENTRY
    # -------------------------

    def extract(self, document: Tag, base_url: str = "") -> List[RawListing]:
        seen: Set[str] = set()

        listings = self._extract_cards(document, base_url, seen)
        if listings:
            log.info(f"[EXTRACT] primary strategy: {len(listings)} listings")
            return listings

        log.info("[EXTRACT] primary strategy found nothing, trying fallback")
        listings = self._extract_fallback(document, base_url, seen)
        log.info(f"[EXTRACT] fallback strategy: {len(listings)} listings")
        return listings

    # -------------------------
    # PRIMARY
    # -------------------------

    def _extract_cards(self, document: Tag, base_url: str, seen: Set[str]) -> List[RawListing]:
        cards = self._cards.select(document)
        log.debug(f"[EXTRACT] candidate cards: {len(cards)}")

        listings: List[RawListing] = []
        for index, card in enumerate(cards, start=1):
            try:
                listing = self._read_card(card, base_url, seen)
            except Exception as e:
                log.warning(f"[EXTRACT][WARN] card {index} skipped: {e}")
                continue

            if listing:
                listings.append(listing)

        return listings

    def _read_card(self, card: Tag, base_url: str, seen: Set[str]) -> Optional[RawListing]:
        pair = self._find_title_and_link(card, base_url)
        if not pair:
            return None

        title, link = pair
        if link in seen:
            return None
        seen.add(link)

        return self._build_listing(title, link, card, base_url)

    def _find_title_and_link(self, card: Tag, base_url: str) -> Optional[Tuple[str, str]]:
        for attempt, matcher in self._title_attempts:
            for node in matcher.select(card):
                title = clean_text(node.get_text(" "))
                if len(title) <= attempt.min_length:
                    continue

                anchor = self._anchor_for(node, attempt.kind)
                href = (anchor.get("href") or "").strip() if anchor else ""
                if href:
                    return title, urljoin(base_url, href)

        return None

    @staticmethod
    def _anchor_for(node: Tag, kind: str) -> Optional[Tag]:
        if node.name == "a" and node.get("href"):
            return node

        anchor = ANY_ANCHOR.closest(node)
        if anchor is None and kind == "heading" and node.parent is not None:
            anchor = ANY_ANCHOR.select_one(node.parent)
        return anchor

    # -------------------------
    # FIELDS
    # -------------------------

    def _build_listing(self, title: str, link: str, scope: Optional[Tag], base_url: str) -> RawListing:
        if scope is None:
            return RawListing(title=title, link=link)

        image = first_value(self._image, scope)
        if image:
            image = urljoin(base_url, image)
        if image and image.startswith("data:"):
            image = None

        return RawListing(
            title=title,
            link=link,
            price_text=first_value(self._price, scope) or PRICE_NOT_INFORMED,
            location=first_value(self._location, scope) or LOCATION_NOT_INFORMED,
            date_text=first_value(self._date, scope),
            image=image,
        )

    # -------------------------
    # FALLBACK
    # -------------------------

    def _extract_fallback(self, document: Tag, base_url: str, seen: Set[str]) -> List[RawListing]:
        fallback = self.config.fallback
        listings: List[RawListing] = []

        for anchor in self._fallback_anchors.select(document):
            href = (anchor.get("href") or "").strip()
            if not href:
                continue

            link = urljoin(base_url, href)
            if link in seen or not self._fallback_href.search(link):
                continue

            title = clean_text(anchor.get_text(" "))
            if not fallback.min_title_length < len(title) < fallback.max_title_length:
                continue

            try:
                container = self._fallback_container.closest(anchor)
                listing = self._build_listing(title, link, container, base_url)
            except Exception as e:
                log.warning(f"[EXTRACT][WARN] fallback anchor skipped ({link}): {e}")
                continue

            seen.add(link)
            listings.append(listing)

        return listings
