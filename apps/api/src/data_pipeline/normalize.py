import logging
import math
import re
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

from data_pipeline.models import NormalizedListing, RawListing, PRICE_NOT_INFORMED

log = logging.getLogger(__name__)

SCRAPED_AT_FORMAT = "%Y-%m-%d %H:%M:%S"


# =========================
# TEXT HELPERS
# =========================

def clean_text(text: Optional[str]) -> str:
    return re.sub(r"\s+", " ", text or "").strip()


def _start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


# =========================
# PRICE
# =========================

# 1.234,56 | 800 | 12.500
PRICE_RE = re.compile(r"(\d{1,3}(?:\.\d{3})*(?:,\d+)?)")


def parse_price(text: Optional[str]) -> Optional[float]:
    """
    "R$ 1.234,56" -> 1234.56

    None for the sentinel, for text without a number and for zero:
    a zero price on the marketplace means "not informed" as well.
    """
    if not text or text == PRICE_NOT_INFORMED:
        return None

    m = PRICE_RE.search(text)
    if not m:
        return None

    try:
        value = float(m.group(1).replace(".", "").replace(",", "."))
    except ValueError:
        return None

    if math.isnan(value) or value == 0:
        return None
    return value


# =========================
# RELATIVE DATES (pt-BR)
# =========================

DAYS_RE = re.compile(r"(\d+)\s*dias?")
HOURS_RE = re.compile(r"(\d+)\s*horas?")
LITERAL_DATE_RE = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4}|\d{2})(?!\d)")
ISO_DATE_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})")


def parse_relative_date(text: Optional[str], now: Optional[datetime] = None) -> Optional[datetime]:
    """
    Portuguese posting-date phrases -> absolute datetime.

    Rules, first match wins:
      "hoje"          -> today 00:00
      "ontem"         -> yesterday 00:00
      "3 dias"        -> today - 3 days, 00:00
      "2 horas"       -> now - 2 hours (time of day kept)
      "15/11/2024"    -> that day 00:00 (day first; 2-digit years use %y)
      "2024-11-15..." -> that day 00:00 (datetime attributes)

    Anything else -> None.
    """
    if not text:
        return None

    t = text.strip().lower()
    if not t:
        return None

    now = now or datetime.now()

    if "hoje" in t:
        return _start_of_day(now)

    if "ontem" in t:
        return _start_of_day(now - timedelta(days=1))

    m = DAYS_RE.search(t)
    if m:
        return _start_of_day(now - timedelta(days=int(m.group(1))))

    m = HOURS_RE.search(t)
    if m:
        return now - timedelta(hours=int(m.group(1)))

    m = LITERAL_DATE_RE.search(t)
    if m:
        day, month, year = m.groups()
        fmt = "%d/%m/%Y" if len(year) == 4 else "%d/%m/%y"
        try:
            return datetime.strptime(f"{day}/{month}/{year}", fmt)
        except ValueError:
            return None

    m = ISO_DATE_RE.match(t)
    if m:
        try:
            return datetime.strptime(m.group(1), "%Y-%m-%d")
        except ValueError:
            return None

    return None


def parse_date_filter(value: Optional[str]) -> Optional[date]:
    """
    `date_from` query param: YYYY-MM-DD or DD/MM/YYYY.
    Unparseable -> None (no date filter).
    """
    value = (value or "").strip()
    if not value:
        return None

    for fmt in ("%Y-%m-%d", "%d/%m/%Y"):
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue

    log.warning(f"[NORMALIZE][WARN] ignoring unparseable date_from={value!r}")
    return None


# =========================
# MAIN NORMALIZE
# =========================

def normalize_listing(raw: RawListing, position: int, scraped_at: str, now: datetime) -> NormalizedListing:
    parsed_date = parse_relative_date(raw.date_text, now=now) if raw.date_text else None

    return NormalizedListing(
        id=position,
        title=raw.title,
        price_text=raw.price_text,
        price=parse_price(raw.price_text),
        link=raw.link,
        location=raw.location,
        image=raw.image,
        date_text=raw.date_text,
        date_parsed=parsed_date.date().isoformat() if parsed_date else None,
        scraped_at=scraped_at,
    )


def normalize_listings(raw_listings: Iterable[RawListing], now: Optional[datetime] = None) -> List[NormalizedListing]:
    """
    Normalize pipeline:
    - order preserved, id = 1-based position
    - price / date parsed per item, failures -> None
    - one scraped_at for the whole batch
    """
    now = now or datetime.now()
    scraped_at = now.strftime(SCRAPED_AT_FORMAT)

    normalized = [
        normalize_listing(raw, position, scraped_at, now)
        for position, raw in enumerate(raw_listings, start=1)
    ]

    parsed_dates = sum(1 for item in normalized if item.date_parsed)
    parsed_prices = sum(1 for item in normalized if item.price is not None)
    log.debug(
        f"[NORMALIZE] items={len(normalized)} "
        f"dates={parsed_dates} prices={parsed_prices}"
    )
    return normalized
