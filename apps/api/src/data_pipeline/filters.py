# apps/api/src/data_pipeline/filters.py

from datetime import date
from typing import List, Optional, Sequence

from data_pipeline.models import NormalizedListing


def matches_min_date(item: NormalizedListing, min_date: Optional[date]) -> bool:
    """
    Items without a parsed date are always kept:
    an unknown date is not a reason to drop an ad.
    """
    if min_date is None or not item.date_parsed:
        return True
    return date.fromisoformat(item.date_parsed) >= min_date


def dedupe_by_link(items: Sequence[NormalizedListing]) -> List[NormalizedListing]:
    seen = set()
    unique: List[NormalizedListing] = []

    for item in items:
        if item.link in seen:
            continue
        seen.add(item.link)
        unique.append(item)

    return unique


def filter_results(
    items: Sequence[NormalizedListing],
    min_date: Optional[date],
    limit: int,
) -> List[NormalizedListing]:
    """
    date filter -> dedup by link (first wins) -> truncate.
    `limit` is expected to be clamped by the caller.
    """
    kept = [item for item in items if matches_min_date(item, min_date)]
    unique = dedupe_by_link(kept)
    return unique[: max(limit, 0)]
