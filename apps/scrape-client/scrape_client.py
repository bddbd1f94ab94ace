"""
Command-line client for a running scraper API.

    python scrape_client.py "https://www.olx.com.br/celulares/estado-mg" 20
    python scrape_client.py "https://www.olx.com.br/celulares/estado-mg?sf=1" 30 2024-11-15
"""

import argparse
import sys
import time
from typing import Dict, List, Optional

import requests

DEFAULT_API = "http://localhost:8000"
REQUEST_TIMEOUT_SEC = 180


# =========================
# FORMAT
# =========================

def _truncate(value: str, size: int = 60) -> str:
    return value if len(value) <= size else value[:size] + "..."


def format_price(item: Dict) -> str:
    price = item.get("price")
    parsed = f"R$ {price:,.2f}" if price is not None else "N/A"
    return f"{item.get('price_text')} ({parsed})"


def format_item(position: int, item: Dict) -> List[str]:
    lines = [
        f"{position}. {item.get('title')}",
        f"   Preço: {format_price(item)}",
        f"   Local: {item.get('location') or 'N/A'}",
        f"   Data: {item.get('date_parsed') or item.get('date_text') or 'N/A'}",
        f"   Link: {_truncate(item.get('link') or '')}",
    ]
    if item.get("image"):
        lines.append(f"   Imagem: {_truncate(item['image'])}")
    return lines


def format_report(result: Dict, elapsed_ms: int) -> List[str]:
    meta = result.get("meta", {})
    lines = [
        "Metadata:",
        f"   Total candidates: {meta.get('total_candidates')}",
        f"   Returned: {meta.get('returned')}/{meta.get('requested_limit')}",
        f"   Scraped at: {meta.get('scraped_at')}",
        f"   Time: {elapsed_ms}ms",
        "",
    ]

    items = result.get("items") or []
    if not items:
        lines.append("No items found")
        return lines

    lines.append("Items:")
    lines.append("")
    for position, item in enumerate(items, start=1):
        lines.extend(format_item(position, item))
        lines.append("")
    return lines


# =========================
# MAIN
# =========================

def build_params(url: str, limit: int, date_from: Optional[str]) -> Dict[str, str]:
    params = {"url": url, "limit": str(limit)}
    if date_from:
        params["date_from"] = date_from
    return params


def run(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Test the OLX scraper API")
    parser.add_argument("url", help="OLX listing page URL")
    parser.add_argument("limit", nargs="?", type=int, default=20)
    parser.add_argument("date_from", nargs="?", default=None, help="YYYY-MM-DD or DD/MM/YYYY")
    parser.add_argument("--api", default=DEFAULT_API, help=f"API base URL (default: {DEFAULT_API})")
    args = parser.parse_args(argv)

    endpoint = f"{args.api.rstrip('/')}/scrape"
    params = build_params(args.url, args.limit, args.date_from)

    print(f"Target URL: {args.url}")
    print(f"Limit: {args.limit}")
    if args.date_from:
        print(f"Date from: {args.date_from}")
    print("Scraping...\n")

    started_at = time.time()
    try:
        resp = requests.get(endpoint, params=params, timeout=REQUEST_TIMEOUT_SEC)
    except requests.RequestException as e:
        print(f"Connection error: {e}", file=sys.stderr)
        print(f"Make sure the server is running on {args.api}", file=sys.stderr)
        return 1

    elapsed_ms = int((time.time() - started_at) * 1000)

    try:
        result = resp.json()
    except ValueError:
        print(f"Parse error, response: {resp.text}", file=sys.stderr)
        return 1

    if resp.status_code != 200:
        print(f"Error ({resp.status_code}): {result}", file=sys.stderr)
        return 1

    print("\n".join(format_report(result, elapsed_ms)))
    return 0


if __name__ == "__main__":
    sys.exit(run())
