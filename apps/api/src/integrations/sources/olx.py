# apps/api/src/integrations/sources/olx.py

from typing import Optional
from urllib.parse import quote, urlencode

OLX_BASE_URL = "https://www.olx.com.br"
ALL_STATES = "all"


def build_search_url(
    q: str,
    state: Optional[str] = "mg",
    category: Optional[str] = None,
    base_url: str = OLX_BASE_URL,
) -> str:
    """
    https://www.olx.com.br/celulares/estado-mg?q=iphone&sf=1

    - category -> first path segment
    - state    -> estado-<uf> segment, skipped for "all"
    - sf=1     -> newest first (only with a state, like the site does)
    """
    url = base_url.rstrip("/")

    category = (category or "").strip().strip("/")
    if category:
        url += "/" + quote(category)

    state = (state or "").strip().lower()
    params = {"q": q}
    if state and state != ALL_STATES:
        url += "/estado-" + quote(state)
        params["sf"] = "1"

    return f"{url}?{urlencode(params)}"
