# apps/api/src/data_pipeline/models.py

from typing import Optional

from pydantic import BaseModel, ConfigDict

PRICE_NOT_INFORMED = "Preço não informado"
LOCATION_NOT_INFORMED = "Localização não informada"


# =========================
# RAW (extract stage)
# =========================

class RawListing(BaseModel):
    """
    One ad card as read from the rendered page.
    Text fields are human-readable, nothing is parsed yet.
    """

    model_config = ConfigDict(frozen=True)

    title: str
    price_text: str = PRICE_NOT_INFORMED
    link: str
    location: str = LOCATION_NOT_INFORMED
    date_text: Optional[str] = None
    image: Optional[str] = None


# =========================
# NORMALIZED (API response)
# =========================

class NormalizedListing(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    price_text: str
    price: Optional[float] = None
    link: str
    location: str
    image: Optional[str] = None
    date_text: Optional[str] = None
    date_parsed: Optional[str] = None  # YYYY-MM-DD
    scraped_at: str
