# apps/api/src/data_pipeline/selectors.py

import logging
from pathlib import Path
from typing import List, Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

log = logging.getLogger(__name__)

# "R$ 800", "1.234", "99,90"
CURRENCY_PATTERN = r"R\$\s*\d|\d{1,3}(?:\.\d{3})+|\d+,\d{2}"
NOT_DATA_URI_PATTERN = r"^(?!data:)"


# =========================
# SCHEMA
# =========================

class FieldRule(BaseModel):
    """
    One selector attempt for a card field.

    css      -> CSS selector, scoped to the card
    attr     -> read this attribute instead of the text
    pattern  -> value must match (re.search) or the next match is tried
    """

    model_config = ConfigDict(frozen=True)

    css: str
    attr: Optional[str] = None
    pattern: Optional[str] = None


class TitleAttempt(BaseModel):
    """
    heading -> element text is the title, link = enclosing/sibling <a>
    anchor  -> the <a> itself, title = its text (longer than min_length)
    """

    model_config = ConfigDict(frozen=True)

    css: str
    kind: Literal["heading", "anchor"] = "heading"
    min_length: int = 0


class FallbackConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    anchor_selector: str = 'a[href*="olx.com.br"]'
    # ad pages end with the numeric list id: .../iphone-13-128gb-1234567890
    href_pattern: str = r"olx\.com\.br/.+-\d{6,}(?:[/?#]|$)"
    container_selector: str = '[class*="adcard"], li, article, div[class*="card"]'
    min_title_length: int = 5
    max_title_length: int = 150


# =========================
# DEFAULTS (OLX Brasil)
# =========================
# ⚠️ OLX changes its markup often. Three generations are covered here:
#   - current   .olx-adcard__*
#   - lurker    [data-lurker_*] tracking attributes
#   - legacy    #ad-list li / h2 / h3

class ExtractionConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    card_selectors: List[str] = Field(default_factory=lambda: [
        ".olx-adcard",
        "[data-lurker_list_id]",
        "[data-lurker_dimension_listing_id]",
        'section[data-ds-component="DS-AdCard"]',
        "#ad-list > li",
    ])

    title_attempts: List[TitleAttempt] = Field(default_factory=lambda: [
        TitleAttempt(css=".olx-adcard__title, h2", kind="heading"),
        TitleAttempt(css='a[data-lurker-detail="list_id"]', kind="anchor", min_length=5),
        TitleAttempt(css='a[href*="olx.com.br"]', kind="anchor", min_length=5),
    ])

    price_rules: List[FieldRule] = Field(default_factory=lambda: [
        FieldRule(css=".olx-adcard__price", pattern=CURRENCY_PATTERN),
        FieldRule(css="h3", pattern=CURRENCY_PATTERN),
        FieldRule(css='[class*="price"]', pattern=CURRENCY_PATTERN),
    ])

    location_rules: List[FieldRule] = Field(default_factory=lambda: [
        FieldRule(css=".olx-adcard__location"),
        FieldRule(css='[class*="location"]'),
    ])

    date_rules: List[FieldRule] = Field(default_factory=lambda: [
        FieldRule(css="[datetime]", attr="datetime"),
        FieldRule(css=".olx-adcard__date"),
        FieldRule(css='[class*="date"]'),
        FieldRule(css="time"),
    ])

    image_rules: List[FieldRule] = Field(default_factory=lambda: [
        FieldRule(css="img[src]", attr="src", pattern=NOT_DATA_URI_PATTERN),
        FieldRule(css="img[data-src]", attr="data-src", pattern=NOT_DATA_URI_PATTERN),
    ])

    fallback: FallbackConfig = Field(default_factory=FallbackConfig)

    @property
    def card_selector(self) -> str:
        return ", ".join(self.card_selectors)


# =========================
# LOADER
# =========================

def load_extraction_config(path: Optional[Path] = None) -> ExtractionConfig:
    """
    Defaults, optionally overridden by a YAML file (any subset of fields):

        card_selectors: [".new-card"]
        price_rules:
          - {css: ".new-price", pattern: "R\\\\$"}
    """
    if not path:
        return ExtractionConfig()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        log.warning(f"[EXTRACT][WARN] failed to load selectors from {path}: {e}")
        return ExtractionConfig()

    try:
        config = ExtractionConfig.model_validate(data)
    except ValidationError as e:
        log.warning(f"[EXTRACT][WARN] invalid selectors file {path}, using defaults: {e}")
        return ExtractionConfig()

    log.info(f"[EXTRACT] selectors loaded from {path}")
    return config
