# apps/api/src/core/settings.py

from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Single configuration source for the scraper API.

    - Pydantic v2 (pydantic-settings)
    - reads .env / env vars
    - passed explicitly into the orchestrator and the browser layer
    """

    # =========================
    # APP
    # =========================
    app_name: str = Field(default="olx-scraper-api", alias="APP_NAME")
    app_version: str = Field(default="2.0.0", alias="APP_VERSION")
    env: str = Field(default="local", alias="ENV")
    DEBUG: bool = Field(default=False, alias="DEBUG")

    API_HOST: str = Field(default="0.0.0.0", alias="API_HOST")
    API_PORT: int = Field(default=8000, alias="API_PORT")

    # =========================
    # LOGGING
    # =========================
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_dir: Optional[Path] = Field(default=None, alias="LOG_DIR")

    # =========================
    # TARGET SITE
    # =========================
    olx_base_url: str = Field(
        default="https://www.olx.com.br",
        alias="OLX_BASE_URL",
    )
    selectors_path: Optional[Path] = Field(default=None, alias="SELECTORS_PATH")

    # =========================
    # LIMITS
    # =========================
    default_limit: int = Field(default=20, alias="DEFAULT_LIMIT")
    max_limit: int = Field(default=300, alias="MAX_LIMIT")

    # =========================
    # PAGE FLOW (ms)
    # =========================
    navigation_timeout_ms: int = Field(default=60_000, alias="NAVIGATION_TIMEOUT_MS")
    navigation_wait_until: str = Field(default="networkidle", alias="NAVIGATION_WAIT_UNTIL")
    listings_timeout_ms: int = Field(default=15_000, alias="LISTINGS_TIMEOUT_MS")

    scroll_cycles: int = Field(default=6, alias="SCROLL_CYCLES")
    scroll_pause_ms: int = Field(default=1_500, alias="SCROLL_PAUSE_MS")
    scroll_viewport_factor: float = Field(default=1.5, alias="SCROLL_VIEWPORT_FACTOR")
    settle_pause_ms: int = Field(default=1_000, alias="SETTLE_PAUSE_MS")

    # =========================
    # BROWSER
    # =========================
    headless: bool = Field(default=True, alias="HEADLESS")
    browser_args: List[str] = Field(
        default=[
            "--no-sandbox",
            "--disable-setuid-sandbox",
            "--disable-dev-shm-usage",
            "--disable-accelerated-2d-canvas",
            "--no-first-run",
            "--disable-gpu",
            "--disable-blink-features=AutomationControlled",
        ],
        alias="BROWSER_ARGS",
    )
    viewport_width: int = Field(default=1280, alias="VIEWPORT_WIDTH")
    viewport_height: int = Field(default=800, alias="VIEWPORT_HEIGHT")
    user_agents: List[str] = Field(
        default=[
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
            "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        ],
        alias="USER_AGENTS",
    )
    accept_language: str = Field(
        default="pt-BR,pt;q=0.9,en;q=0.8",
        alias="ACCEPT_LANGUAGE",
    )

    # =========================
    # HEALTH
    # =========================
    health_check_url: str = Field(
        default="https://www.olx.com.br/celulares?q=iphone&sf=1",
        alias="HEALTH_CHECK_URL",
    )
    health_check_timeout_ms: int = Field(default=15_000, alias="HEALTH_CHECK_TIMEOUT_MS")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
        frozen=True,
    )

    def clamp_limit(self, limit: int) -> int:
        return max(1, min(self.max_limit, limit))


settings = Settings()
