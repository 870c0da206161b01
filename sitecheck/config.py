from pydantic_settings import BaseSettings
from typing import List
import os

from sitecheck.services.fetcher import FetchConfig
from sitecheck.services.renderer import BrowserConfig, SANDBOX_ARGS


# Checked in order after the explicit overrides
BROWSER_CANDIDATE_PATHS = [
    "/usr/bin/google-chrome",
    "/usr/bin/chromium-browser",
    "/usr/bin/chromium",
]


class Settings(BaseSettings):
    PROJECT_NAME: str = "sitecheck"
    VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"

    HOST: str = "0.0.0.0"
    PORT: int = 3000

    CORS_ORIGINS: str = "http://localhost:3000,https://localhost:3000"

    LOG_LEVEL: str = "INFO"

    # HTTP fetching
    USER_AGENT: str = "sitecheck/0.1 (+website checker)"
    PAGE_TIMEOUT_SECONDS: float = 30.0
    PROBE_TIMEOUT_SECONDS: float = 5.0
    TLS_TIMEOUT_SECONDS: float = 10.0
    MAX_REDIRECTS: int = 5

    # Checks and crawling
    LINK_SAMPLE_SIZE: int = 5
    CRAWL_CONCURRENCY: int = 5
    PAGE_LOAD_THRESHOLD_MS: int = 3000

    # Headless browser
    RENDERER_ENABLED: bool = True
    CHROME_PATH: str | None = None
    PUPPETEER_EXECUTABLE_PATH: str | None = None
    BROWSER_HEADLESS: bool = True
    NAVIGATION_TIMEOUT_MS: int = 90000

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def cors_origins_list(self) -> List[str]:
        if isinstance(self.CORS_ORIGINS, str):
            return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]
        return self.CORS_ORIGINS

    def resolve_browser_path(self) -> str | None:
        """First configured or installed browser executable, else None (bundled Chromium)."""
        if self.CHROME_PATH:
            return self.CHROME_PATH
        if self.PUPPETEER_EXECUTABLE_PATH:
            return self.PUPPETEER_EXECUTABLE_PATH
        for path in BROWSER_CANDIDATE_PATHS:
            if os.path.exists(path):
                return path
        return None

    def browser_config(self) -> BrowserConfig:
        return BrowserConfig(
            enabled=self.RENDERER_ENABLED,
            executable_path=self.resolve_browser_path(),
            headless=self.BROWSER_HEADLESS,
            args=SANDBOX_ARGS,
            navigation_timeout_ms=self.NAVIGATION_TIMEOUT_MS,
        )

    def fetch_config(self) -> FetchConfig:
        return FetchConfig(
            user_agent=self.USER_AGENT,
            page_timeout=self.PAGE_TIMEOUT_SECONDS,
            probe_timeout=self.PROBE_TIMEOUT_SECONDS,
            tls_timeout=self.TLS_TIMEOUT_SECONDS,
            max_redirects=self.MAX_REDIRECTS,
        )


settings = Settings()
