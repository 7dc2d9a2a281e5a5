"""
Configuration via environment variables.
"""

import json
from functools import lru_cache
from typing import Any, List, Optional, Union

from pydantic import field_validator
from pydantic_settings import BaseSettings

from careerfetch.fetchers.browser import DEFAULT_BROWSER_ARGS, BrowserConfig
from careerfetch.models import TargetConfig


def _parse_list(v: Any) -> List[str]:
    """Parse a list setting from a JSON string or comma-separated string."""
    if v is None:
        return []
    if isinstance(v, (list, tuple)):
        return [x.strip() for x in v if isinstance(x, str) and x.strip()]
    if isinstance(v, str):
        if not v.strip():
            return []
        # Try JSON list first
        try:
            parsed = json.loads(v)
            if isinstance(parsed, list):
                return [x.strip() for x in parsed if isinstance(x, str) and x.strip()]
        except (json.JSONDecodeError, TypeError):
            pass
        # Fallback: comma-separated
        return [x.strip() for x in v.split(",") if x.strip()]
    return []


class Settings(BaseSettings):
    """careerfetch settings loaded from environment variables."""

    # Target
    company_id: str = ""
    careers_url: str = ""
    api_base_url: str = ""
    timeout_ms: int = 30000
    max_retries: int = 3

    # Browser
    headless: bool = True
    user_agent: str = BrowserConfig.user_agent
    # NOTE: Union[...] prevents pydantic-settings from crashing on non-JSON env strings.
    browser_args: Union[str, List[str], None] = list(DEFAULT_BROWSER_ARGS)
    debug: bool = False
    wait_for_selector: str = BrowserConfig.wait_for_selector
    screenshot_dir: str = BrowserConfig.screenshot_dir

    # Delivery
    webhook_url: Optional[str] = None
    webhook_secret: Optional[str] = None

    # Logging
    log_level: str = "INFO"

    @field_validator("browser_args", mode="before")
    @classmethod
    def parse_browser_args(cls, v: Any) -> List[str]:
        return _parse_list(v)

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v: Any) -> str:
        return str(v or "INFO").strip().upper()

    def to_target_config(self) -> TargetConfig:
        """Raises ValueError when company_id is missing."""
        return TargetConfig(
            company_id=self.company_id,
            careers_url=self.careers_url,
            api_base_url=self.api_base_url,
            timeout_ms=self.timeout_ms,
            max_retries=self.max_retries,
        )

    def to_browser_config(self) -> BrowserConfig:
        return BrowserConfig(
            headless=self.headless,
            wait_for_selector=self.wait_for_selector,
            debug=self.debug,
            user_agent=self.user_agent,
            browser_args=list(self.browser_args or []),
            screenshot_dir=self.screenshot_dir,
        )

    class Config:
        env_prefix = "CAREERFETCH_"
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
