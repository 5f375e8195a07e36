import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    source_host: str = Field("www.mindfulchef.com", alias="SOURCE_HOST")
    fetch_timeout_ms: int = Field(60000, alias="FETCH_TIMEOUT_MS")
    scraper_user_agent: str = Field(
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/115.0.0.0 Safari/537.36",
        alias="SCRAPER_USER_AGENT",
    )
    # "playwright" renders the page; "http" fetches the raw server response
    fetch_backend: Literal["playwright", "http"] = Field("playwright", alias="FETCH_BACKEND")
    fetch_block_resources: bool = Field(True, alias="FETCH_BLOCK_RESOURCES")
    browser_headless: bool = Field(True, alias="BROWSER_HEADLESS")
    # 0 launches a fresh browser for every fetch
    browser_pool_size: int = Field(0, alias="BROWSER_POOL_SIZE")
    split_narrative_instructions: bool = Field(True, alias="SPLIT_NARRATIVE_INSTRUCTIONS")
    static_output_dir: Path = Field(Path("public/recipes"), alias="STATIC_OUTPUT_DIR")
    rate_limit_window_seconds: int = Field(60, alias="RATE_LIMIT_WINDOW_SECONDS")
    rate_limit_max_requests: int = Field(5, alias="RATE_LIMIT_MAX_REQUESTS")

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")


logger = logging.getLogger(__name__)


@lru_cache
def get_settings() -> Settings:
    try:
        settings = Settings()
    except PermissionError:
        logger.warning("Unable to read .env; continuing with environment variables only")
        settings = Settings(_env_file=None)
    return settings
