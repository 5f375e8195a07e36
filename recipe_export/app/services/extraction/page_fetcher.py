"""Rendered page fetching and source URL validation."""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional, Protocol
from urllib.parse import urlparse

import httpx
from playwright.async_api import Browser, Playwright, Route, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from recipe_export.app.core.config import Settings, get_settings
from recipe_export.app.core.errors import FetchError, FetchTimeoutError, InvalidInputError

logger = logging.getLogger(__name__)

BLOCKED_RESOURCE_TYPES = {"image", "stylesheet", "font", "media"}

BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
]

# Live form state is not serialized by page.content(); mirror it into attributes.
REFLECT_CHECKED_JS = """
() => {
  document.querySelectorAll('input').forEach((el) => {
    if (el.checked) { el.setAttribute('checked', ''); } else { el.removeAttribute('checked'); }
  });
}
"""


def validate_source_url(url: str, settings: Optional[Settings] = None) -> str:
    """Reject anything that is not an https URL on the supported site."""
    settings = settings or get_settings()
    if not url or not isinstance(url, str):
        raise InvalidInputError("Invalid URL provided")
    parsed = urlparse(url.strip())
    if parsed.scheme != "https" or (parsed.hostname or "").lower() != settings.source_host.lower():
        raise InvalidInputError(
            f"Only recipe URLs from https://{settings.source_host}/ are supported"
        )
    return url.strip()


class PageFetcher(Protocol):
    async def fetch_rendered_markup(self, url: str, timeout_ms: int) -> str:  # pragma: no cover - interface
        ...


class BrowserPool:
    """A fixed set of headless browsers shared between requests.

    A browser serves one fetch at a time; separate browsers run in parallel.
    """

    def __init__(self, size: int, settings: Optional[Settings] = None):
        if size < 1:
            raise ValueError("Browser pool size must be at least 1")
        self.size = size
        self.settings = settings or get_settings()
        self._playwright: Optional[Playwright] = None
        self._browsers: List[Browser] = []
        self._idle: "asyncio.Queue[Browser]" = asyncio.Queue()

    async def _launch(self) -> Browser:
        browser = await self._playwright.chromium.launch(
            headless=self.settings.browser_headless, args=BROWSER_ARGS
        )
        self._browsers.append(browser)
        return browser

    async def start(self) -> None:
        self._playwright = await async_playwright().start()
        for _ in range(self.size):
            self._idle.put_nowait(await self._launch())
        logger.info("Started browser pool with %d instances", self.size)

    async def _replace(self, browser: Browser) -> Browser:
        """Relaunch a browser that crashed or lost its connection."""
        try:
            replacement = await self._launch()
        except PlaywrightError as exc:
            # Keep the dead instance queued; the next release retries the relaunch.
            logger.warning("Failed to relaunch disconnected browser: %s", exc)
            return browser
        self._browsers.remove(browser)
        logger.warning("Replaced disconnected browser in pool")
        return replacement

    async def close(self) -> None:
        for browser in self._browsers:
            try:
                await browser.close()
            except PlaywrightError as exc:
                logger.warning("Failed to close pooled browser: %s", exc)
        self._browsers = []
        self._idle = asyncio.Queue()
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[Browser]:
        browser = await self._idle.get()
        try:
            yield browser
        finally:
            if not browser.is_connected() and self._playwright is not None:
                browser = await self._replace(browser)
            self._idle.put_nowait(browser)


async def _block_non_essential(route: Route) -> None:
    if route.request.resource_type in BLOCKED_RESOURCE_TYPES:
        await route.abort()
    else:
        await route.continue_()


class PlaywrightPageFetcher:
    """Loads a page in headless Chromium and returns the post-script markup."""

    def __init__(self, settings: Optional[Settings] = None, pool: Optional[BrowserPool] = None):
        self.settings = settings or get_settings()
        self.pool = pool

    async def fetch_rendered_markup(self, url: str, timeout_ms: int) -> str:
        try:
            if self.pool is not None:
                async with self.pool.acquire() as browser:
                    return await self._render(browser, url, timeout_ms)
            async with async_playwright() as p:
                browser = await p.chromium.launch(
                    headless=self.settings.browser_headless, args=BROWSER_ARGS
                )
                try:
                    return await self._render(browser, url, timeout_ms)
                finally:
                    await browser.close()
        except PlaywrightTimeoutError as exc:
            logger.warning("Timed out rendering %s after %dms", url, timeout_ms)
            raise FetchTimeoutError(f"Timed out loading {url}") from exc
        except PlaywrightError as exc:
            logger.warning("Failed to render %s: %s", url, exc)
            raise FetchError(f"Failed to load {url}: {exc.message}") from exc

    async def _render(self, browser: Browser, url: str, timeout_ms: int) -> str:
        context = await browser.new_context(user_agent=self.settings.scraper_user_agent)
        try:
            page = await context.new_page()
            page.set_default_timeout(timeout_ms)
            if self.settings.fetch_block_resources:
                await page.route("**/*", _block_non_essential)

            response = await page.goto(url, wait_until="networkidle", timeout=timeout_ms)
            if response is None:
                raise FetchError(f"No response received for {url}")
            if not response.ok:
                body = await response.text()
                if not body.strip():
                    raise FetchError(f"Site returned status {response.status}.")
                logger.warning("Site returned status %s for %s; using its body", response.status, url)

            await page.evaluate(REFLECT_CHECKED_JS)
            markup = await page.content()
            logger.info("Rendered %s (%d chars)", url, len(markup))
            return markup
        finally:
            await context.close()


class HttpPageFetcher:
    """Plain HTTP GET without running page scripts.

    Only useful when the structured data is present in the server response.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self.transport = transport

    async def fetch_rendered_markup(self, url: str, timeout_ms: int) -> str:
        headers = {
            "User-Agent": self.settings.scraper_user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-GB,en;q=0.9",
        }
        timeout = httpx.Timeout(timeout_ms / 1000)
        try:
            async with httpx.AsyncClient(
                timeout=timeout, follow_redirects=True, headers=headers, transport=self.transport
            ) as client:
                response = await client.get(url)
        except httpx.TimeoutException as exc:
            logger.warning("Timed out fetching %s after %dms", url, timeout_ms)
            raise FetchTimeoutError(f"Timed out loading {url}") from exc
        except httpx.HTTPError as exc:
            logger.warning("Failed to fetch %s: %s", url, exc)
            raise FetchError(f"Failed to load {url}: {exc}") from exc

        if response.is_error:
            if not response.text.strip():
                raise FetchError(f"Site returned status {response.status_code}.")
            logger.warning("Site returned status %s for %s; using its body", response.status_code, url)
        return response.text


def create_page_fetcher(settings: Optional[Settings] = None, pool: Optional[BrowserPool] = None) -> PageFetcher:
    settings = settings or get_settings()
    if settings.fetch_backend == "http":
        return HttpPageFetcher(settings)
    return PlaywrightPageFetcher(settings, pool=pool)
