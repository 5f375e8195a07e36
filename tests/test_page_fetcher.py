import asyncio

import httpx
import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from recipe_export.app.core.config import get_settings
from recipe_export.app.core.errors import FetchError, FetchTimeoutError, InvalidInputError
from recipe_export.app.services.extraction import page_fetcher
from recipe_export.app.services.extraction.page_fetcher import (
    BrowserPool,
    HttpPageFetcher,
    PlaywrightPageFetcher,
    validate_source_url,
)

URL = "https://www.mindfulchef.com/healthy-recipes/thai-green-curry"


@pytest.mark.parametrize(
    "url",
    [
        "https://not-the-source.example.com/x",
        "http://www.mindfulchef.com/healthy-recipes/x",
        "https://mindfulchef.com.evil.example/x",
        "not a url",
        "",
    ],
)
def test_validate_source_url_rejects(url):
    with pytest.raises(InvalidInputError):
        validate_source_url(url)


def test_validate_source_url_accepts_supported_site():
    assert validate_source_url(URL) == URL


class FakeResponse:
    def __init__(self, status: int = 200, body: str = "<html></html>"):
        self.status = status
        self.ok = 200 <= status < 300
        self._body = body

    async def text(self):
        return self._body


class FakePage:
    def __init__(self, markup: str, response=None, goto_error: Exception | None = None):
        self.markup = markup
        self.response = response if response is not None else FakeResponse()
        self.goto_error = goto_error
        self.routes = []
        self.evaluated = []
        self.timeout = None

    def set_default_timeout(self, timeout):
        self.timeout = timeout

    async def route(self, pattern, handler):
        self.routes.append(pattern)

    async def goto(self, url, wait_until=None, timeout=None):
        if self.goto_error is not None:
            raise self.goto_error
        return self.response

    async def evaluate(self, script):
        self.evaluated.append(script)

    async def content(self):
        return self.markup


class FakeContext:
    def __init__(self, page: FakePage):
        self.page = page
        self.closed = False

    async def new_page(self):
        return self.page

    async def close(self):
        self.closed = True


class FakeBrowser:
    def __init__(self, page_factory):
        self.page_factory = page_factory
        self.contexts = []
        self.context_options = []
        self.closed = False
        self.connected = True

    def is_connected(self):
        return self.connected and not self.closed

    async def new_context(self, **kwargs):
        self.context_options.append(kwargs)
        context = FakeContext(self.page_factory())
        self.contexts.append(context)
        return context

    async def close(self):
        self.closed = True


class FakeChromium:
    def __init__(self, page_factory):
        self.page_factory = page_factory
        self.launched = []

    async def launch(self, **kwargs):
        browser = FakeBrowser(self.page_factory)
        self.launched.append(browser)
        return browser


class FakePlaywright:
    def __init__(self, page_factory):
        self.chromium = FakeChromium(page_factory)
        self.stopped = False

    async def start(self):
        return self

    async def stop(self):
        self.stopped = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()
        return False


@pytest.fixture
def fake_playwright(monkeypatch):
    holder = {"page_factory": lambda: FakePage("<html><h1>Rendered</h1></html>")}
    playwright = FakePlaywright(lambda: holder["page_factory"]())
    monkeypatch.setattr(page_fetcher, "async_playwright", lambda: playwright)
    playwright.holder = holder
    return playwright


@pytest.mark.asyncio
async def test_playwright_fetch_launches_and_closes_browser(fake_playwright):
    fetcher = PlaywrightPageFetcher(get_settings())
    markup = await fetcher.fetch_rendered_markup(URL, 5000)

    assert markup == "<html><h1>Rendered</h1></html>"
    browser = fake_playwright.chromium.launched[0]
    assert browser.closed is True
    context = browser.contexts[0]
    assert context.closed is True
    assert context.page.routes == ["**/*"]
    assert context.page.evaluated == [page_fetcher.REFLECT_CHECKED_JS]
    assert context.page.timeout == 5000
    assert browser.context_options == [{"user_agent": get_settings().scraper_user_agent}]


@pytest.mark.asyncio
async def test_playwright_timeout_maps_to_fetch_timeout(fake_playwright):
    fake_playwright.holder["page_factory"] = lambda: FakePage(
        "", goto_error=PlaywrightTimeoutError("Timeout 5000ms exceeded")
    )
    fetcher = PlaywrightPageFetcher(get_settings())
    with pytest.raises(FetchTimeoutError):
        await fetcher.fetch_rendered_markup(URL, 5000)

    browser = fake_playwright.chromium.launched[0]
    assert browser.closed is True
    assert browser.contexts[0].closed is True


@pytest.mark.asyncio
async def test_playwright_error_status_without_body(fake_playwright):
    fake_playwright.holder["page_factory"] = lambda: FakePage(
        "", response=FakeResponse(status=503, body="  ")
    )
    fetcher = PlaywrightPageFetcher(get_settings())
    with pytest.raises(FetchError):
        await fetcher.fetch_rendered_markup(URL, 5000)


@pytest.mark.asyncio
async def test_browser_pool_serializes_each_instance(fake_playwright):
    pool = BrowserPool(1, get_settings())
    await pool.start()
    events = []

    async def use(tag):
        async with pool.acquire() as browser:
            events.append((tag, "start"))
            await asyncio.sleep(0.01)
            events.append((tag, "end"))
            return browser

    first, second = await asyncio.gather(use("a"), use("b"))
    assert first is second
    assert events == [("a", "start"), ("a", "end"), ("b", "start"), ("b", "end")]

    await pool.close()
    assert fake_playwright.chromium.launched[0].closed is True
    assert fake_playwright.stopped is True


@pytest.mark.asyncio
async def test_browser_pool_returns_browser_after_failed_fetch(fake_playwright):
    fake_playwright.holder["page_factory"] = lambda: FakePage(
        "", goto_error=PlaywrightTimeoutError("Timeout exceeded")
    )
    pool = BrowserPool(1, get_settings())
    await pool.start()
    fetcher = PlaywrightPageFetcher(get_settings(), pool=pool)

    with pytest.raises(FetchTimeoutError):
        await fetcher.fetch_rendered_markup(URL, 100)

    async with pool.acquire() as browser:
        assert browser is fake_playwright.chromium.launched[0]
        assert browser.closed is False
    await pool.close()


@pytest.mark.asyncio
async def test_playwright_certificate_error_maps_to_fetch_error(fake_playwright):
    fake_playwright.holder["page_factory"] = lambda: FakePage(
        "", goto_error=PlaywrightError("net::ERR_CERT_AUTHORITY_INVALID")
    )
    fetcher = PlaywrightPageFetcher(get_settings())
    with pytest.raises(FetchError) as excinfo:
        await fetcher.fetch_rendered_markup(URL, 5000)
    assert not isinstance(excinfo.value, FetchTimeoutError)
    assert "ERR_CERT_AUTHORITY_INVALID" in str(excinfo.value)


@pytest.mark.asyncio
async def test_browser_pool_replaces_disconnected_browser(fake_playwright):
    pool = BrowserPool(1, get_settings())
    await pool.start()

    async with pool.acquire() as browser:
        browser.connected = False

    async with pool.acquire() as browser:
        assert browser is fake_playwright.chromium.launched[1]
        assert browser.is_connected() is True

    await pool.close()
    assert fake_playwright.chromium.launched[1].closed is True


class FakeRoute:
    def __init__(self, resource_type):
        self.request = type("Request", (), {"resource_type": resource_type})()
        self.action = None

    async def abort(self):
        self.action = "abort"

    async def continue_(self):
        self.action = "continue"


@pytest.mark.asyncio
async def test_non_essential_resources_are_blocked():
    image, script = FakeRoute("image"), FakeRoute("script")
    await page_fetcher._block_non_essential(image)
    await page_fetcher._block_non_essential(script)
    assert image.action == "abort"
    assert script.action == "continue"


@pytest.mark.asyncio
async def test_http_fetcher_returns_body():
    def handler(request):
        assert request.headers["user-agent"] == get_settings().scraper_user_agent
        return httpx.Response(200, text="<html><h1>Curry</h1></html>")

    fetcher = HttpPageFetcher(get_settings(), transport=httpx.MockTransport(handler))
    assert await fetcher.fetch_rendered_markup(URL, 1000) == "<html><h1>Curry</h1></html>"


@pytest.mark.asyncio
async def test_http_fetcher_error_status_without_body():
    fetcher = HttpPageFetcher(
        get_settings(), transport=httpx.MockTransport(lambda request: httpx.Response(502))
    )
    with pytest.raises(FetchError):
        await fetcher.fetch_rendered_markup(URL, 1000)


@pytest.mark.asyncio
async def test_http_fetcher_maps_transport_errors():
    def timeout(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    def refused(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(FetchTimeoutError):
        await HttpPageFetcher(get_settings(), transport=httpx.MockTransport(timeout)).fetch_rendered_markup(URL, 1000)
    with pytest.raises(FetchError):
        await HttpPageFetcher(get_settings(), transport=httpx.MockTransport(refused)).fetch_rendered_markup(URL, 1000)
