"""
Browser Adapter

Implements RetrievalStrategy by driving headless Chromium through Playwright.
Slower than plain HTTP but sees client-rendered content.
"""
import logging
from typing import Any, Optional

from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Locator,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from ..config import Settings
from ..core.domain import Discovery, Document, space_abn
from ..core.errors import STEP_BROWSER, FetchFailed, NotFound
from ..core.parser import collapse_whitespace, make_document, pick_document_link
from ..core.ports import RetrievalStrategy
from ..core.urls import documents_url, profile_url, search_url

logger = logging.getLogger(__name__)

# Container-safe Chromium flags; HTTP/2 and QUIC upset the register's CDN
BROWSER_ARGS = ["--no-sandbox", "--disable-dev-shm-usage", "--disable-http2", "--disable-quic"]

ROWS_SELECTOR = "table tbody tr"
CHARITY_LINK_SELECTOR = 'a[href*="/charity/charities/"]'
FINANCIALS_TAB_SELECTOR = (
    'a:has-text("FINANCIALS & DOCUMENTS"), '
    'button:has-text("FINANCIALS & DOCUMENTS"), '
    '[role="tab"]:has-text("FINANCIALS & DOCUMENTS")'
)

# Reads every listing row in one round trip: first cell text plus anchors
READ_ROWS_JS = """rows => rows.map(row => {
    const cell = row.querySelector('td');
    return {
        title: cell ? (cell.innerText || '') : '',
        anchors: Array.from(row.querySelectorAll('a[href]')).map(
            a => [a.getAttribute('href') || '', a.innerText || '']
        ),
    };
})"""


def documents_from_rows(rows: list[dict[str, Any]], base_url: str) -> list[Document]:
    """Build Documents from rows read out of the live DOM"""
    documents = []
    for row in rows:
        title = collapse_whitespace(row.get("title") or "")
        if not title:
            continue

        anchors = [(href or "", text or "") for href, text in row.get("anchors") or []]
        href = pick_document_link(anchors)
        if not href:
            continue

        documents.append(make_document(title, href, base_url))
    return documents


async def _is_visible(locator: Locator) -> bool:
    try:
        return await locator.is_visible()
    except PlaywrightError:
        return False


class BrowserStrategy(RetrievalStrategy):
    """Search, click through and read the listing in a rendered page"""

    step = STEP_BROWSER

    def __init__(self, settings: Settings):
        self.settings = settings
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    async def open(self) -> None:
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(headless=True, args=BROWSER_ARGS)
            self._context = await self._browser.new_context(
                locale="en-AU",
                ignore_https_errors=not self.settings.verify_tls,
                user_agent=self.settings.user_agent,
                extra_http_headers={
                    k: v for k, v in self.settings.headers.items() if k.lower() != "user-agent"
                },
            )
            self._page = await self._context.new_page()
        except Exception:
            await self.close()
            raise

        self._page.set_default_navigation_timeout(self.settings.nav_timeout_ms)
        self._page.set_default_timeout(self.settings.action_timeout_ms)

    async def close(self) -> None:
        resources = [("page", self._page), ("context", self._context), ("browser", self._browser)]
        self._page = self._context = self._browser = None

        for name, resource in resources:
            if resource is None:
                continue
            try:
                await resource.close()
            except Exception as e:
                logger.warning(f"{self.step}: closing {name} failed: {e}")

        if self._playwright is not None:
            playwright, self._playwright = self._playwright, None
            try:
                await playwright.stop()
            except Exception as e:
                logger.warning(f"{self.step}: stopping playwright failed: {e}")

    @property
    def page(self) -> Page:
        if self._page is None:
            raise RuntimeError("BrowserStrategy used outside 'async with'")
        return self._page

    async def _settle(self) -> None:
        """Give client-side rendering a moment; a slow network is not an error"""
        try:
            await self.page.wait_for_load_state("networkidle", timeout=self.settings.settle_timeout_ms)
        except PlaywrightTimeoutError:
            pass

    async def _goto(self, url: str) -> None:
        try:
            await self.page.goto(url, wait_until="domcontentloaded", timeout=self.settings.nav_timeout_ms)
        except PlaywrightTimeoutError as e:
            raise FetchFailed(f"Navigation to {url} timed out after {self.settings.nav_timeout_ms} ms") from e
        except PlaywrightError as e:
            raise FetchFailed(f"Navigation to {url} failed: {e}") from e
        await self._settle()

    async def _click(self, locator: Locator, what: str) -> None:
        try:
            await locator.click()
            await self.page.wait_for_load_state("domcontentloaded")
        except PlaywrightTimeoutError as e:
            raise FetchFailed(f"Opening {what} timed out") from e
        except PlaywrightError as e:
            raise FetchFailed(f"Opening {what} failed: {e}") from e
        await self._settle()

    async def open_charity(self, abn: str) -> None:
        """Click the search result whose ABN column matches"""
        page = self.page
        await self._goto(search_url(abn, self.settings.base_url))

        abn_cell = page.locator(
            f'td:last-child:has-text("{space_abn(abn)}"), td:last-child:has-text("{abn}")'
        )
        link = page.locator(ROWS_SELECTOR).filter(has=abn_cell).locator(CHARITY_LINK_SELECTOR).first
        try:
            await link.wait_for(timeout=self.settings.element_timeout_ms)
        except PlaywrightTimeoutError as e:
            raise NotFound("No matching charity link found for ABN") from e

        await self._click(link, "charity profile")

    async def reveal_listing(self) -> None:
        """Switch to the financials tab when the listing is not already shown"""
        page = self.page
        if await _is_visible(page.locator(ROWS_SELECTOR).first):
            return

        tab = page.locator(FINANCIALS_TAB_SELECTOR).first
        if await _is_visible(tab):
            await self._click(tab, "financials & documents tab")

    async def read_documents(self) -> list[Document]:
        try:
            rows = await self.page.locator(ROWS_SELECTOR).evaluate_all(READ_ROWS_JS)
        except PlaywrightError as e:
            raise FetchFailed(f"Reading document rows failed: {e}") from e

        if not rows:
            raise NotFound("No annual reporting rows found")
        return documents_from_rows(rows, self.page.url)

    async def discover(self, abn: str) -> Discovery:
        await self.open_charity(abn)

        await self._goto(documents_url(self.page.url))
        await self.reveal_listing()

        documents = await self.read_documents()
        if not documents:
            raise NotFound("No annual reporting rows found")

        return Discovery(detail_url=profile_url(self.page.url), documents=documents)

    async def fetch_document(self, url: str) -> bytes:
        """Download through the browser context so cookies are shared"""
        if self._context is None:
            raise RuntimeError("BrowserStrategy used outside 'async with'")
        try:
            response = await self._context.request.get(url, timeout=self.settings.http_timeout_ms)
        except PlaywrightTimeoutError as e:
            raise FetchFailed(f"GET {url} timed out after {self.settings.http_timeout_ms} ms") from e
        except PlaywrightError as e:
            raise FetchFailed(f"GET {url} failed: {e}") from e

        if not response.ok:
            raise FetchFailed(f"GET {url} -> {response.status}", status_code=response.status)
        return await response.body()
