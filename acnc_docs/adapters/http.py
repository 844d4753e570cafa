"""
HTTP Adapter

Implements RetrievalStrategy with plain HTTP requests (no rendering).
Fast and cheap, but blind to client-rendered content.
"""
import asyncio
import logging
from typing import Optional

import httpx

from ..config import Settings
from ..core.domain import Discovery
from ..core.errors import STEP_HTTP, FetchFailed, NotFound
from ..core.parser import find_charity_link, parse_documents
from ..core.ports import RetrievalStrategy
from ..core.urls import abs_url, documents_url, profile_url, search_url

logger = logging.getLogger(__name__)


class HttpFetcher:
    """Text and byte fetches over one httpx.AsyncClient"""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.settings = settings
        self.client = httpx.AsyncClient(
            headers=dict(settings.headers),
            timeout=httpx.Timeout(settings.http_timeout),
            follow_redirects=True,
            verify=settings.verify_tls,
            transport=transport,
        )

    async def _get(self, url: str) -> httpx.Response:
        """GET with one deadline covering connect, headers and the whole body"""
        try:
            response = await asyncio.wait_for(self.client.get(url), timeout=self.settings.http_timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise FetchFailed(f"GET {url} timed out after {self.settings.http_timeout_ms} ms") from e
        except httpx.HTTPError as e:
            raise FetchFailed(f"GET {url} failed: {e}") from e

        if not response.is_success:
            raise FetchFailed(f"GET {url} -> {response.status_code}", status_code=response.status_code)
        return response

    async def fetch_text(self, url: str) -> str:
        return (await self._get(url)).text

    async def fetch_bytes(self, url: str) -> bytes:
        return (await self._get(url)).content

    async def aclose(self) -> None:
        await self.client.aclose()


class HttpStrategy(RetrievalStrategy):
    """Search, resolve and list documents from raw register HTML"""

    step = STEP_HTTP

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.settings = settings
        self._transport = transport
        self._fetcher: Optional[HttpFetcher] = None

    async def open(self) -> None:
        self._fetcher = HttpFetcher(self.settings, transport=self._transport)

    async def close(self) -> None:
        if self._fetcher is not None:
            fetcher, self._fetcher = self._fetcher, None
            await fetcher.aclose()

    @property
    def fetcher(self) -> HttpFetcher:
        if self._fetcher is None:
            raise RuntimeError("HttpStrategy used outside 'async with'")
        return self._fetcher

    async def resolve_documents_url(self, abn: str) -> str:
        """Find the charity for this ABN and return its documents URL"""
        base = self.settings.base_url
        search_html = await self.fetcher.fetch_text(search_url(abn, base))

        raw_link = find_charity_link(search_html, abn)
        if not raw_link:
            raise NotFound("No matching charity link found for ABN")

        return documents_url(abs_url(raw_link, base))

    async def discover(self, abn: str) -> Discovery:
        docs_url = await self.resolve_documents_url(abn)
        logger.debug(f"[ACNC] {self.step}: documents page {docs_url}")

        docs_html = await self.fetcher.fetch_text(docs_url)
        documents = parse_documents(docs_html, self.settings.base_url)
        if not documents:
            raise NotFound("No annual reporting rows found")

        return Discovery(detail_url=profile_url(docs_url), documents=documents)

    async def fetch_document(self, url: str) -> bytes:
        return await self.fetcher.fetch_bytes(url)
