"""
Ports - Interfaces for external dependencies

These define HOW the core interacts with the outside world,
but NOT the implementation details.
"""
import logging
from abc import ABC, abstractmethod
from typing import Iterator

from .domain import Discovery

logger = logging.getLogger(__name__)


class PdfDecoder(ABC):
    """Port for turning PDF bytes into page text"""

    @abstractmethod
    def iter_page_texts(self, data: bytes) -> Iterator[str]:
        """Yield the text of each page, first page first"""
        pass


class RetrievalStrategy(ABC):
    """
    Port for one complete way of reading the register.

    Used as an async context manager: resources are acquired on entry and
    released on exit, whatever happened in between. Release failures are
    logged, never raised.
    """

    #: Failure class reported when this strategy is the last one to fail
    step: str = ""

    async def __aenter__(self) -> "RetrievalStrategy":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            await self.close()
        except Exception as e:
            logger.warning(f"{self.step}: cleanup failed: {e}")

    async def open(self) -> None:
        """Acquire sessions; default is lazy acquisition"""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release everything acquired by this strategy"""
        pass

    @abstractmethod
    async def discover(self, abn: str) -> Discovery:
        """Resolve the ABN to its detail URL and full document listing"""
        pass

    @abstractmethod
    async def fetch_document(self, url: str) -> bytes:
        """Download a document body using this strategy's session"""
        pass
