"""
Application Services - Use cases that orchestrate domain logic

These are the entry points to the core. They coordinate between
domain models and ports, but contain no infrastructure concerns.
"""
import asyncio
import logging
import time
from typing import Any, Callable, Optional

from .domain import (
    Discovery,
    DocumentType,
    LatestByType,
    RetrievalResult,
    TextMode,
    resolve_text_mode,
    validate_abn,
)
from .errors import AcncError, ExtractionDegraded, RetrievalFailed
from .extraction import PdfTextExtractor, looks_like_pdf
from .ports import RetrievalStrategy
from .selection import select_latest

logger = logging.getLogger(__name__)

StrategyFactory = Callable[[], RetrievalStrategy]


def assemble_result(
    abn: str,
    discovery: Discovery,
    latest: LatestByType,
    mode: TextMode,
    text: Optional[str] = None,
    notes: Optional[list[str]] = None,
    strategy: Optional[str] = None,
) -> RetrievalResult:
    """Combine discovery, selection and optional text into the final result"""
    return RetrievalResult(
        abn=abn,
        detail_url=discovery.detail_url,
        latest=latest,
        documents=list(discovery.documents),
        pdf_text=text if text and mode is TextMode.FULL else None,
        preview=text if text and mode is TextMode.PREVIEW else None,
        notes=list(notes or []),
        strategy=strategy,
    )


class FallbackOrchestrator:
    """
    Run the primary strategy; if it fails, run the fallback once from scratch.

    Each strategy is built fresh from its factory and released before the
    next one starts. The last failure is raised as RetrievalFailed tagged
    with that strategy's step.
    """

    def __init__(
        self,
        primary: Optional[StrategyFactory] = None,
        fallback: Optional[StrategyFactory] = None
    ):
        if primary is None and fallback is None:
            raise ValueError("At least one retrieval strategy is required")
        self.primary = primary
        self.fallback = fallback

    async def run(self, abn: str, job: Callable[[RetrievalStrategy], Any]) -> Any:
        """Run `job(strategy)` inside each strategy's lifetime until one succeeds"""
        factories = [f for f in (self.primary, self.fallback) if f is not None]

        for index, factory in enumerate(factories):
            is_last = index == len(factories) - 1
            strategy = factory()
            try:
                async with strategy:
                    return await job(strategy)
            except Exception as e:
                message = e.message if isinstance(e, AcncError) else str(e) or type(e).__name__
                if is_last:
                    logger.error(f"[ACNC] {strategy.step} failed for {abn}: {message}")
                    raise RetrievalFailed(message, step=strategy.step, abn=abn) from e
                logger.warning(f"[ACNC] {strategy.step} failed for {abn}, falling back: {message}")


class FetchFinancialsService:
    """Use case: resolve an ABN to its latest AIS and Financial Report"""

    def __init__(
        self,
        orchestrator: FallbackOrchestrator,
        extractor: PdfTextExtractor,
        default_text_mode: TextMode = TextMode.PREVIEW,
        preview_chars: int = 800,
        max_full_chars: int = 200000
    ):
        self.orchestrator = orchestrator
        self.extractor = extractor
        self.default_text_mode = default_text_mode
        self.preview_chars = preview_chars
        self.max_full_chars = max_full_chars

    def text_cap(self, mode: TextMode) -> int:
        if mode is TextMode.FULL:
            return self.max_full_chars
        if mode is TextMode.PREVIEW:
            return self.preview_chars
        return 0

    async def execute(self, abn: Any, pdf_text: Any = None) -> RetrievalResult:
        """
        Look up an ABN.

        Raises InvalidInput before any network activity when the ABN is
        malformed, and RetrievalFailed when every strategy failed.
        """
        abn = validate_abn(abn)
        mode = resolve_text_mode(pdf_text, self.default_text_mode)

        started = time.monotonic()
        logger.info(f"[ACNC] start abn={abn} pdf_text={mode.value}")

        async def job(strategy: RetrievalStrategy) -> RetrievalResult:
            discovery = await strategy.discover(abn)
            latest = select_latest(discovery.documents)
            text, notes = await self._extract_text(strategy, latest, mode)
            elapsed_ms = int((time.monotonic() - started) * 1000)
            logger.info(
                f"[ACNC] {strategy.step} OK for {abn} in {elapsed_ms} ms "
                f"({len(discovery.documents)} documents)"
            )
            return assemble_result(abn, discovery, latest, mode, text, notes, strategy.step)

        return await self.orchestrator.run(abn, job)

    async def _extract_text(
        self,
        strategy: RetrievalStrategy,
        latest: LatestByType,
        mode: TextMode
    ) -> tuple[Optional[str], list[str]]:
        """Best-effort Financial Report text; failures become notes"""
        if mode is TextMode.NONE:
            return None, []

        report = latest.get(DocumentType.FINANCIAL_REPORT)
        try:
            if report is None:
                raise ExtractionDegraded("No dated financial report found; text extraction skipped")

            try:
                data = await strategy.fetch_document(report.source_url)
            except Exception as e:
                raise ExtractionDegraded(f"Financial report download failed: {e}") from e

            if not looks_like_pdf(data):
                raise ExtractionDegraded("Financial report is not a PDF; text extraction skipped")

            text = await asyncio.to_thread(self.extractor.extract, data, self.text_cap(mode))
            if not text.strip():
                raise ExtractionDegraded("No text could be extracted from the financial report PDF")

            return text, []
        except ExtractionDegraded as e:
            logger.info(f"[ACNC] {e.message}")
            return None, [e.message]
