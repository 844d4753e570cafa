"""
Dependency Injection Container

Wires together the hexagonal architecture by creating and injecting dependencies.
"""
from typing import Optional

from .adapters import BrowserStrategy, HttpStrategy, PypdfDecoder
from .config import Settings
from .core import FallbackOrchestrator, FetchFinancialsService, PdfTextExtractor


class Container:
    """Dependency injection container for the application"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings.from_env()

        # Adapters (infrastructure); strategies are built per lookup
        self.extractor = PdfTextExtractor(PypdfDecoder())
        self.orchestrator = FallbackOrchestrator(
            primary=self.make_http_strategy if self.settings.use_http_strategy else None,
            fallback=self.make_browser_strategy if self.settings.use_browser_fallback else None
        )

        # Services (use cases)
        self.fetch_financials = FetchFinancialsService(
            orchestrator=self.orchestrator,
            extractor=self.extractor,
            default_text_mode=self.settings.default_text_mode,
            preview_chars=self.settings.preview_chars,
            max_full_chars=self.settings.max_full_chars
        )

    def make_http_strategy(self) -> HttpStrategy:
        return HttpStrategy(self.settings)

    def make_browser_strategy(self) -> BrowserStrategy:
        return BrowserStrategy(self.settings)
