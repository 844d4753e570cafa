"""
Adapters - External implementations of ports

This package contains implementations of the core ports:
- http.py: Plain-HTTP retrieval strategy (httpx)
- browser.py: Headless-browser retrieval strategy (Playwright)
- pdf.py: PDF page decoder (pypdf)
"""
from .http import HttpFetcher, HttpStrategy
from .browser import BrowserStrategy
from .pdf import PypdfDecoder

__all__ = [
    "HttpFetcher",
    "HttpStrategy",
    "BrowserStrategy",
    "PypdfDecoder",
]
