"""
Core - Domain logic and ports

This package contains:
- domain.py: Pure domain models
- errors.py: Error taxonomy
- classifier.py, parser.py, selection.py: Listing interpretation
- extraction.py: Capped PDF text extraction
- ports.py: Port interfaces (abstractions for external dependencies)
- services.py: Application services (use cases)
"""
from .domain import (
    Discovery,
    Document,
    DocumentType,
    LatestByType,
    RetrievalResult,
    TextMode,
    normalize_abn,
    resolve_text_mode,
    space_abn,
    validate_abn,
)
from .errors import (
    AcncError,
    ExtractionDegraded,
    FetchFailed,
    InvalidInput,
    NotFound,
    RetrievalFailed,
)
from .classifier import classify_title
from .parser import find_charity_link, parse_documents, pick_document_link
from .selection import select_latest
from .extraction import PdfTextExtractor, looks_like_pdf
from .ports import PdfDecoder, RetrievalStrategy
from .services import FallbackOrchestrator, FetchFinancialsService, assemble_result

__all__ = [
    # Domain models
    "Discovery",
    "Document",
    "DocumentType",
    "LatestByType",
    "RetrievalResult",
    "TextMode",
    "normalize_abn",
    "resolve_text_mode",
    "space_abn",
    "validate_abn",
    # Errors
    "AcncError",
    "ExtractionDegraded",
    "FetchFailed",
    "InvalidInput",
    "NotFound",
    "RetrievalFailed",
    # Listing interpretation
    "classify_title",
    "find_charity_link",
    "parse_documents",
    "pick_document_link",
    "select_latest",
    "PdfTextExtractor",
    "looks_like_pdf",
    # Ports
    "PdfDecoder",
    "RetrievalStrategy",
    # Services
    "FallbackOrchestrator",
    "FetchFinancialsService",
    "assemble_result",
]
