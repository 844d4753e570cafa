"""
Domain Models - Pure business entities

No external dependencies. These represent the core business concepts.
"""
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .errors import InvalidInput

ABN_LENGTH = 11


def normalize_abn(raw: Any) -> str:
    """Strip everything that is not a digit"""
    return re.sub(r"\D", "", str(raw or ""))


def validate_abn(raw: Any) -> str:
    """
    Normalize and validate an ABN, raising InvalidInput unless 11 digits remain.

    The error carries the identifier as supplied, so callers can correlate it.
    """
    abn = normalize_abn(raw)
    if len(abn) != ABN_LENGTH:
        raise InvalidInput("ABN must be 11 digits", abn="" if raw is None else str(raw))
    return abn


def space_abn(abn: str) -> str:
    """Grouped form used on register pages, e.g. 12 345 678 901"""
    return f"{abn[:2]} {abn[2:5]} {abn[5:8]} {abn[8:]}"


class DocumentType(str, Enum):
    """Kind of register document, inferred from its title"""
    AIS = "AIS"
    FINANCIAL_REPORT = "Financial Report"
    OTHER = "Other"


class TextMode(str, Enum):
    """How much Financial Report text to extract"""
    NONE = "none"
    PREVIEW = "preview"
    FULL = "full"


def resolve_text_mode(value: Any, default: TextMode) -> TextMode:
    """Map a request value to a TextMode; unknown or missing values use the default"""
    candidate = str(value or "").strip().lower()
    for mode in TextMode:
        if mode.value == candidate:
            return mode
    return default


@dataclass(frozen=True)
class Document:
    """One row of a charity's document listing"""
    year: Optional[int]
    type: DocumentType
    source_url: str
    title: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "type": self.type.value,
            "source_url": self.source_url,
            "title": self.title,
        }


@dataclass(frozen=True)
class LatestByType:
    """Newest dated document per type (absent when none qualifies)"""
    ais: Optional[Document] = None
    financial_report: Optional[Document] = None

    def get(self, doc_type: DocumentType) -> Optional[Document]:
        if doc_type is DocumentType.AIS:
            return self.ais
        if doc_type is DocumentType.FINANCIAL_REPORT:
            return self.financial_report
        return None


@dataclass(frozen=True)
class Discovery:
    """What a retrieval strategy found for one ABN"""
    detail_url: str
    documents: list[Document]


def _latest_summary(doc: Optional[Document]) -> Optional[dict[str, Any]]:
    if doc is None:
        return None
    return {"year": doc.year, "source_url": doc.source_url}


@dataclass
class RetrievalResult:
    """Final answer for one ABN lookup"""
    abn: str
    detail_url: str
    latest: LatestByType
    documents: list[Document]
    pdf_text: Optional[str] = None
    preview: Optional[str] = None
    notes: list[str] = field(default_factory=list)
    strategy: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Response shape consumed by downstream pipelines"""
        result: dict[str, Any] = {
            "abn": self.abn,
            "acnc_detail_url": self.detail_url,
            "latest": {
                "financial_report": _latest_summary(self.latest.financial_report),
                "ais": _latest_summary(self.latest.ais),
            },
            "all_documents": [doc.to_dict() for doc in self.documents],
        }
        if self.pdf_text:
            result["pdf_text"] = self.pdf_text
        if self.preview:
            result["preview"] = {"financial_report_text_preview": self.preview}
        result["notes"] = list(self.notes)
        return result
