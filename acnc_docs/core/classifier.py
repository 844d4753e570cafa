"""
Document classification from listing titles

Keyword heuristic: titles with unexpected phrasing fall through to Other.
"""
import re
from typing import Optional

from .domain import DocumentType

YEAR_RE = re.compile(r"\b(20\d{2})\b")
AIS_RE = re.compile(r"annual information statement|\bais\b", re.IGNORECASE)
FINANCIAL_RE = re.compile(r"financial", re.IGNORECASE)


def extract_year(title: str) -> Optional[int]:
    """First 20xx year in the title, if any"""
    match = YEAR_RE.search(title or "")
    return int(match.group(1)) if match else None


def classify_title(title: str) -> tuple[DocumentType, Optional[int]]:
    """Infer (type, year) from a row title"""
    title = title or ""
    if AIS_RE.search(title):
        doc_type = DocumentType.AIS
    elif FINANCIAL_RE.search(title):
        doc_type = DocumentType.FINANCIAL_REPORT
    else:
        doc_type = DocumentType.OTHER
    return doc_type, extract_year(title)
