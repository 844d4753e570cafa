"""
Latest-document selection
"""
from typing import Iterable, Optional

from .domain import Document, DocumentType, LatestByType


def latest_of_type(documents: Iterable[Document], doc_type: DocumentType) -> Optional[Document]:
    """
    Highest-year document of one type, ignoring undated ones.

    Ties go to the document listed first.
    """
    best = None
    for doc in documents:
        if doc.type is not doc_type or doc.year is None:
            continue
        if best is None or doc.year > best.year:
            best = doc
    return best


def select_latest(documents: Iterable[Document]) -> LatestByType:
    documents = list(documents)
    return LatestByType(
        ais=latest_of_type(documents, DocumentType.AIS),
        financial_report=latest_of_type(documents, DocumentType.FINANCIAL_REPORT),
    )
