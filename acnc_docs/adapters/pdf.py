"""
PDF Adapter

Implements PdfDecoder port using pypdf.
"""
import logging
from io import BytesIO
from typing import Iterator

from pypdf import PdfReader

from ..core.ports import PdfDecoder

# pypdf is chatty about malformed objects in registry uploads
logging.getLogger("pypdf").setLevel(logging.ERROR)


class PypdfDecoder(PdfDecoder):
    """Lazy page-by-page text decoding"""

    def iter_page_texts(self, data: bytes) -> Iterator[str]:
        reader = PdfReader(BytesIO(data))
        for page in reader.pages:
            yield page.extract_text() or ""
