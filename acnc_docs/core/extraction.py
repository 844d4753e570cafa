"""
Capped PDF text extraction

Best effort: any decoding problem yields an empty string.
"""
import logging

from .ports import PdfDecoder

logger = logging.getLogger(__name__)

PDF_SIGNATURE = b"%PDF"


def looks_like_pdf(data: bytes) -> bool:
    """Check the 4-byte PDF magic number"""
    return bool(data) and data[:4] == PDF_SIGNATURE


class PdfTextExtractor:
    """Page-ordered text from PDF bytes, truncated to a character cap"""

    def __init__(self, decoder: PdfDecoder):
        self.decoder = decoder

    def extract(self, data: bytes, cap: int) -> str:
        """
        Decode pages in order until more than `cap` characters are collected.

        Each page's text is collapsed to single spaces and terminated by a
        newline. The result never exceeds `cap` characters.
        """
        if cap <= 0 or not looks_like_pdf(data):
            return ""

        out = ""
        try:
            for page_text in self.decoder.iter_page_texts(data):
                out += " ".join((page_text or "").split()) + "\n"
                if len(out) > cap:
                    break
        except Exception as e:
            logger.debug(f"PDF decoding failed after {len(out)} chars: {e}")
            return ""

        return out[:cap]
