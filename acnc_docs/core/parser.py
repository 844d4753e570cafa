"""
Tolerant HTML parsing for register pages

Pattern matching over raw markup instead of a DOM schema: the register's
markup is not a stable contract. A row that does not match is skipped, a
single bad row never raises.
"""
import html as html_lib
import re
from typing import Optional

from .classifier import classify_title
from .domain import Document, space_abn
from .urls import DEFAULT_BASE_URL, abs_url

ROW_RE = re.compile(r"<tr\b[^>]*>(.*?)</tr>", re.IGNORECASE | re.DOTALL)
CELL_RE = re.compile(r"<td\b[^>]*>(.*?)</td>", re.IGNORECASE | re.DOTALL)
ANCHOR_RE = re.compile(r"<a\b([^>]*)>(.*?)</a>", re.IGNORECASE | re.DOTALL)
HREF_RE = re.compile(r"""\bhref\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s>]+))""", re.IGNORECASE)

PDF_HREF_RE = re.compile(r"\.pdf(?:[?#].*)?$", re.IGNORECASE)
ACTION_TEXT_RE = re.compile(r"^(?:download|view|ais)", re.IGNORECASE)

# Most specific first: canonical UUID path, then any profile, then any charity page
CHARITY_LINK_PATTERNS = (
    re.compile(
        r"""href=["']([^"']*/charity/charities/[0-9a-f-]{36}/(?:profile|documents)/?)["']""",
        re.IGNORECASE,
    ),
    re.compile(r"""href=["']([^"']*/charity/charities/[^"']+?/profile/?)["']""", re.IGNORECASE),
    re.compile(r"""href=["']([^"']*/charity/charities/[^"']+?)["']""", re.IGNORECASE),
)

_SCRIPT_RE = re.compile(r"<script\b.*?</script>", re.IGNORECASE | re.DOTALL)
_STYLE_RE = re.compile(r"<style\b.*?</style>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")


def collapse_whitespace(text: str) -> str:
    return " ".join((text or "").split())


def strip_tags(fragment: str) -> str:
    """Visible text of an HTML fragment, whitespace collapsed"""
    text = _SCRIPT_RE.sub("", fragment or "")
    text = _STYLE_RE.sub("", text)
    text = _TAG_RE.sub(" ", text)
    return collapse_whitespace(html_lib.unescape(text))


def extract_anchors(fragment: str) -> list[tuple[str, str]]:
    """(href, text) for every anchor with an href, in document order"""
    anchors = []
    for match in ANCHOR_RE.finditer(fragment or ""):
        href_match = HREF_RE.search(match.group(1))
        if not href_match:
            continue
        href = next(g for g in href_match.groups() if g is not None)
        href = html_lib.unescape(href).strip()
        if href:
            anchors.append((href, strip_tags(match.group(2))))
    return anchors


def pick_document_link(anchors: list[tuple[str, str]]) -> Optional[str]:
    """
    Choose the best document link from a row's anchors.

    Preference: a .pdf href, then an anchor labelled download/view/AIS,
    then the first anchor.
    """
    anchors = [(href.strip(), collapse_whitespace(text)) for href, text in anchors if href and href.strip()]
    if not anchors:
        return None

    for href, _ in anchors:
        if PDF_HREF_RE.search(href):
            return href

    for href, text in anchors:
        if ACTION_TEXT_RE.search(text):
            return href

    return anchors[0][0]


def make_document(title: str, href: str, base_url: str = DEFAULT_BASE_URL) -> Document:
    """Build a classified Document from a row's title and chosen link"""
    doc_type, year = classify_title(title)
    return Document(year=year, type=doc_type, source_url=abs_url(href, base_url), title=title)


def parse_documents(page_html: str, base_url: str = DEFAULT_BASE_URL) -> list[Document]:
    """Extract Documents from a documents-listing page, in listing order"""
    documents = []
    for row in ROW_RE.finditer(page_html or ""):
        inner = row.group(1)

        cell = CELL_RE.search(inner)
        title = strip_tags(cell.group(1)) if cell else ""
        if not title:
            continue

        href = pick_document_link(extract_anchors(inner))
        if not href:
            continue

        documents.append(make_document(title, href, base_url))
    return documents


def abn_pattern(abn: str) -> re.Pattern:
    """Matches the ABN plain or in its grouped form with any whitespace"""
    grouped = r"\s+".join(re.escape(part) for part in space_abn(abn).split())
    return re.compile(f"(?:{re.escape(abn)}|{grouped})")


def find_charity_link(page_html: str, abn: str) -> Optional[str]:
    """Charity link from the first search-result row that mentions the ABN"""
    pattern = abn_pattern(abn)
    for row in ROW_RE.finditer(page_html or ""):
        row_html = row.group(0)
        if not pattern.search(row_html):
            continue
        for link_re in CHARITY_LINK_PATTERNS:
            match = link_re.search(row_html)
            if match:
                return html_lib.unescape(match.group(1))
    return None
