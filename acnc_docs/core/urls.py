"""
URL helpers for the ACNC register
"""
import re
from urllib.parse import quote, urljoin, urlsplit, urlunsplit

DEFAULT_BASE_URL = "https://www.acnc.gov.au"

_PROFILE_TAIL_RE = re.compile(r"/profile/?$")
_DOCUMENTS_TAIL_RE = re.compile(r"/documents/?$")


def abs_url(href: str, base: str) -> str:
    """Resolve href against base; hrefs that cannot be resolved are returned as-is"""
    if href.startswith("http"):
        return href
    try:
        return urljoin(base, href)
    except ValueError:
        return href


def search_url(abn: str, base: str = DEFAULT_BASE_URL) -> str:
    return f"{base.rstrip('/')}/charity/charities?search={quote(abn)}"


def _replace_path(url: str, pattern: re.Pattern, replacement: str) -> str:
    parts = urlsplit(url)
    path = pattern.sub(replacement, parts.path)
    return urlunsplit((parts.scheme, parts.netloc, path, parts.query, parts.fragment))


def documents_url(url: str) -> str:
    """Point a charity profile URL at its documents view (no-op without /profile)"""
    return _replace_path(url, _PROFILE_TAIL_RE, "/documents/")


def profile_url(url: str) -> str:
    """Inverse of documents_url, used for the reported detail URL"""
    return _replace_path(url, _DOCUMENTS_TAIL_RE, "/profile")
