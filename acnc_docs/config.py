"""
Process configuration

Settings are read from the environment once, at startup, and passed
explicitly to everything that needs them.

Configuration:
- PORT / HOST: HTTP server bind (default: 3000 / 127.0.0.1)
- SCRAPER_TOKEN: Bearer token for POST requests (default: changeme, empty disables auth)
- ACNC_BASE_URL: Register origin (default: https://www.acnc.gov.au)
- USER_AGENT: Browser-like user agent sent to the register
- ACNC_HTTP_TIMEOUT_MS: HTML and PDF fetch timeout (default: 20000)
- ACNC_NAV_TIMEOUT_MS: Browser navigation timeout (default: 25000)
- ACNC_ACTION_TIMEOUT_MS: Browser action timeout (default: 15000)
- ACNC_SETTLE_TIMEOUT_MS: networkidle settle wait (default: 5000)
- ACNC_ELEMENT_TIMEOUT_MS: Wait for the search-result link (default: 8000)
- ACNC_HTTP_STRATEGY / ACNC_BROWSER_FALLBACK: Enable each strategy (default: true)
- ACNC_VERIFY_TLS: Verify TLS certificates (default: false)
- SCRAPER_PREVIEW: Default text mode is preview, else none (default: true)
- SCRAPER_PREVIEW_CHARS: Preview cap in characters (default: 800)
- SCRAPER_MAX_PDF_TEXT_BYTES: Full extraction cap in characters (default: 200000)
- LOG_LEVEL: Root log level (default: INFO)
"""
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from .core.domain import TextMode
from .core.urls import DEFAULT_BASE_URL

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/127.0 Safari/537.36"
)


def default_headers(user_agent: str, base_url: str) -> dict[str, str]:
    return {
        "User-Agent": user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-AU,en;q=0.8",
        "Accept-Encoding": "gzip, deflate",
        "Referer": base_url.rstrip("/") + "/",
    }


def _get_int(environ: Mapping[str, str], name: str, default: int) -> int:
    value = environ.get(name, str(default))
    try:
        return int(value)
    except ValueError:
        msg = f"Invalid {name} value: {value}"
        raise ValueError(msg) from None


def _get_bool(environ: Mapping[str, str], name: str, default: bool) -> bool:
    value = environ.get(name)
    if value is None:
        return default
    return value.strip().lower() not in ("false", "0", "no", "off")


@dataclass(frozen=True)
class Settings:
    """Immutable runtime configuration"""
    port: int = 3000
    host: str = "127.0.0.1"
    token: str = "changeme"
    base_url: str = DEFAULT_BASE_URL
    user_agent: str = DEFAULT_USER_AGENT
    http_timeout_ms: int = 20000
    nav_timeout_ms: int = 25000
    action_timeout_ms: int = 15000
    settle_timeout_ms: int = 5000
    element_timeout_ms: int = 8000
    use_http_strategy: bool = True
    use_browser_fallback: bool = True
    verify_tls: bool = False
    default_text_mode: TextMode = TextMode.PREVIEW
    preview_chars: int = 800
    max_full_chars: int = 200000
    log_level: str = "INFO"
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        headers = dict(self.headers) or default_headers(self.user_agent, self.base_url)
        # Read-only copy, never the caller's dict
        object.__setattr__(self, "headers", MappingProxyType(headers))

    @property
    def http_timeout(self) -> float:
        """HTTP timeout in seconds, as httpx expects"""
        return self.http_timeout_ms / 1000

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        base_url = env.get("ACNC_BASE_URL", DEFAULT_BASE_URL)
        user_agent = env.get("USER_AGENT", DEFAULT_USER_AGENT)
        preview_default = _get_bool(env, "SCRAPER_PREVIEW", True)
        return cls(
            port=_get_int(env, "PORT", 3000),
            host=env.get("HOST", "127.0.0.1"),
            token=env.get("SCRAPER_TOKEN", "changeme"),
            base_url=base_url,
            user_agent=user_agent,
            http_timeout_ms=_get_int(env, "ACNC_HTTP_TIMEOUT_MS", 20000),
            nav_timeout_ms=_get_int(env, "ACNC_NAV_TIMEOUT_MS", 25000),
            action_timeout_ms=_get_int(env, "ACNC_ACTION_TIMEOUT_MS", 15000),
            settle_timeout_ms=_get_int(env, "ACNC_SETTLE_TIMEOUT_MS", 5000),
            element_timeout_ms=_get_int(env, "ACNC_ELEMENT_TIMEOUT_MS", 8000),
            use_http_strategy=_get_bool(env, "ACNC_HTTP_STRATEGY", True),
            use_browser_fallback=_get_bool(env, "ACNC_BROWSER_FALLBACK", True),
            verify_tls=_get_bool(env, "ACNC_VERIFY_TLS", False),
            default_text_mode=TextMode.PREVIEW if preview_default else TextMode.NONE,
            preview_chars=_get_int(env, "SCRAPER_PREVIEW_CHARS", 800),
            max_full_chars=_get_int(env, "SCRAPER_MAX_PDF_TEXT_BYTES", 200000),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            headers=default_headers(user_agent, base_url),
        )
