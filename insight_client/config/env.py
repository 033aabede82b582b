"""
Environment variable loading for the Insight client.

- INSIGHT_API_URL: explorer API base URL (e.g. https://insight.bitpay.com/api)
- INSIGHT_PROXY_URL: optional proxy for HTTP and push traffic (http://, socks5://)
- INSIGHT_REQUEST_TIMEOUT_SEC: overall timeout for each HTTP request (default 30)
- INSIGHT_CONNECT_TIMEOUT_SEC: push channel handshake timeout (default 10)
- INSIGHT_PAGE_SIZE: transactions per page when listing (default 50)
- INSIGHT_MAX_PAGES: page cap for transaction listing; 0 disables it (default 1000)
- INSIGHT_PING_INTERVAL_SEC: keepalive interval when the server announces none (default 25)
- Loads .env from the working directory (or the nearest parent holding one).
"""

from __future__ import annotations

import os

from dotenv import find_dotenv, load_dotenv

DEFAULT_API_URL = "https://insight.bitpay.com/api"
DEFAULT_REQUEST_TIMEOUT_SEC = 30.0
DEFAULT_CONNECT_TIMEOUT_SEC = 10.0
DEFAULT_PAGE_SIZE = 50
DEFAULT_MAX_PAGES = 1000
DEFAULT_PING_INTERVAL_SEC = 25.0


def load_insight_env() -> None:
    """Load .env (searched upward from the working directory) without overriding set variables."""
    load_dotenv(find_dotenv(usecwd=True), override=False)


def _get_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def _get_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def get_api_url() -> str:
    """Return INSIGHT_API_URL, or the public default explorer."""
    load_insight_env()
    return (os.getenv("INSIGHT_API_URL") or "").strip() or DEFAULT_API_URL


def get_proxy_url() -> str | None:
    """Return INSIGHT_PROXY_URL, or None when traffic goes direct."""
    load_insight_env()
    return (os.getenv("INSIGHT_PROXY_URL") or "").strip() or None


def get_request_timeout() -> float:
    load_insight_env()
    return _get_float("INSIGHT_REQUEST_TIMEOUT_SEC", DEFAULT_REQUEST_TIMEOUT_SEC)


def get_connect_timeout() -> float:
    load_insight_env()
    return _get_float("INSIGHT_CONNECT_TIMEOUT_SEC", DEFAULT_CONNECT_TIMEOUT_SEC)


def get_page_size() -> int:
    load_insight_env()
    return _get_int("INSIGHT_PAGE_SIZE", DEFAULT_PAGE_SIZE)


def get_max_pages() -> int | None:
    """
    Return INSIGHT_MAX_PAGES.
    0 means no cap (page until the server's declared total is reached).
    """
    load_insight_env()
    value = _get_int("INSIGHT_MAX_PAGES", DEFAULT_MAX_PAGES)
    return value if value > 0 else None


def get_ping_interval() -> float:
    load_insight_env()
    return _get_float("INSIGHT_PING_INTERVAL_SEC", DEFAULT_PING_INTERVAL_SEC)
