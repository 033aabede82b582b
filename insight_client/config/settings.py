"""
Client settings.

Responsibilities:
- Collect the explorer URL, proxy, timeouts and paging limits in one object.
- Validate them once, before any connection is attempted.
"""

from __future__ import annotations

from dataclasses import dataclass

from insight_client.config import env


@dataclass(frozen=True)
class ClientSettings:
    """Settings for one InsightClient."""

    api_url: str = env.DEFAULT_API_URL
    proxy_url: str | None = None
    request_timeout_sec: float = env.DEFAULT_REQUEST_TIMEOUT_SEC
    connect_timeout_sec: float = env.DEFAULT_CONNECT_TIMEOUT_SEC
    page_size: int = env.DEFAULT_PAGE_SIZE
    max_pages: int | None = env.DEFAULT_MAX_PAGES
    ping_interval_sec: float = env.DEFAULT_PING_INTERVAL_SEC

    def __post_init__(self) -> None:
        if not self.api_url.strip():
            raise ValueError("api_url must be non-empty")
        if self.request_timeout_sec <= 0:
            raise ValueError("request_timeout_sec must be positive")
        if self.connect_timeout_sec <= 0:
            raise ValueError("connect_timeout_sec must be positive")
        if self.page_size <= 0:
            raise ValueError("page_size must be positive")
        if self.max_pages is not None and self.max_pages <= 0:
            raise ValueError("max_pages must be positive or None")
        if self.ping_interval_sec <= 0:
            raise ValueError("ping_interval_sec must be positive")


def get_settings() -> ClientSettings:
    """
    Return settings built from the environment (and .env).

    Returns:
        ClientSettings with api_url, proxy_url, timeouts and paging limits.
    """
    return ClientSettings(
        api_url=env.get_api_url(),
        proxy_url=env.get_proxy_url(),
        request_timeout_sec=env.get_request_timeout(),
        connect_timeout_sec=env.get_connect_timeout(),
        page_size=env.get_page_size(),
        max_pages=env.get_max_pages(),
        ping_interval_sec=env.get_ping_interval(),
    )
