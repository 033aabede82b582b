"""
Pytest fixtures for Insight client tests. No network: HTTP goes through
httpx.MockTransport, the push channel through scripted fake websockets.
"""

from __future__ import annotations

import pytest

from fakes import API_URL


@pytest.fixture
def settings():
    """Client settings pointing at the fake explorer with short timeouts."""
    from insight_client.config import ClientSettings

    return ClientSettings(
        api_url=API_URL,
        request_timeout_sec=5.0,
        connect_timeout_sec=1.0,
        page_size=50,
        max_pages=100,
    )


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Clear INSIGHT_* variables and run from an empty directory (no .env)."""
    for name in (
        "INSIGHT_API_URL",
        "INSIGHT_PROXY_URL",
        "INSIGHT_REQUEST_TIMEOUT_SEC",
        "INSIGHT_CONNECT_TIMEOUT_SEC",
        "INSIGHT_PAGE_SIZE",
        "INSIGHT_MAX_PAGES",
        "INSIGHT_PING_INTERVAL_SEC",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch
