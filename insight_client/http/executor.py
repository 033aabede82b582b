"""
Request executor for the explorer HTTP API.

Responsibilities:
- Join the configured base path with an endpoint path; attach query params.
- Send JSON with a JSON content type, through one shared httpx.AsyncClient
  bounded by a fixed overall timeout.
- Retry exactly once when the first answer is 400 Bad Request (the explorer
  returns it spuriously under load); any other non-200 status is terminal.
- Leave body interpretation to the decoder.
"""

from __future__ import annotations

import posixpath
from typing import Any

import httpx
import structlog

from insight_client.client_logging import get_logger
from insight_client.core.exceptions import RequestFailed

DEFAULT_TIMEOUT_SEC = 30.0


class RequestExecutor:
    """
    Issues single requests against the explorer base URL.

    Transport failures (DNS, refused connection, timeout) propagate as the
    httpx exceptions they are, without a second attempt.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_sec: float = DEFAULT_TIMEOUT_SEC,
        proxy_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        """
        Args:
            base_url: Explorer API base (e.g. https://insight.bitpay.com/api).
            timeout_sec: Overall timeout applied to every request.
            proxy_url: Optional proxy (http://, https://, socks5://) for all requests.
            transport: Optional httpx transport; replaces the network stack (tests).
            logger: Bound logger of the owning client.
        """
        self._base_url = httpx.URL(base_url)
        self._log = logger or get_logger(__name__)
        kwargs: dict[str, Any] = {"timeout": httpx.Timeout(timeout_sec)}
        if transport is not None:
            kwargs["transport"] = transport
        elif proxy_url:
            kwargs["proxy"] = proxy_url
        self._client = httpx.AsyncClient(**kwargs)

    def url_for(self, endpoint: str) -> httpx.URL:
        """Base URL with endpoint joined onto its path; the base query is dropped."""
        base_path = self._base_url.path or "/"
        path = posixpath.join(base_path, endpoint.lstrip("/"))
        return self._base_url.copy_with(path=path, query=None)

    async def execute(
        self,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
        query: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """
        Send one request (plus at most one retry on 400) and return the 200 response.

        Args:
            endpoint: Path relative to the base URL (e.g. "tx/<txid>").
            method: HTTP method.
            body: JSON-serializable request body, or None.
            query: Query parameters, attached verbatim when given.

        Raises:
            RequestFailed: final status is not 200.
            httpx.TransportError: network-level failure.
        """
        request = self._client.build_request(
            method,
            self.url_for(endpoint),
            json=body,
            params=query,
            headers={"Content-Type": "application/json"},
        )
        resp = await self._client.send(request)
        if resp.status_code == httpx.codes.BAD_REQUEST:
            self._log.warning(
                "request_retry_bad_request",
                method=method,
                endpoint=endpoint,
            )
            resp = await self._client.send(request)
        if resp.status_code != httpx.codes.OK:
            self._log.warning(
                "request_failed",
                method=method,
                endpoint=endpoint,
                status_code=resp.status_code,
            )
            raise RequestFailed(resp.status_code, resp.reason_phrase, str(request.url))
        return resp

    async def aclose(self) -> None:
        await self._client.aclose()
