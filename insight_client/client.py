"""
Insight client facade.

Composes the request executor, response decoder, pagination engine and push
subscriber behind one object:

    async with await InsightClient.connect("https://insight.bitpay.com/api") as client:
        await client.listen_address(address)
        async for tx in client.transaction_notify():
            ...

Pull operations are coroutines bounded by the request timeout; concurrency
between them is up to the caller. Push notifications arrive on two streams
created with the client and closed with it.
"""

from __future__ import annotations

import dataclasses
import uuid
from typing import Any, Iterable
from urllib.parse import urlsplit

import httpx
import structlog
from websockets.exceptions import WebSocketException

from insight_client.client_logging import bind_client
from insight_client.config import ClientSettings, get_settings
from insight_client.core.exceptions import (
    ConstructionError,
    InsightClientError,
    InsufficientData,
)
from insight_client.decoder import (
    decode_block_summaries,
    decode_transaction,
    decode_transaction_list,
    decode_txid,
    decode_utxos,
)
from insight_client.http import RequestExecutor
from insight_client.models import Block, Transaction, TransactionList, Utxo
from insight_client.pagination import paginate
from insight_client.push import (
    TOPIC_ADDRESSTXID,
    TOPIC_HASHBLOCK,
    MalformedPayload,
    NotificationStream,
    PushSubscriber,
    classify,
    push_url,
)
from insight_client.push.subscriber import WebSocketConnect

# Failures a push handler logs and drops instead of raising
_FETCH_FAILURES = (InsightClientError, httpx.HTTPError)


def _join_addresses(addrs: Iterable[Any]) -> str:
    return ",".join(str(a) for a in addrs)


class InsightClient:
    """
    Client for one Insight explorer.

    Build with ``await InsightClient.connect(...)``; the constructor expects
    already connected collaborators.
    """

    def __init__(
        self,
        settings: ClientSettings,
        executor: RequestExecutor,
        subscriber: PushSubscriber,
        logger: structlog.BoundLogger,
    ) -> None:
        self.settings = settings
        self._executor = executor
        self._subscriber = subscriber
        self._log = logger
        self._blocks: NotificationStream[Block] = NotificationStream("block", logger=logger)
        self._transactions: NotificationStream[Transaction] = NotificationStream(
            "transaction", logger=logger
        )
        self._closed = False

    @classmethod
    async def connect(
        cls,
        api_url: str | None = None,
        *,
        proxy_url: str | None = None,
        settings: ClientSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        ws_connect: WebSocketConnect | None = None,
    ) -> "InsightClient":
        """
        Connect the push channel, subscribe to new blocks, and return the client.

        Args:
            api_url: Explorer API base URL (http or https). Defaults to settings.
            proxy_url: Proxy for HTTP and push traffic. Defaults to settings.
            settings: Base settings; get_settings() (environment) when omitted.
            transport: httpx transport override (tests).
            ws_connect: websockets.connect replacement (tests).

        Raises:
            ConstructionError: the URL scheme is not http/https or the push
                socket could not be opened or dropped before the initial
                subscription was sent.
            ConnectTimeout: the push handshake did not finish in time.
        """
        settings = settings or get_settings()
        overrides: dict[str, Any] = {}
        if api_url is not None:
            overrides["api_url"] = api_url
        if proxy_url is not None:
            overrides["proxy_url"] = proxy_url
        if overrides:
            settings = dataclasses.replace(settings, **overrides)

        try:
            ws_url = push_url(settings.api_url)
        except ValueError as e:
            raise ConstructionError(str(e)) from e

        logger = bind_client(uuid.uuid4().hex[:8], urlsplit(settings.api_url).hostname or "")
        subscriber = PushSubscriber(
            ws_url,
            connect_timeout_sec=settings.connect_timeout_sec,
            ping_interval_sec=settings.ping_interval_sec,
            proxy_url=settings.proxy_url,
            ws_connect=ws_connect,
            logger=logger,
        )
        await subscriber.connect()

        executor = RequestExecutor(
            settings.api_url,
            timeout_sec=settings.request_timeout_sec,
            proxy_url=settings.proxy_url,
            transport=transport,
            logger=logger,
        )
        client = cls(settings, executor, subscriber, logger)
        try:
            await client._setup_listeners()
        except (WebSocketException, OSError) as e:
            await client.close()
            raise ConstructionError(f"push subscription to {ws_url} failed: {e}") from e
        logger.info("client_ready", api_url=settings.api_url)
        return client

    async def __aenter__(self) -> "InsightClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """
        Shut the client down.

        No notification is published once close() starts; in-flight push
        handlers are cancelled, the push socket is closed, both streams are
        closed (readers drain them, then stop), and the HTTP client is released.
        """
        if self._closed:
            return
        self._closed = True
        await self._subscriber.close()
        self._blocks.close()
        self._transactions.close()
        await self._executor.aclose()
        self._log.info("client_closed")

    # Pull operations

    async def get_transaction(self, txid: str) -> Transaction:
        resp = await self._executor.execute(f"tx/{txid}", "GET")
        return decode_transaction(resp.content)

    async def get_transactions(self, addrs: Iterable[Any]) -> list[Transaction]:
        """
        Every transaction touching any of addrs, paging through the listing.

        Raises:
            PartialResultError: a page failed or paging did not converge;
                ``partial`` holds the transactions fetched before that.
        """
        joined = _join_addresses(addrs)

        async def _page(start: int, end: int) -> TransactionList:
            return await self._get_transaction_page(joined, start, end)

        return await paginate(
            _page,
            page_size=self.settings.page_size,
            max_pages=self.settings.max_pages,
            logger=self._log,
        )

    async def _get_transaction_page(self, joined: str, start: int, end: int) -> TransactionList:
        body = {"addrs": joined, "from": start, "to": end}
        resp = await self._executor.execute("addrs/txs", "POST", body=body)
        return decode_transaction_list(resp.content)

    async def get_utxos(self, addrs: Iterable[Any]) -> list[Utxo]:
        body = {"addrs": _join_addresses(addrs)}
        resp = await self._executor.execute("addrs/utxo", "POST", body=body)
        return decode_utxos(resp.content)

    async def get_best_block(self) -> Block:
        """
        The newest block, with its parent taken from the second-newest summary.

        The blocks listing has no parent hash for the head block, so two
        summaries are requested and paired.

        Raises:
            InsufficientData: fewer than two summaries came back.
        """
        resp = await self._executor.execute("blocks", "GET", query={"limit": 2})
        summaries = decode_block_summaries(resp.content)
        if len(summaries) < 2:
            raise InsufficientData(
                f"API returned {len(summaries)} block summaries, need 2"
            )
        return Block.from_summaries(summaries[0], summaries[1])

    async def broadcast(self, raw_tx: bytes) -> str:
        """Send a serialized transaction; returns the txid the explorer reports."""
        resp = await self._executor.execute("tx/send", "POST", body={"rawtx": raw_tx.hex()})
        txid = decode_txid(resp.content)
        self._log.info("transaction_broadcast", txid=txid)
        return txid

    # Push operations

    async def listen_address(self, addr: Any) -> None:
        """Receive transaction notifications for addr (any object whose str() is the address)."""
        await self._subscriber.subscribe(TOPIC_ADDRESSTXID, [str(addr)])

    def block_notify(self) -> NotificationStream[Block]:
        return self._blocks

    def transaction_notify(self) -> NotificationStream[Transaction]:
        return self._transactions

    async def _setup_listeners(self) -> None:
        self._subscriber.on(TOPIC_HASHBLOCK, self._on_hashblock)
        self._subscriber.on(TOPIC_ADDRESSTXID, self._on_addresstxid)
        await self._subscriber.subscribe(TOPIC_HASHBLOCK)

    def _publish(self, stream: NotificationStream[Any], item: Any) -> bool:
        if self._closed:
            return False
        return stream.publish(item)

    async def _on_hashblock(self, args: tuple[Any, ...]) -> None:
        # The payload is only a trigger; the tip is read back from the API.
        if self._closed:
            return
        try:
            best = await self.get_best_block()
        except _FETCH_FAILURES as e:
            self._log.error("best_block_fetch_failed", error=str(e))
            return
        if self._publish(self._blocks, best):
            self._log.debug("block_notified", hash=best.hash, height=best.height)

    async def _on_addresstxid(self, args: tuple[Any, ...]) -> None:
        if self._closed:
            return
        event = classify(TOPIC_ADDRESSTXID, args)
        if isinstance(event, MalformedPayload):
            self._log.warning(
                "push_payload_dropped",
                topic=event.topic,
                reason=event.reason,
            )
            return
        for txid in event.txids:
            try:
                tx = await self.get_transaction(txid)
            except _FETCH_FAILURES as e:
                self._log.error("transaction_fetch_failed", txid=txid, error=str(e))
                continue
            if not self._publish(self._transactions, tx):
                return
            self._log.debug("transaction_notified", txid=txid)
