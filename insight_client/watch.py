#!/usr/bin/env python3
"""
insight-watch: follow new blocks and address activity on an Insight explorer.

Connects to the explorer (INSIGHT_API_URL or --url), subscribes to every
--address given, and logs each block and transaction notification as a
structured line until interrupted.

Usage:
  insight-watch --url https://insight.bitpay.com/api --address 1BoatSLRHtKNngkdXEeobR76b53LETtpyT
  python -m insight_client.watch --best-block
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import sys

import httpx

from insight_client.client import InsightClient
from insight_client.client_logging import get_logger
from insight_client.config import get_settings
from insight_client.core.exceptions import ConstructionError, InsightClientError
from insight_client.models import Block, Transaction
from insight_client.push import NotificationStream

logger = get_logger(__name__)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="insight-watch", description=__doc__.split("\n")[1])
    parser.add_argument("--url", help="explorer API base URL (default: INSIGHT_API_URL)")
    parser.add_argument("--proxy", help="proxy URL for HTTP and push traffic")
    parser.add_argument(
        "--address",
        action="append",
        default=[],
        help="address to watch; repeat for several",
    )
    parser.add_argument(
        "--best-block",
        action="store_true",
        help="print the current best block and exit",
    )
    return parser.parse_args(argv)


async def _drain_blocks(stream: NotificationStream[Block]) -> None:
    async for block in stream:
        logger.info("block", hash=block.hash, parent=block.parent, height=block.height)


async def _drain_transactions(stream: NotificationStream[Transaction]) -> None:
    async for tx in stream:
        logger.info(
            "transaction",
            txid=tx.txid,
            inputs=len(tx.inputs),
            outputs=len(tx.outputs),
            value_out=round(sum(o.value for o in tx.outputs), 8),
            confirmations=tx.confirmations,
        )


async def run(args: argparse.Namespace) -> int:
    try:
        client = await InsightClient.connect(
            args.url,
            proxy_url=args.proxy,
            settings=get_settings(),
        )
    except ConstructionError as e:
        logger.error("watch_connect_failed", error=str(e))
        return 1

    async with client:
        if args.best_block:
            try:
                best = await client.get_best_block()
            except (InsightClientError, httpx.HTTPError) as e:
                logger.error("best_block_failed", error=str(e))
                return 1
            logger.info("best_block", hash=best.hash, parent=best.parent, height=best.height)
            return 0
        for address in args.address:
            await client.listen_address(address)
        logger.info("watch_started", addresses=len(args.address))
        await asyncio.gather(
            _drain_blocks(client.block_notify()),
            _drain_transactions(client.transaction_notify()),
        )
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    with contextlib.suppress(KeyboardInterrupt):
        return asyncio.run(run(args))
    logger.info("watch_stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
