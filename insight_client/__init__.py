"""
Insight client: async access to an Insight block explorer.

Pulls transactions, unspent outputs and block summaries over the HTTP API,
broadcasts raw transactions, and fans out real-time block and address
notifications received over the explorer's Socket.IO push channel.
"""

from insight_client.client import InsightClient
from insight_client.core.exceptions import (
    ConnectTimeout,
    ConstructionError,
    DecodeError,
    InsightClientError,
    InsufficientData,
    PaginationLimitExceeded,
    PartialResultError,
    RequestFailed,
    StreamClosed,
    TypeMismatch,
)
from insight_client.models import Block, BlockSummary, Transaction, Utxo

__version__ = "0.1.0"

__all__ = [
    "Block",
    "BlockSummary",
    "ConnectTimeout",
    "ConstructionError",
    "DecodeError",
    "InsightClient",
    "InsightClientError",
    "InsufficientData",
    "PaginationLimitExceeded",
    "PartialResultError",
    "RequestFailed",
    "StreamClosed",
    "Transaction",
    "TypeMismatch",
    "Utxo",
]
