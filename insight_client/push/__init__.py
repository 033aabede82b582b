"""
Push channel package.

Keeps the Socket.IO connection to the explorer, classifies topic payloads into
typed events, and delivers block and transaction notifications over
NotificationStream instances owned by the client.
"""

from insight_client.push.events import (
    TOPIC_ADDRESSTXID,
    TOPIC_HASHBLOCK,
    AddressActivity,
    BlockAnnouncement,
    MalformedPayload,
    classify,
    is_hash,
)
from insight_client.push.notifications import NotificationStream
from insight_client.push.protocol import push_url
from insight_client.push.subscriber import PushSubscriber

__all__ = [
    "TOPIC_ADDRESSTXID",
    "TOPIC_HASHBLOCK",
    "AddressActivity",
    "BlockAnnouncement",
    "MalformedPayload",
    "NotificationStream",
    "PushSubscriber",
    "classify",
    "is_hash",
    "push_url",
]
