"""
Topic Registry - maps a log's topic[0] to the event kind it announces.

The exchange contract emits five events, each identified by the keccak256
hash of its bare ASCII name (no argument list, unlike Solidity signatures).
The table is built once at import and is read-only afterwards.
"""

from types import MappingProxyType
from typing import Mapping, Optional, Union
import logging

from web3 import Web3

from .base import EventKind, TopicClassification, to_hex_str

logger = logging.getLogger(__name__)


def topic_hash(event_name: str) -> str:
    """keccak256 of an event name as lowercase 0x hex"""
    return Web3.to_hex(Web3.keccak(text=event_name))


def _build_topic_table() -> Mapping[str, EventKind]:
    table = {}
    for kind in EventKind:
        if kind.event_name is None:
            continue
        table[topic_hash(kind.event_name)] = kind
    return MappingProxyType(table)


TOPIC_TO_KIND: Mapping[str, EventKind] = _build_topic_table()


class TopicRegistry:
    """
    Classifies topic hashes against the fixed event table.

    classify() never raises: anything unrecognized, including a missing
    topic or a value that is not hex at all, comes back as UNKNOWN with the
    original value kept for display.
    """

    def __init__(self, table: Mapping[str, EventKind] = TOPIC_TO_KIND):
        self._table = table

    def classify(self, topic: Union[str, bytes, None]) -> TopicClassification:
        if topic is None:
            return TopicClassification(kind=EventKind.UNKNOWN, topic_hash=None)
        try:
            normalized = to_hex_str(topic)
        except Exception:
            # Unprintable input still has to classify
            logger.debug(f"Could not normalize topic {topic!r}")
            return TopicClassification(kind=EventKind.UNKNOWN, topic_hash=repr(topic))
        kind = self._table.get(normalized, EventKind.UNKNOWN)
        return TopicClassification(kind=kind, topic_hash=normalized)

    def topic_for(self, kind: EventKind) -> Optional[str]:
        """Topic hash for a known kind, None for UNKNOWN"""
        for topic, mapped in self._table.items():
            if mapped is kind:
                return topic
        return None

    def __len__(self) -> int:
        return len(self._table)


# Process-wide default instance
DEFAULT_TOPIC_REGISTRY = TopicRegistry()
