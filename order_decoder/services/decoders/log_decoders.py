"""
Payload decoders for the exchange contract's event logs.

Each decoder turns one log's RLP data into a typed record:
- TradeLogDecoder: 14-field trade tuple -> TradeRecord
- TriggeredIdsLogDecoder / CanceledIdsLogDecoder: list of order hashes
- CancelLogDecoder / TriggerAboveLogDecoder: known kinds with no payload layout yet

Decoders raise MalformedPayload; the dispatcher turns that into a per-log
error record so sibling logs keep decoding.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Tuple
import logging

import rlp
from rlp.exceptions import DecodingError
from web3 import Web3

from .base import (
    EventKind,
    RawLog,
    TradeRecord,
    TriggeredIdsRecord,
    CanceledIdsRecord,
    MalformedPayload,
    UnsupportedMultiTopic,
    hex_element_to_text,
    format_ether,
)
from ...config.chain_config import (
    TRADE_LOG_FIELD_COUNT,
    TRADE_BUY_HASH_INDEX,
    TRADE_SELL_HASH_INDEX,
    TRADE_PRICE_INDEX,
    MAX_PRICE_BYTES,
)

logger = logging.getLogger(__name__)


def decode_rlp_list(payload: bytes) -> List[Any]:
    """RLP-decode a payload that must be a top-level list"""
    try:
        decoded = rlp.decode(payload)
    except (DecodingError, IndexError) as e:
        raise MalformedPayload(f"invalid RLP payload: {e}") from e
    if not isinstance(decoded, list):
        raise MalformedPayload("expected an RLP list, got a byte string")
    return decoded


def check_topic_count(log: RawLog) -> None:
    if len(log.topics) > 1:
        raise UnsupportedMultiTopic(len(log.topics))


class BaseLogDecoder(ABC):
    """
    Abstract base class for per-event payload decoders.
    """

    KIND: EventKind = EventKind.UNKNOWN

    def decode_log(self, log: RawLog):
        """Validate the log shape, then decode its data"""
        check_topic_count(log)
        return self.decode(log.data)

    @abstractmethod
    def decode(self, payload: bytes):
        """
        Decode a log's data bytes.

        Raises:
            MalformedPayload: the data does not match this event's layout
        """
        pass


class TradeLogDecoder(BaseLogDecoder):
    """
    Trades log: an RLP list of exactly 14 fields.

    Field 1 and 2 are the buy and sell order transaction hashes stored as
    text, field 7 is the match price in wei. The other fields are not
    needed for narration.
    """

    KIND = EventKind.TRADES

    def decode(self, payload: bytes) -> TradeRecord:
        fields = decode_rlp_list(payload)
        if len(fields) != TRADE_LOG_FIELD_COUNT:
            raise MalformedPayload(f"expected {TRADE_LOG_FIELD_COUNT} elements, got {len(fields)}")

        buy_tx_hash = hex_element_to_text(fields[TRADE_BUY_HASH_INDEX])
        sell_tx_hash = hex_element_to_text(fields[TRADE_SELL_HASH_INDEX])

        price_field = fields[TRADE_PRICE_INDEX]
        if not isinstance(price_field, bytes):
            raise MalformedPayload("price element is a list, expected a byte string")
        if len(price_field) > MAX_PRICE_BYTES:
            raise MalformedPayload(f"price element is {len(price_field)} bytes, max {MAX_PRICE_BYTES}")
        price_wei = int.from_bytes(price_field, 'big')

        record = TradeRecord(
            buy_tx_hash=buy_tx_hash,
            sell_tx_hash=sell_tx_hash,
            price_hex=Web3.to_hex(price_field),
            price_eth=format_ether(price_wei),
        )
        logger.debug(f"Trade decoded: buy={buy_tx_hash} sell={sell_tx_hash} price={record.price_eth}")
        return record


class _HashListDecoder(BaseLogDecoder):
    def decode_hashes(self, payload: bytes) -> Tuple[str, ...]:
        return tuple(hex_element_to_text(item) for item in decode_rlp_list(payload))


class TriggeredIdsLogDecoder(_HashListDecoder):
    """TriggeredIds log: RLP list of order hashes in trigger order (may be empty)"""

    KIND = EventKind.TRIGGERED_IDS

    def decode(self, payload: bytes) -> TriggeredIdsRecord:
        return TriggeredIdsRecord(tx_hashes=self.decode_hashes(payload))


class CanceledIdsLogDecoder(_HashListDecoder):
    """CanceledIds log: same list layout as TriggeredIds"""

    KIND = EventKind.CANCELED_IDS

    def decode(self, payload: bytes) -> CanceledIdsRecord:
        return CanceledIdsRecord(tx_hashes=self.decode_hashes(payload))


class CancelLogDecoder(BaseLogDecoder):
    """Cancel log: presence is the signal, data is not interpreted"""

    KIND = EventKind.CANCEL

    def decode(self, payload: bytes) -> Optional[Any]:
        return None


class TriggerAboveLogDecoder(BaseLogDecoder):
    """TopicTriggerAbove log: recognized, no narration"""

    KIND = EventKind.TRIGGER_ABOVE

    def decode(self, payload: bytes) -> Optional[Any]:
        return None


LOG_DECODERS = {
    decoder.KIND: decoder
    for decoder in (
        TradeLogDecoder,
        TriggeredIdsLogDecoder,
        CanceledIdsLogDecoder,
        CancelLogDecoder,
        TriggerAboveLogDecoder,
    )
}
