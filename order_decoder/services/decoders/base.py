"""
Base classes and data structures for the order log decoders.
Provides the shared enums, records, error types and hex/wei helpers used by
the topic registry, payload decoders, order resolver and log dispatcher.
"""

from web3 import Web3
from eth_utils import decode_hex, is_0x_prefixed, remove_0x_prefix
from decimal import Decimal
from typing import Dict, List, Optional, Any, Tuple, Union
from dataclasses import dataclass, field
from enum import Enum, IntEnum
import logging

from ...config.chain_config import TOPIC_NAMES, TX_TYPE_NAMES

logger = logging.getLogger(__name__)


# ============================================================================
# ERRORS
# ============================================================================

class OrderDecoderError(Exception):
    """Base class for every error raised by the decoder pipeline"""


class InvalidInput(OrderDecoderError):
    """Bad user input; fatal to the run"""


class InvalidTxHash(InvalidInput):
    def __init__(self, tx_hash: str):
        super().__init__(f"Invalid txhash: {tx_hash}")
        self.tx_hash = tx_hash


class InvalidRange(InvalidInput):
    def __init__(self, from_block: Any, to_block: Any):
        super().__init__(f"Invalid block range: {from_block} -> {to_block}")
        self.from_block = from_block
        self.to_block = to_block


class NotFound(OrderDecoderError):
    """The node has no record of the requested item"""


class TransactionNotFound(NotFound):
    def __init__(self, tx_hash: str):
        super().__init__(f"Transaction not found: {tx_hash}")
        self.tx_hash = tx_hash


class ReceiptNotFound(NotFound):
    def __init__(self, tx_hash: str):
        super().__init__(f"No receipt found for tx: {tx_hash}")
        self.tx_hash = tx_hash


class BlockNotFound(NotFound):
    def __init__(self, block_number: int):
        super().__init__(f"No block found for block: {block_number}")
        self.block_number = block_number


class MalformedPayload(OrderDecoderError):
    """Log data does not have the expected RLP layout"""


class MalformedContext(OrderDecoderError):
    """Order transaction input is not a parseable order context"""


class UnsupportedMultiTopic(OrderDecoderError):
    def __init__(self, topic_count: int):
        super().__init__(f"Multiple topics found in a log ({topic_count})")
        self.topic_count = topic_count


# ============================================================================
# ENUMS
# ============================================================================

class EventKind(Enum):
    """Semantic kind of a log, derived from its topic hash"""
    TRADES = "TRADES"
    CANCEL = "CANCEL"
    CANCELED_IDS = "CANCELED IDS"
    TRIGGERED_IDS = "TRIGGERED IDS"
    TRIGGER_ABOVE = "TRIGGER ABOVE"
    UNKNOWN = "UNKNOWN"

    @property
    def label(self) -> str:
        return self.value

    @property
    def event_name(self) -> Optional[str]:
        """ASCII event name hashed into the topic, None for UNKNOWN"""
        return TOPIC_NAMES.get(self.name)


class TxType(Enum):
    """Order transaction type, the first byte of the transaction input"""
    SESSION = 0x01
    TRANSFER = 0x02
    TOKEN_TRANSFER = 0x11
    NEW = 0x21
    CANCEL = 0x22
    CANCEL_ALL = 0x23
    MODIFY = 0x24
    STOP_ORDER = 0x25
    INVALID = 0xFF
    UNKNOWN = -1

    @classmethod
    def from_tag(cls, tag: int) -> "TxType":
        name = TX_TYPE_NAMES.get(tag)
        if name is None:
            return cls.UNKNOWN
        return cls[name]


class Side(IntEnum):
    BUY = 0
    SELL = 1

    @classmethod
    def display(cls, value: Any) -> str:
        """Side name for narration; anything other than 0/1 is UNKNOWN"""
        try:
            return cls(int(value)).name
        except (TypeError, ValueError):
            return "UNKNOWN"


class NarrationKind(Enum):
    """What a narration record describes"""
    LOG_HEADER = "log_header"
    TRADE_LEG = "trade_leg"
    MATCHED_PRICE = "matched_price"
    TRIGGERED_ID = "triggered_id"
    CANCELED_ID = "canceled_id"
    SKIPPED = "skipped"
    NO_LOGS = "no_logs"
    UNKNOWN_TOPIC = "unknown_topic"
    ERROR = "error"


# ============================================================================
# DATA CLASSES
# ============================================================================

@dataclass
class RawLog:
    """
    One event log as read from a receipt.

    `data` is always bytes here; the "0x" sentinel and b"" both mean an
    empty payload.
    """
    topics: List[str]
    data: bytes
    tx_hash: Optional[str] = None
    log_index: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return len(self.data) == 0

    @classmethod
    def from_web3(cls, log: Dict[str, Any]) -> "RawLog":
        """Adapt a web3 log AttributeDict (HexBytes fields) or a plain JSON-RPC dict"""
        topics = [to_hex_str(t) for t in (log.get('topics') or [])]
        tx_hash = log.get('transactionHash')
        return cls(
            topics=topics,
            data=to_payload_bytes(log.get('data')),
            tx_hash=to_hex_str(tx_hash) if tx_hash is not None else None,
            log_index=log.get('logIndex'),
        )


@dataclass(frozen=True)
class TopicClassification:
    kind: EventKind
    topic_hash: Optional[str]

    @property
    def is_known(self) -> bool:
        return self.kind is not EventKind.UNKNOWN


@dataclass(frozen=True)
class TradeRecord:
    """A matched trade decoded from a Trades log"""
    buy_tx_hash: str
    sell_tx_hash: str
    price_hex: str
    price_eth: str


@dataclass(frozen=True)
class TriggeredIdsRecord:
    """Order transaction hashes in trigger order"""
    tx_hashes: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CanceledIdsRecord:
    tx_hashes: Tuple[str, ...] = ()


@dataclass
class OrderContext:
    """
    JSON order context carried after the type tag in an order transaction.

    Only `price` and `side` are required. Unknown keys land in `extra`.
    """
    price: Any
    side: Any
    tpsl_limit: Any = None
    base_token: Optional[str] = None
    quote_token: Optional[str] = None
    quantity: Any = None
    order_type: Any = None
    extra: Dict[str, Any] = field(default_factory=dict)

    KNOWN_KEYS = {
        'price': 'price',
        'side': 'side',
        'tpslLimit': 'tpsl_limit',
        'baseToken': 'base_token',
        'quoteToken': 'quote_token',
        'quantity': 'quantity',
        'orderType': 'order_type',
    }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "OrderContext":
        missing = [k for k in ('price', 'side') if k not in raw]
        if missing:
            raise MalformedContext(f"order context missing {', '.join(missing)}")
        kwargs = {attr: raw[key] for key, attr in cls.KNOWN_KEYS.items() if key in raw}
        extra = {k: v for k, v in raw.items() if k not in cls.KNOWN_KEYS}
        return cls(extra=extra, **kwargs)


@dataclass
class OrderIntent:
    """Decoded meaning of an order transaction's input bytes"""
    tag: int
    tx_type: TxType
    context: OrderContext

    @property
    def type_name(self) -> str:
        return self.tx_type.name

    @property
    def label(self) -> Optional[str]:
        """
        Order kind shown in trade-leg narration.

        STOP_ORDER for 0x25; LIMIT_TPSL / LIMIT for 0x21 depending on the
        tpslLimit field. Other tags have no label.
        """
        if self.tx_type is TxType.STOP_ORDER:
            return "STOP_ORDER"
        if self.tx_type is TxType.NEW:
            if self.context.tpsl_limit is not None:
                return "LIMIT_TPSL"
            return "LIMIT"
        return None


@dataclass
class ResolvedOrder:
    """Outcome of one order transaction lookup"""
    status: str  # "success" or "error"
    tx_hash: str
    intent: Optional[OrderIntent] = None
    error: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.status == "success"


@dataclass
class NarrationRecord:
    """One decoded fact, tagged with the log it came from"""
    kind: NarrationKind
    message: str
    log_index: Optional[int] = None
    topic: Optional[str] = None
    tx_hash: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_error(self) -> bool:
        return self.kind in (NarrationKind.ERROR, NarrationKind.UNKNOWN_TOPIC)

    def to_dict(self) -> dict:
        return {
            'kind': self.kind.value,
            'message': self.message,
            'log_index': self.log_index,
            'topic': self.topic,
            'tx_hash': self.tx_hash,
            'data': {k: str(v) if isinstance(v, (bytes, Decimal)) else v for k, v in self.data.items()},
        }


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def to_hex_str(value: Union[str, bytes, None]) -> Optional[str]:
    """Normalize a hash (HexBytes, bytes or hex text) to lowercase 0x hex"""
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        return Web3.to_hex(bytes(value))
    text = str(value).strip().lower()
    return text if is_0x_prefixed(text) else f"0x{text}"


def to_payload_bytes(data: Union[str, bytes, None]) -> bytes:
    """Log data as bytes; None, "" and "0x" are all empty"""
    if data is None:
        return b""
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    return decode_hex(data) if remove_0x_prefix(data) else b""


def hex_element_to_text(element: bytes) -> str:
    """
    Recover a transaction hash from an RLP element of an order log.

    The contract stores hashes as the ASCII text of their hex form, so the
    element is taken in its 0x hex form, the 0x marker stripped, the hex
    decoded and the resulting bytes read back as text.
    """
    if not isinstance(element, (bytes, bytearray)):
        raise MalformedPayload(f"expected byte string element, got {type(element).__name__}")
    hex_form = remove_0x_prefix(Web3.to_hex(bytes(element)))
    try:
        return bytes.fromhex(hex_form).decode('utf-8')
    except UnicodeDecodeError as e:
        raise MalformedPayload(f"element is not text: {e}") from e


def format_ether(wei: int) -> str:
    """
    Fixed-point ether string for a wei amount.

    Trailing zeros are dropped but one fractional digit is kept:
    1500000000000000000 -> "1.5", 2 * 10**18 -> "2.0".
    """
    # from_wei returns int 0 for zero, Decimal otherwise
    eth = Decimal(Web3.from_wei(wei, 'ether'))
    text = format(eth, 'f')
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    return f"{text}.0" if '.' not in text else text
