"""
Decoders for the exchange contract's order-matching logs.

- TopicRegistry: topic[0] hash -> EventKind
- Payload decoders: Trades, TriggeredIds, CanceledIds, Cancel, TopicTriggerAbove
- OrderTransactionResolver: order tx hash -> OrderIntent (type tag + JSON context)
- LogDispatcher: one log -> narration records
"""

from .base import (
    # Enums
    EventKind,
    TxType,
    Side,
    NarrationKind,
    # Dataclasses
    RawLog,
    TopicClassification,
    TradeRecord,
    TriggeredIdsRecord,
    CanceledIdsRecord,
    OrderContext,
    OrderIntent,
    ResolvedOrder,
    NarrationRecord,
    # Errors
    OrderDecoderError,
    InvalidInput,
    InvalidTxHash,
    InvalidRange,
    NotFound,
    TransactionNotFound,
    ReceiptNotFound,
    BlockNotFound,
    MalformedPayload,
    MalformedContext,
    UnsupportedMultiTopic,
    # Helpers
    hex_element_to_text,
    format_ether,
)
from .topics import TopicRegistry, DEFAULT_TOPIC_REGISTRY, TOPIC_TO_KIND, topic_hash
from .log_decoders import (
    BaseLogDecoder,
    TradeLogDecoder,
    TriggeredIdsLogDecoder,
    CanceledIdsLogDecoder,
    CancelLogDecoder,
    TriggerAboveLogDecoder,
)
from .order_resolver import OrderTransactionResolver, parse_order_input
from .registry import LogDispatcher

__all__ = [
    # Enums
    'EventKind',
    'TxType',
    'Side',
    'NarrationKind',
    # Dataclasses
    'RawLog',
    'TopicClassification',
    'TradeRecord',
    'TriggeredIdsRecord',
    'CanceledIdsRecord',
    'OrderContext',
    'OrderIntent',
    'ResolvedOrder',
    'NarrationRecord',
    # Errors
    'OrderDecoderError',
    'InvalidInput',
    'InvalidTxHash',
    'InvalidRange',
    'NotFound',
    'TransactionNotFound',
    'ReceiptNotFound',
    'BlockNotFound',
    'MalformedPayload',
    'MalformedContext',
    'UnsupportedMultiTopic',
    # Topics
    'TopicRegistry',
    'DEFAULT_TOPIC_REGISTRY',
    'TOPIC_TO_KIND',
    'topic_hash',
    # Payload decoders
    'BaseLogDecoder',
    'TradeLogDecoder',
    'TriggeredIdsLogDecoder',
    'CanceledIdsLogDecoder',
    'CancelLogDecoder',
    'TriggerAboveLogDecoder',
    # Orders
    'OrderTransactionResolver',
    'parse_order_input',
    # Dispatch
    'LogDispatcher',
    # Helpers
    'hex_element_to_text',
    'format_ether',
]
