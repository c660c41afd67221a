"""
Log Dispatcher - central routing for order log decoding.

Routes each log to its payload decoder based on topic[0]:
1. Topic count check (exactly one topic is supported)
2. Empty data check
3. Event kind lookup through the TopicRegistry
4. Kind-specific decoding and narration; Trades logs additionally resolve
   the buy and sell order transactions they reference
"""

from typing import List, Optional
import logging

from .base import (
    EventKind,
    NarrationKind,
    NarrationRecord,
    RawLog,
    ResolvedOrder,
    Side,
    TradeRecord,
    MalformedPayload,
    UnsupportedMultiTopic,
)
from .log_decoders import (
    LOG_DECODERS,
    BaseLogDecoder,
    check_topic_count,
)
from .order_resolver import OrderTransactionResolver
from .topics import DEFAULT_TOPIC_REGISTRY, TopicRegistry

logger = logging.getLogger(__name__)


def describe_order_leg(resolved: ResolvedOrder) -> str:
    """`$<price> <SIDE> <LABEL> (<hash>)`; the label is omitted when the tag has none"""
    context = resolved.intent.context
    parts = [f"${context.price}", Side.display(context.side)]
    if resolved.intent.label:
        parts.append(resolved.intent.label)
    parts.append(f"({resolved.tx_hash})")
    return " ".join(parts)


class LogDispatcher:
    """
    Decodes one log at a time into narration records.

    dispatch() never raises for problems confined to the log itself; they
    come back as ERROR records and the caller moves on to the next log.
    """

    def __init__(self, resolver: OrderTransactionResolver,
                 topics: TopicRegistry = DEFAULT_TOPIC_REGISTRY):
        self.resolver = resolver
        self.topics = topics
        self._decoders = {kind: cls() for kind, cls in LOG_DECODERS.items()}

    def _get_decoder(self, kind: EventKind) -> Optional[BaseLogDecoder]:
        return self._decoders.get(kind)

    def dispatch(self, log: RawLog, index: Optional[int] = None) -> List[NarrationRecord]:
        """
        Decode one log.

        Args:
            log: log to decode
            index: position of the log in its receipt (defaults to log.log_index)

        Returns:
            Narration records for this log, in emission order
        """
        log_index = index if index is not None else log.log_index
        topic = log.topics[0] if log.topics else None
        classification = self.topics.classify(topic)
        kind = classification.kind

        def record(narration_kind: NarrationKind, message: str, **data) -> NarrationRecord:
            return NarrationRecord(
                kind=narration_kind,
                message=message,
                log_index=log_index,
                topic=kind.label,
                tx_hash=log.tx_hash,
                data=data,
            )

        logger.debug(f"log[{log_index}] topic={classification.topic_hash} kind={kind.name}")

        try:
            check_topic_count(log)

            if log.is_empty:
                return [record(NarrationKind.SKIPPED, "Skipping empty data field.")]

            if kind is EventKind.TRIGGERED_IDS:
                decoded = self._get_decoder(kind).decode(log.data)
                return [
                    record(NarrationKind.TRIGGERED_ID, f"TRIGGERED IDS[{i}]: {tx}", index=i, order_tx_hash=tx)
                    for i, tx in enumerate(decoded.tx_hashes)
                ]

            if kind is EventKind.CANCELED_IDS:
                decoded = self._get_decoder(kind).decode(log.data)
                return [
                    record(NarrationKind.CANCELED_ID, f"CANCELED IDS[{i}]: {tx}", index=i, order_tx_hash=tx)
                    for i, tx in enumerate(decoded.tx_hashes)
                ]

            if kind is EventKind.TRADES:
                trade = self._get_decoder(kind).decode(log.data)
                return self._narrate_trade(trade, record)

            if kind in (EventKind.CANCEL, EventKind.TRIGGER_ABOVE):
                self._get_decoder(kind).decode_log(log)
                return []

        except UnsupportedMultiTopic as e:
            logger.error(f"log[{log_index}] of tx {log.tx_hash}: {e}")
            return [record(NarrationKind.ERROR, str(e), error="UnsupportedMultiTopic")]
        except MalformedPayload as e:
            logger.error(f"log[{log_index}] ({kind.label}) of tx {log.tx_hash}: {e}")
            return [record(NarrationKind.ERROR, f"malformed {kind.label} payload: {e}", error="MalformedPayload")]

        logger.error(f"unexpected topic found: {classification.topic_hash}, txhash: {log.tx_hash}")
        return [record(
            NarrationKind.UNKNOWN_TOPIC,
            f"unexpected topic found: {classification.topic_hash}, txhash: {log.tx_hash}",
            topic_hash=classification.topic_hash,
        )]

    def _narrate_trade(self, trade: TradeRecord, record) -> List[NarrationRecord]:
        records = []
        # Both legs are always attempted; one failing does not hide the other
        for side_name, tx_hash in (("buy", trade.buy_tx_hash), ("sell", trade.sell_tx_hash)):
            resolved = self.resolver.resolve(tx_hash)
            if resolved.is_success:
                intent = resolved.intent
                records.append(record(
                    NarrationKind.TRADE_LEG,
                    describe_order_leg(resolved),
                    leg=side_name,
                    order_tx_hash=tx_hash,
                    price=intent.context.price,
                    side=Side.display(intent.context.side),
                    order_label=intent.label,
                    tx_type=intent.type_name,
                ))
            else:
                records.append(record(
                    NarrationKind.ERROR,
                    f"failed to resolve {side_name} order {tx_hash}: {resolved.error}",
                    leg=side_name,
                    order_tx_hash=tx_hash,
                    error=resolved.error,
                ))

        records.append(record(
            NarrationKind.MATCHED_PRICE,
            f"matched price: ${trade.price_eth}",
            price_eth=trade.price_eth,
            price_hex=trade.price_hex,
        ))
        return records
