"""
Trace Walker - drives log dispatch for one transaction or a block range.

Single transaction: hash shape is checked before touching the node, the
receipt is required, every log is dispatched in index order.

Block range: blocks ascending, transactions ascending. Transaction 0 of each
block is skipped (the block-opening system transaction carries no order
logs). Missing blocks, missing receipts and fetch errors are logged and the
scan moves on.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional
import logging
import re

from .decoders.base import (
    InvalidRange,
    InvalidTxHash,
    NarrationKind,
    NarrationRecord,
    RawLog,
    ReceiptNotFound,
    to_hex_str,
)
from .decoders.order_resolver import OrderTransactionResolver
from .decoders.registry import LogDispatcher
from .node_client import FETCH_ERRORS
from ..config.chain_config import TX_HASH_PATTERN

logger = logging.getLogger(__name__)

_TX_HASH_RE = re.compile(TX_HASH_PATTERN)


def validate_tx_hash(tx_hash: str) -> str:
    """Return the hash unchanged if it is 0x + 64 hex chars, else raise InvalidTxHash"""
    if not isinstance(tx_hash, str) or not _TX_HASH_RE.fullmatch(tx_hash):
        raise InvalidTxHash(tx_hash)
    return tx_hash


def validate_block_range(from_block: Any, to_block: Any) -> None:
    if not isinstance(from_block, int) or not isinstance(to_block, int):
        raise InvalidRange(from_block, to_block)
    if from_block <= 0 or to_block <= 0 or from_block > to_block:
        raise InvalidRange(from_block, to_block)


@dataclass
class TransactionTrace:
    """Narration for one transaction found during a block range scan"""
    block_number: int
    tx_index: int
    tx_hash: str
    records: List[NarrationRecord] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'block_number': self.block_number,
            'tx_index': self.tx_index,
            'tx_hash': self.tx_hash,
            'records': [r.to_dict() for r in self.records],
        }


def _block_tx_hash(tx: Any) -> str:
    # Full bodies are dicts; hash-only blocks list HexBytes
    if isinstance(tx, (bytes, str)):
        return to_hex_str(tx)
    return to_hex_str(tx['hash'])


class TraceWalker:
    """
    Orchestrates receipt fetching and log dispatch.
    """

    def __init__(self, node, dispatcher: Optional[LogDispatcher] = None):
        self.node = node
        self.dispatcher = dispatcher or LogDispatcher(OrderTransactionResolver(node))

    def trace_transaction(self, tx_hash: str) -> List[NarrationRecord]:
        """
        Decode every log of one transaction.

        Raises:
            InvalidTxHash: hash is not 0x + 64 hex chars (no node call made)
            ReceiptNotFound: the node has no receipt for the hash
        """
        validate_tx_hash(tx_hash)
        receipt = self.node.get_transaction_receipt(tx_hash)
        if receipt is None:
            raise ReceiptNotFound(tx_hash)
        return self.trace_receipt(receipt, tx_hash)

    def trace_receipt(self, receipt: Dict[str, Any], tx_hash: Optional[str] = None) -> List[NarrationRecord]:
        logs = receipt.get('logs') or []
        if not logs:
            return [NarrationRecord(kind=NarrationKind.NO_LOGS, message="No logs found", tx_hash=tx_hash)]

        records = []
        for i, log in enumerate(logs):
            raw = RawLog.from_web3(log)
            if raw.tx_hash is None:
                raw.tx_hash = tx_hash
            # Every log gets a header, including ones that decode to nothing
            label = self.dispatcher.topics.classify(raw.topics[0] if raw.topics else None).kind.label
            records.append(NarrationRecord(
                kind=NarrationKind.LOG_HEADER,
                message=f"log[{i}] (topic: {label})",
                log_index=i,
                topic=label,
                tx_hash=raw.tx_hash,
            ))
            records.extend(self.dispatcher.dispatch(raw, index=i))
        return records

    def iter_range(self, from_block: int, to_block: int) -> Iterator[TransactionTrace]:
        """
        Lazily trace every non-zero-index transaction of an inclusive block range.

        Raises:
            InvalidRange: before any node call, when bounds are not positive
                or from_block > to_block
        """
        validate_block_range(from_block, to_block)

        for block_number in range(from_block, to_block + 1):
            try:
                block = self.node.get_block(block_number, full_transactions=True)
            except FETCH_ERRORS as e:
                logger.error(f"Failed to fetch block {block_number}: {e}")
                continue
            if block is None:
                logger.error(f"No block found for block: {block_number}")
                continue

            for i, tx in enumerate(block.get('transactions') or []):
                if i == 0:
                    continue
                tx_hash = _block_tx_hash(tx)
                try:
                    receipt = self.node.get_transaction_receipt(tx_hash)
                except FETCH_ERRORS as e:
                    logger.error(f"Failed to fetch receipt for tx {tx_hash}: {e}")
                    continue
                if receipt is None:
                    logger.error(f"No receipt found for tx: {tx_hash}")
                    continue

                yield TransactionTrace(
                    block_number=block_number,
                    tx_index=i,
                    tx_hash=tx_hash,
                    records=self.trace_receipt(receipt, tx_hash),
                )

    def trace_range(self, from_block: int, to_block: int) -> List[TransactionTrace]:
        """Eager form of iter_range(); validation still happens up front"""
        validate_block_range(from_block, to_block)
        return list(self.iter_range(from_block, to_block))
