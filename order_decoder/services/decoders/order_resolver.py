"""
Order Transaction Resolver - turns an order transaction hash into the order
it submitted.

Order transactions carry a custom input instead of ABI calldata:

    input = <1 byte type tag> || <UTF-8 JSON order context>

e.g. 0x21 followed by {"price": "5", "side": 0, "tpslLimit": null, ...}
"""

from typing import Any, Dict, Union
import json
import logging

from .base import (
    OrderContext,
    OrderIntent,
    ResolvedOrder,
    TxType,
    MalformedContext,
    TransactionNotFound,
    to_payload_bytes,
)
from ..node_client import FETCH_ERRORS

logger = logging.getLogger(__name__)


def parse_order_input(data: Union[bytes, str]) -> OrderIntent:
    """
    Decode an order transaction's input bytes.

    Raises:
        MalformedContext: empty input, or the bytes after the tag are not a
            UTF-8 JSON object with price and side
    """
    raw = to_payload_bytes(data)
    if not raw:
        raise MalformedContext("transaction input is empty")

    tag = raw[0]
    try:
        text = raw[1:].decode('utf-8')
        parsed = json.loads(text)
    except UnicodeDecodeError as e:
        raise MalformedContext(f"order context is not UTF-8: {e}") from e
    except json.JSONDecodeError as e:
        raise MalformedContext(f"order context is not valid JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise MalformedContext(f"order context is a JSON {type(parsed).__name__}, expected an object")

    return OrderIntent(tag=tag, tx_type=TxType.from_tag(tag), context=OrderContext.from_dict(parsed))


def _tx_input(tx: Dict[str, Any]) -> Union[bytes, str, None]:
    # web3 names the field "input"; some nodes also echo "data"
    if tx.get('input') is not None:
        return tx.get('input')
    return tx.get('data')


class OrderTransactionResolver:
    """
    Fetches order transactions and decodes their intent.

    resolve() reports every failure through the returned ResolvedOrder so
    the two legs of a trade can be resolved independently.
    """

    def __init__(self, node):
        self.node = node

    def resolve(self, tx_hash: str) -> ResolvedOrder:
        logger.debug(f"Resolving order tx {tx_hash}")
        try:
            tx = self.node.get_transaction(tx_hash)
            if tx is None:
                raise TransactionNotFound(tx_hash)
            intent = parse_order_input(_tx_input(tx))
        except (TransactionNotFound, MalformedContext) as e:
            logger.warning(f"Could not resolve order {tx_hash}: {e}")
            return ResolvedOrder(status="error", tx_hash=tx_hash, error=str(e))
        except FETCH_ERRORS as e:
            logger.warning(f"Fetch failed for order {tx_hash}: {e}")
            return ResolvedOrder(status="error", tx_hash=tx_hash, error=f"fetch failed: {e}")

        logger.debug(f"  type={intent.type_name} label={intent.label} price={intent.context.price}")
        return ResolvedOrder(status="success", tx_hash=tx_hash, intent=intent)
