"""
Shared fixtures: an in-memory node and builders for order log payloads.
"""
import json
import sys
import os

import pytest
import rlp
from hexbytes import HexBytes

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from order_decoder.config.chain_config import TRADE_LOG_FIELD_COUNT
from order_decoder.services.decoders.topics import topic_hash


BUY_TX = "0x" + "a1" * 32
SELL_TX = "0x" + "b2" * 32
TRADE_TX = "0x" + "c3" * 32


def hash_element(tx_hash: str) -> bytes:
    """Order logs store hashes as the ASCII text of their hex form"""
    return tx_hash.encode("ascii")


def trade_payload(buy_tx=BUY_TX, sell_tx=SELL_TX, price_wei=5 * 10**18, field_count=TRADE_LOG_FIELD_COUNT) -> bytes:
    fields = [b"\x01"] * field_count
    if field_count > 2:
        fields[1] = hash_element(buy_tx)
        fields[2] = hash_element(sell_tx)
    if field_count > 7:
        fields[7] = price_wei.to_bytes((price_wei.bit_length() + 7) // 8, "big") if price_wei else b""
    return rlp.encode(fields)


def hash_list_payload(*tx_hashes) -> bytes:
    return rlp.encode([hash_element(h) for h in tx_hashes])


def order_input(tag: int, **context) -> bytes:
    return bytes([tag]) + json.dumps(context).encode("utf-8")


def make_log(event_name=None, data=b"", topics=None, tx_hash=TRADE_TX, log_index=0) -> dict:
    """A receipt log shaped like web3's AttributeDict (HexBytes fields)"""
    if topics is None:
        topics = [topic_hash(event_name)] if event_name else []
    return {
        "topics": [HexBytes(t) for t in topics],
        "data": HexBytes(data),
        "transactionHash": HexBytes(tx_hash),
        "logIndex": log_index,
    }


class FakeNode:
    """
    In-memory stand-in for NodeClient.

    Missing entries return None like the real client; `errors` maps a key
    to an exception raised on lookup. Every call is recorded in `calls`.
    """

    def __init__(self, transactions=None, receipts=None, blocks=None, errors=None):
        self.transactions = transactions or {}
        self.receipts = receipts or {}
        self.blocks = blocks or {}
        self.errors = errors or {}
        self.calls = []

    def _lookup(self, method, key, table):
        self.calls.append((method, key))
        if key in self.errors:
            raise self.errors[key]
        return table.get(key)

    def get_transaction(self, tx_hash):
        return self._lookup("get_transaction", tx_hash, self.transactions)

    def get_transaction_receipt(self, tx_hash):
        return self._lookup("get_transaction_receipt", tx_hash, self.receipts)

    def get_block(self, block_number, full_transactions=True):
        return self._lookup("get_block", block_number, self.blocks)


@pytest.fixture
def fake_node():
    return FakeNode()


@pytest.fixture
def order_node():
    """Node knowing a LIMIT buy and a STOP_ORDER sell"""
    return FakeNode(transactions={
        BUY_TX: {"hash": HexBytes(BUY_TX), "input": HexBytes(order_input(0x21, price="5", side=0, tpslLimit=None))},
        SELL_TX: {"hash": HexBytes(SELL_TX), "input": HexBytes(order_input(0x25, price="5", side=1))},
    })
