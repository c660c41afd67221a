"""
Chain Configuration Module

Node endpoint settings and the fixed lookup tables shared by the decoders:
event-name topics, transaction-type tags and trade log layout.
"""

import os

# RPC Configuration
DEFAULT_RPC_URL = "http://localhost:8551"


def get_rpc_url() -> str:
    """Get RPC URL from environment"""
    return os.getenv("RPC_URL", DEFAULT_RPC_URL).strip() or DEFAULT_RPC_URL


def get_rpc_timeout() -> float:
    """HTTP timeout in seconds for node requests"""
    raw = os.getenv("RPC_TIMEOUT", "30").strip() or "30"
    try:
        return float(raw)
    except ValueError:
        return 30.0


# Event names whose keccak256 hash is the log's topic[0]
TOPIC_NAMES = {
    "TRADES": "Trades",
    "CANCEL": "Cancel",
    "CANCELED_IDS": "CanceledIds",
    "TRIGGERED_IDS": "TriggeredIds",
    "TRIGGER_ABOVE": "TopicTriggerAbove",
}

# First byte of an order transaction's input
TX_TYPE_NAMES = {
    0x01: "SESSION",
    0x02: "TRANSFER",
    0x11: "TOKEN_TRANSFER",
    0x21: "NEW",
    0x22: "CANCEL",
    0x23: "CANCEL_ALL",
    0x24: "MODIFY",
    0x25: "STOP_ORDER",
    0xFF: "INVALID",
}

# Trades log layout (RLP list)
TRADE_LOG_FIELD_COUNT = 14
TRADE_BUY_HASH_INDEX = 1
TRADE_SELL_HASH_INDEX = 2
TRADE_PRICE_INDEX = 7

# Price is a uint256
MAX_PRICE_BYTES = 32

# 0x + 32 bytes
TX_HASH_PATTERN = r"^0x[0-9a-fA-F]{64}$"

# Printed between transactions in block range mode
TX_SEPARATOR = "-" * 38
