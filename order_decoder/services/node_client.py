"""
Node Client Module

Thin Web3 wrapper for the three lookups the decoder needs. Absence is
returned as None instead of web3's not-found exceptions, so callers decide
whether a missing item is fatal (single transaction) or skippable (range).
"""

from typing import Any, Dict, Optional
import logging

import requests
from web3 import Web3
from web3.exceptions import (
    BlockNotFound as Web3BlockNotFound,
    TransactionNotFound as Web3TransactionNotFound,
    Web3Exception,
)

from ..config.chain_config import get_rpc_url, get_rpc_timeout

logger = logging.getLogger(__name__)

# Transport and node errors that only affect the item being fetched
FETCH_ERRORS = (Web3Exception, requests.RequestException, ValueError)


class NodeClient:
    """
    Service for reading transactions, receipts and blocks from an EVM node.
    """

    def __init__(self, rpc_url: Optional[str] = None, timeout: Optional[float] = None,
                 w3: Optional[Web3] = None):
        self.rpc_url = rpc_url or get_rpc_url()
        if w3 is None:
            w3 = Web3(Web3.HTTPProvider(
                self.rpc_url,
                request_kwargs={'timeout': timeout if timeout is not None else get_rpc_timeout()},
            ))
        self.w3 = w3

    def connect(self) -> "NodeClient":
        """Verify the endpoint answers; raises ConnectionError otherwise"""
        logger.debug(f"Connecting to RPC: {self.rpc_url}")
        try:
            connected = self.w3.is_connected()
        except requests.RequestException as e:
            raise ConnectionError(f"Failed to connect to RPC {self.rpc_url}: {e}") from e
        if not connected:
            raise ConnectionError(f"Failed to connect to RPC {self.rpc_url}")
        logger.debug(f"Connected to RPC: {self.rpc_url}")
        return self

    def get_transaction(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        try:
            return self.w3.eth.get_transaction(tx_hash)
        except Web3TransactionNotFound:
            logger.debug(f"Transaction {tx_hash} not found")
            return None

    def get_transaction_receipt(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        try:
            return self.w3.eth.get_transaction_receipt(tx_hash)
        except Web3TransactionNotFound:
            logger.debug(f"Receipt for {tx_hash} not found")
            return None

    def get_block(self, block_number: int, full_transactions: bool = True) -> Optional[Dict[str, Any]]:
        try:
            return self.w3.eth.get_block(block_number, full_transactions=full_transactions)
        except Web3BlockNotFound:
            logger.debug(f"Block {block_number} not found")
            return None
