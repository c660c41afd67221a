"""
Tests for NodeClient not-found translation and configuration.
"""
from unittest.mock import MagicMock

import pytest
import requests
from web3.exceptions import BlockNotFound, TransactionNotFound

from order_decoder.config import chain_config
from order_decoder.services.node_client import NodeClient

from conftest import TRADE_TX


def client_with(w3):
    return NodeClient(rpc_url="http://node.test", w3=w3)


class TestNotFound:

    def test_missing_transaction_is_none(self):
        w3 = MagicMock()
        w3.eth.get_transaction.side_effect = TransactionNotFound("not found")
        assert client_with(w3).get_transaction(TRADE_TX) is None

    def test_missing_receipt_is_none(self):
        w3 = MagicMock()
        w3.eth.get_transaction_receipt.side_effect = TransactionNotFound("not found")
        assert client_with(w3).get_transaction_receipt(TRADE_TX) is None

    def test_missing_block_is_none(self):
        w3 = MagicMock()
        w3.eth.get_block.side_effect = BlockNotFound("not found")
        assert client_with(w3).get_block(12) is None
        w3.eth.get_block.assert_called_once_with(12, full_transactions=True)

    def test_transport_errors_propagate(self):
        w3 = MagicMock()
        w3.eth.get_transaction_receipt.side_effect = requests.ConnectionError("refused")
        with pytest.raises(requests.ConnectionError):
            client_with(w3).get_transaction_receipt(TRADE_TX)


class TestConnect:

    def test_connected(self):
        w3 = MagicMock()
        w3.is_connected.return_value = True
        client = client_with(w3)
        assert client.connect() is client

    def test_not_connected(self):
        w3 = MagicMock()
        w3.is_connected.return_value = False
        with pytest.raises(ConnectionError):
            client_with(w3).connect()


class TestConfig:

    def test_default_rpc_url(self, monkeypatch):
        monkeypatch.delenv("RPC_URL", raising=False)
        assert chain_config.get_rpc_url() == "http://localhost:8551"

    def test_rpc_url_from_env(self, monkeypatch):
        monkeypatch.setenv("RPC_URL", "http://10.0.0.5:8545")
        assert chain_config.get_rpc_url() == "http://10.0.0.5:8545"
        assert NodeClient(w3=MagicMock()).rpc_url == "http://10.0.0.5:8545"

    def test_rpc_timeout(self, monkeypatch):
        monkeypatch.setenv("RPC_TIMEOUT", "2.5")
        assert chain_config.get_rpc_timeout() == 2.5
        monkeypatch.setenv("RPC_TIMEOUT", "soon")
        assert chain_config.get_rpc_timeout() == 30.0
