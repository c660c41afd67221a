"""
Unit tests for the order log payload decoders.
"""
from decimal import Decimal, localcontext

import pytest
import rlp

from order_decoder.services.decoders.base import (
    MalformedPayload,
    RawLog,
    UnsupportedMultiTopic,
    format_ether,
    hex_element_to_text,
)
from order_decoder.services.decoders.log_decoders import (
    CanceledIdsLogDecoder,
    CancelLogDecoder,
    TradeLogDecoder,
    TriggerAboveLogDecoder,
    TriggeredIdsLogDecoder,
)
from order_decoder.services.decoders.topics import topic_hash

from conftest import BUY_TX, SELL_TX, hash_element, hash_list_payload, trade_payload


class TestHexElementToText:

    def test_recovers_hash_text(self):
        assert hex_element_to_text(hash_element(BUY_TX)) == BUY_TX

    def test_empty_element_is_empty_text(self):
        assert hex_element_to_text(b"") == ""

    def test_non_utf8_is_malformed(self):
        with pytest.raises(MalformedPayload):
            hex_element_to_text(b"\xff\xfe")

    def test_nested_list_is_malformed(self):
        with pytest.raises(MalformedPayload):
            hex_element_to_text([b"a"])


class TestFormatEther:

    @pytest.mark.parametrize("wei,expected", [
        (0, "0.0"),
        (1, "0.000000000000000001"),
        (10**18, "1.0"),
        (1500000000000000000, "1.5"),
        (123 * 10**18 + 456 * 10**12, "123.000456"),
        (2 * 10**18, "2.0"),
        (2**256 - 1, "115792089237316195423570985008687907853269984665640564039457.584007913129639935"),
    ])
    def test_format(self, wei, expected):
        assert format_ether(wei) == expected


class TestTradeLogDecoder:

    def test_decodes_hashes_and_price(self):
        record = TradeLogDecoder().decode(trade_payload(price_wei=2500000000000000000))

        assert record.buy_tx_hash == BUY_TX
        assert record.sell_tx_hash == SELL_TX
        assert record.price_eth == "2.5"
        assert record.price_hex == "0x22b1c8c1227a0000"

    @pytest.mark.parametrize("price_wei", [1, 7 * 10**17, 10**18, 31337 * 10**15, 2**96 + 3])
    def test_price_is_wei_over_ten_to_eighteen(self, price_wei):
        record = TradeLogDecoder().decode(trade_payload(price_wei=price_wei))
        with localcontext() as ctx:
            ctx.prec = 100
            assert Decimal(record.price_eth) == Decimal(price_wei) / Decimal(10**18)
        assert int(record.price_hex, 16) == price_wei

    def test_zero_price(self):
        record = TradeLogDecoder().decode(trade_payload(price_wei=0))
        assert record.price_eth == "0.0"
        assert record.price_hex == "0x"

    @pytest.mark.parametrize("count", [0, 1, 13, 15, 20])
    def test_wrong_element_count(self, count):
        with pytest.raises(MalformedPayload) as exc_info:
            TradeLogDecoder().decode(trade_payload(field_count=count))
        assert str(exc_info.value) == f"expected 14 elements, got {count}"

    def test_not_rlp(self):
        with pytest.raises(MalformedPayload):
            TradeLogDecoder().decode(b"\xf8")

    def test_top_level_string_is_malformed(self):
        with pytest.raises(MalformedPayload):
            TradeLogDecoder().decode(rlp.encode(b"just bytes"))

    def test_nested_price_is_malformed(self):
        fields = [b"\x01"] * 14
        fields[1] = hash_element(BUY_TX)
        fields[2] = hash_element(SELL_TX)
        fields[7] = [b"\x01"]
        with pytest.raises(MalformedPayload):
            TradeLogDecoder().decode(rlp.encode(fields))

    def test_price_wider_than_uint256_is_malformed(self):
        fields = rlp.decode(trade_payload())
        fields[7] = b"\x01" * 33
        with pytest.raises(MalformedPayload):
            TradeLogDecoder().decode(rlp.encode(fields))

    def test_decode_log_rejects_multiple_topics(self):
        log = RawLog(topics=[topic_hash("Trades"), "0x" + "00" * 32], data=trade_payload())
        with pytest.raises(UnsupportedMultiTopic):
            TradeLogDecoder().decode_log(log)


class TestHashListDecoders:

    def test_triggered_ids_keep_order(self):
        a, b, c = ("0x" + ch * 64 for ch in "abc")
        record = TriggeredIdsLogDecoder().decode(hash_list_payload(a, b, c))
        assert record.tx_hashes == (a, b, c)

    def test_triggered_ids_empty_list(self):
        record = TriggeredIdsLogDecoder().decode(rlp.encode([]))
        assert record.tx_hashes == ()

    def test_canceled_ids(self):
        record = CanceledIdsLogDecoder().decode(hash_list_payload(SELL_TX, BUY_TX))
        assert record.tx_hashes == (SELL_TX, BUY_TX)

    def test_bad_rlp(self):
        with pytest.raises(MalformedPayload):
            TriggeredIdsLogDecoder().decode(b"\xc5\x01")


class TestStubDecoders:

    @pytest.mark.parametrize("decoder_cls,event", [
        (CancelLogDecoder, "Cancel"),
        (TriggerAboveLogDecoder, "TopicTriggerAbove"),
    ])
    def test_no_op_success(self, decoder_cls, event):
        log = RawLog(topics=[topic_hash(event)], data=b"\x01\x02")
        assert decoder_cls().decode_log(log) is None

    @pytest.mark.parametrize("decoder_cls", [CancelLogDecoder, TriggerAboveLogDecoder])
    def test_still_checks_topic_count(self, decoder_cls):
        log = RawLog(topics=["0x01", "0x02"], data=b"\x01")
        with pytest.raises(UnsupportedMultiTopic):
            decoder_cls().decode_log(log)
