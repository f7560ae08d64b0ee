"""Tests for the Trails API data objects in basereg.protocol.models."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from basereg.protocol import TrailsAPIError
from basereg.protocol.models import (
    Execution,
    ExpiryInfo,
    PriceQuote,
    Step,
    TransactionPayload,
    parse_timestamp,
)
from basereg.protocol.types import ZERO_TX_HASH

TX = "0x" + "12" * 32


def _step(n: int, tx_hash: str = TX) -> Step:
    return Step(step_number=n, tx_hash=tx_hash, created_at="")


def _execution(*steps: Step) -> Execution:
    ts = datetime(2025, 1, 1, tzinfo=timezone.utc)
    return Execution(id="e", created_at=ts, updated_at=ts, steps=steps)


class TestStepCompletion:
    def test_step_zero_never_completed(self):
        assert not _step(0).is_completed
        assert not _step(0, ZERO_TX_HASH).is_completed

    def test_zero_hash_not_completed(self):
        assert not _step(3, ZERO_TX_HASH).is_completed

    def test_real_hash_completed(self):
        assert _step(1).is_completed


class TestNextStepNumber:
    def test_no_steps(self):
        assert _execution().next_step_number == 1

    def test_only_initial_step(self):
        assert _execution(_step(0, ZERO_TX_HASH)).next_step_number == 1

    def test_initial_step_with_hash_is_ignored(self):
        assert _execution(_step(0)).next_step_number == 1

    def test_pending_steps_are_ignored(self):
        execution = _execution(_step(0, ZERO_TX_HASH), _step(1, ZERO_TX_HASH), _step(2, ZERO_TX_HASH))
        assert execution.next_step_number == 1

    @pytest.mark.parametrize("k", [1, 2, 5])
    def test_max_completed_plus_one(self, k):
        execution = _execution(_step(0, ZERO_TX_HASH), *(_step(n) for n in range(1, k + 1)))
        assert execution.next_step_number == k + 1

    def test_gap_uses_max(self):
        execution = _execution(_step(1), _step(3), _step(2, ZERO_TX_HASH))
        assert execution.next_step_number == 4


class TestExecutionFromWire:
    def test_parse(self):
        execution = Execution.from_wire(
            {
                "id": "exec-1",
                "createdAt": "2025-06-01T10:00:00.000Z",
                "updatedAt": "2025-06-02T10:00:00.000Z",
                "steps": [
                    {
                        "stepNumber": 0,
                        "nodeId": None,
                        "txHash": ZERO_TX_HASH,
                        "txBlockTimestamp": None,
                        "txBlockNumber": None,
                        "createdAt": "2025-06-01T10:00:00.000Z",
                    },
                    {
                        "stepNumber": 1,
                        "nodeId": "node-1",
                        "txHash": TX,
                        "txBlockTimestamp": 1748858400,
                        "txBlockNumber": 31000000,
                        "createdAt": "2025-06-02T10:00:00.000Z",
                    },
                ],
            }
        )
        assert execution.id == "exec-1"
        assert execution.updated_at == datetime(2025, 6, 2, 10, tzinfo=timezone.utc)
        assert len(execution.steps) == 2
        assert execution.steps[1].node_id == "node-1"
        assert execution.steps[1].tx_block_number == 31000000
        assert execution.next_step_number == 2

    def test_missing_steps(self):
        execution = Execution.from_wire(
            {"id": "x", "createdAt": "2025-06-01T10:00:00Z", "updatedAt": "2025-06-01T10:00:00Z"}
        )
        assert execution.steps == ()

    def test_missing_id(self):
        with pytest.raises(TrailsAPIError, match="Malformed execution"):
            Execution.from_wire({"createdAt": "2025-06-01T10:00:00Z"})

    def test_malformed_step(self):
        with pytest.raises(TrailsAPIError, match="Malformed execution step"):
            Step.from_wire({"stepNumber": "one", "txHash": TX})

    def test_naive_timestamp_is_utc(self):
        assert parse_timestamp("2025-06-01T10:00:00").tzinfo is timezone.utc

    @pytest.mark.parametrize(
        "value,micro",
        [
            ("2025-06-01T10:00:00.12Z", 120000),
            ("2025-06-01T10:00:00.123Z", 123000),
            ("2025-06-01T10:00:00.123456789Z", 123456),
            ("2025-06-01T10:00:00Z", 0),
        ],
    )
    def test_fraction_digits(self, value, micro):
        ts = parse_timestamp(value)
        assert ts.microsecond == micro
        assert ts.tzinfo == timezone.utc

    def test_null_tx_hash_is_malformed(self):
        with pytest.raises(TrailsAPIError, match="Malformed execution step"):
            Step.from_wire({"stepNumber": 1, "txHash": None})

    def test_execution_with_null_tx_hash(self):
        wire = {
            "id": "exec-1",
            "createdAt": "2025-06-01T10:00:00Z",
            "updatedAt": "2025-06-01T10:00:00Z",
            "steps": [{"stepNumber": 1, "txHash": None, "createdAt": "2025-06-01T10:00:00Z"}],
        }
        with pytest.raises(TrailsAPIError):
            Execution.from_wire(wire)

    def test_bad_timestamp(self):
        with pytest.raises(TrailsAPIError, match="Malformed timestamp"):
            parse_timestamp("yesterday")


class TestPriceQuote:
    def test_total_is_exact(self):
        quote = PriceQuote.from_wire(
            {
                "outputs": {
                    "arg_0": {
                        "value": [
                            {"value": "1000000000000000000"},
                            {"value": "500000000000000000"},
                        ]
                    }
                }
            }
        )
        assert quote.base == 1000000000000000000
        assert quote.premium == 500000000000000000
        assert quote.total == 1500000000000000000

    def test_large_amounts_do_not_round(self):
        quote = PriceQuote(base=2**200 + 1, premium=2**200)
        assert quote.total == 2**201 + 1

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            PriceQuote(base=-1, premium=0)

    def test_negative_from_wire_is_api_error(self):
        with pytest.raises(TrailsAPIError):
            PriceQuote.from_wire({"outputs": {"arg_0": {"value": [{"value": "-1"}, {"value": "0"}]}}})

    def test_missing_premium(self):
        with pytest.raises(TrailsAPIError, match="Malformed pricing"):
            PriceQuote.from_wire({"outputs": {"arg_0": {"value": [{"value": "1"}]}}})

    def test_non_numeric(self):
        with pytest.raises(TrailsAPIError, match="base price"):
            PriceQuote.from_wire({"outputs": {"arg_0": {"value": [{"value": "lots"}, {"value": "0"}]}}})


class TestExpiryInfo:
    def test_zero_is_available(self):
        info = ExpiryInfo.from_wire({"outputs": {"expiry": {"value": "0"}}})
        assert info.expiry == 0
        assert not info.is_registered
        assert info.expires_at is None

    def test_absent_is_available(self):
        assert not ExpiryInfo.from_wire({"outputs": {}}).is_registered
        assert not ExpiryInfo.from_wire({}).is_registered
        assert not ExpiryInfo.from_wire({"outputs": {"expiry": {"value": None}}}).is_registered

    def test_registered(self):
        info = ExpiryInfo.from_wire({"outputs": {"expiry": {"value": "1767225600"}}})
        assert info.is_registered
        assert info.expires_at == datetime(2026, 1, 1, tzinfo=timezone.utc)

    def test_out_of_range_expiry(self):
        info = ExpiryInfo(2**256 - 1)
        assert info.is_registered
        assert info.expires_at is None

    def test_garbage(self):
        with pytest.raises(TrailsAPIError, match="expiry"):
            ExpiryInfo.from_wire({"outputs": {"expiry": {"value": "soon"}}})


class TestTransactionPayload:
    def test_parse(self):
        payload = TransactionPayload.from_wire(
            {"contractAddress": "0xabc", "callData": "0x1234", "payableAmount": "42"}
        )
        assert payload.to == "0xabc"
        assert payload.data == "0x1234"
        assert payload.value == 42
        assert payload.gas_estimate == 21000

    @pytest.mark.parametrize("amount", [None, ""])
    def test_value_defaults_to_zero(self, amount):
        payload = TransactionPayload.from_wire(
            {"contractAddress": "0xabc", "callData": "0x", "payableAmount": amount}
        )
        assert payload.value == 0

    def test_missing_payable_amount(self):
        payload = TransactionPayload.from_wire({"contractAddress": "0xabc", "callData": "0x"})
        assert payload.value == 0

    def test_missing_call_data(self):
        with pytest.raises(TrailsAPIError, match="Malformed evaluation"):
            TransactionPayload.from_wire({"contractAddress": "0xabc"})
