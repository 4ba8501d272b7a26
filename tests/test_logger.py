"""Tests for the JSONL trade log and address masking."""

from __future__ import annotations

import json

from agent_executor.logger import Logger, mask_address
from agent_executor.models import AgentCycleLog


def make_log(**changes):
    values = dict(
        timestamp=1_700_000_000_000, cycle=1, agent_id="AgentPda1111111111111111111111111111111111",
        status="holding", action="HOLD", reasoning="flat", from_token=None, to_token=None, amount=None,
        amount_in=None, expected_output=None, platform_fee=None, fee_status=None, signature=None, error=None,
    )
    values.update(changes)
    return AgentCycleLog(**values)


def test_mask_address():
    assert mask_address("AgentPda1111111111111111111111111111111111") == "AgentPda..."
    assert mask_address(None) == "<none>"
    assert mask_address("") == "<none>"


def test_writes_one_line_per_record(tmp_path):
    log_file = tmp_path / "nested" / "trade_log.jsonl"
    trade_logger = Logger(str(log_file))

    trade_logger.log_agent_cycle(make_log(cycle=1))
    trade_logger.log_agent_cycle(make_log(cycle=2, status="confirmed", platform_fee=100_000))

    lines = log_file.read_text().splitlines()
    assert len(lines) == 2
    second = json.loads(lines[1])
    assert second["cycle"] == 2
    assert second["platform_fee"] == 100_000
    assert second["agent_id"] == "AgentPda..."


def test_redacts_credential_like_strings(tmp_path):
    log_file = tmp_path / "trade_log.jsonl"
    Logger(str(log_file)).log_agent_cycle(
        make_log(error="invalid api_key sk-abcdef0123456789 rejected", reasoning="short secret")
    )

    record = json.loads(log_file.read_text())
    assert record["error"] == "[REDACTED]"
    assert record["reasoning"] == "short secret"
