"""Tests for DecisionEngine: every failure becomes a safety HOLD."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

from agent_executor.decision_engine import SAFETY_HOLD_REASON, DecisionEngine
from agent_executor.decision_parser import INVALID_FORMAT_REASON
from agent_executor.errors import TransportError
from agent_executor.models import DecisionAction


def make_engine(response=None, error=None):
    provider = MagicMock()
    if error is not None:
        provider.get_decision.side_effect = error
    else:
        provider.get_decision.return_value = response
    return DecisionEngine(provider), provider


def test_valid_swap_passes_through(active_agent, snapshot):
    payload = {"action": "SWAP", "fromToken": "SOL", "toToken": "BONK", "amount": "0.1", "reasoning": "dip"}
    engine, provider = make_engine(json.dumps(payload))

    decision = engine.decide(active_agent, snapshot)

    assert decision.action == DecisionAction.SWAP
    assert decision.to_token == "BONK"
    provider.get_decision.assert_called_once_with(active_agent, snapshot)


def test_transport_error_holds(active_agent, snapshot):
    engine, _ = make_engine(error=TransportError("No response from decision backend"))
    decision = engine.decide(active_agent, snapshot)
    assert decision.action == DecisionAction.HOLD
    assert decision.reasoning == SAFETY_HOLD_REASON


def test_unexpected_provider_error_holds(active_agent, snapshot):
    engine, _ = make_engine(error=RuntimeError("boom"))
    assert engine.decide(active_agent, snapshot).reasoning == SAFETY_HOLD_REASON


def test_unparseable_response_holds(active_agent, snapshot):
    engine, _ = make_engine("I think you should buy WIF!")
    decision = engine.decide(active_agent, snapshot)
    assert decision.action == DecisionAction.HOLD
    assert decision.reasoning == SAFETY_HOLD_REASON


def test_policy_violation_holds(active_agent, snapshot):
    payload = {"action": "SWAP", "fromToken": "SOL", "toToken": "PEPE", "amount": "0.1", "reasoning": "moon"}
    engine, _ = make_engine(json.dumps(payload))
    decision = engine.decide(active_agent, snapshot)
    assert decision.action == DecisionAction.HOLD
    assert decision.amount is None


def test_unknown_action_keeps_format_reason(active_agent, snapshot):
    engine, _ = make_engine('{"action": "SELL"}')
    assert engine.decide(active_agent, snapshot).reasoning == INVALID_FORMAT_REASON


def test_non_string_action_keeps_format_reason(active_agent, snapshot):
    engine, _ = make_engine('{"action": ["SWAP"], "reasoning": "x"}')
    assert engine.decide(active_agent, snapshot).reasoning == INVALID_FORMAT_REASON


def test_swap_over_agent_balance_holds(active_agent, snapshot):
    payload = {"action": "SWAP", "fromToken": "SOL", "toToken": "WIF", "amount": "2", "reasoning": "all in"}
    engine, _ = make_engine(json.dumps(payload))
    decision = engine.decide(active_agent, snapshot)
    assert decision.action == DecisionAction.HOLD
    assert decision.reasoning == SAFETY_HOLD_REASON


def test_sub_lamport_swap_holds(active_agent, snapshot):
    payload = {"action": "SWAP", "fromToken": "SOL", "toToken": "WIF", "amount": "0.0000000001", "reasoning": "dust"}
    engine, _ = make_engine(json.dumps(payload))
    assert engine.decide(active_agent, snapshot).action == DecisionAction.HOLD
