"""Tests for TransactionSubmitter with a mocked RPC client."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from solders.keypair import Keypair
from solders.signature import Signature

from agent_executor.errors import SubmissionError
from agent_executor.models import ConfirmationStatus, FeeStatus, Quote, SwapPlan
from agent_executor.transaction_submitter import TransactionSubmitter

from conftest import build_unsigned_transaction


def make_plan(payer, out_amount=510_000_000):
    quote = Quote("in", "out", 500_000_000, out_amount, 50)
    return SwapPlan(quote=quote, unsigned_transaction=build_unsigned_transaction(payer), amount_in=500_000_000)


def make_client(err=None):
    client = MagicMock()
    client.send_raw_transaction.side_effect = lambda raw, opts=None: MagicMock(value=f"sig-{len(raw)}")
    client.confirm_transaction.return_value = MagicMock(value=[MagicMock(err=err)])
    return client


def test_sign_uses_agent_key(agent_keypair):
    signed = TransactionSubmitter.sign(build_unsigned_transaction(agent_keypair.pubkey()), agent_keypair)
    assert signed.message.account_keys[0] == agent_keypair.pubkey()
    assert signed.signatures[0] != Signature.default()


def test_sign_rejects_garbage(agent_keypair):
    with pytest.raises(SubmissionError):
        TransactionSubmitter.sign("bm90IGEgdHJhbnNhY3Rpb24=", agent_keypair)


def test_confirmed_trade(agent_keypair):
    client = make_client()
    outcome = TransactionSubmitter(client).submit(make_plan(agent_keypair.pubkey()), agent_keypair, 100_000)

    assert outcome.status == ConfirmationStatus.CONFIRMED
    assert outcome.confirmed
    assert outcome.signature.startswith("sig-")
    assert outcome.amount_in == 500_000_000
    assert outcome.expected_output == outcome.actual_output == 510_000_000
    assert outcome.platform_fee == 100_000
    assert outcome.fee_status == FeeStatus.COMPUTED_NOT_COLLECTED
    client.send_raw_transaction.assert_called_once()
    client.confirm_transaction.assert_called_once()


def test_on_chain_error_fails_but_keeps_fee(agent_keypair):
    client = make_client(err="InstructionError")
    outcome = TransactionSubmitter(client).submit(make_plan(agent_keypair.pubkey()), agent_keypair, 100_000)

    assert outcome.status == ConfirmationStatus.FAILED
    assert "InstructionError" in outcome.error
    assert outcome.platform_fee == 100_000
    assert outcome.fee_status == FeeStatus.COMPUTED_NOT_COLLECTED


def test_broadcast_failure_reports_signed_signature(agent_keypair):
    client = make_client()
    client.send_raw_transaction.side_effect = RuntimeError("blockhash not found")

    outcome = TransactionSubmitter(client).submit(make_plan(agent_keypair.pubkey()), agent_keypair, 0)

    assert outcome.status == ConfirmationStatus.FAILED
    assert outcome.signature is not None
    assert outcome.fee_status == FeeStatus.NONE
    client.confirm_transaction.assert_not_called()


def test_missing_confirmation_status(agent_keypair):
    client = make_client()
    client.confirm_transaction.return_value = MagicMock(value=[None])
    outcome = TransactionSubmitter(client).submit(make_plan(agent_keypair.pubkey()), agent_keypair, 0)
    assert outcome.status == ConfirmationStatus.FAILED


def test_sign_failure_never_broadcasts():
    client = make_client()
    plan = make_plan(Keypair().pubkey())
    plan.unsigned_transaction = "%%%"

    outcome = TransactionSubmitter(client).submit(plan, Keypair(), 0)

    assert outcome.status == ConfirmationStatus.FAILED
    assert outcome.signature is None
    client.send_raw_transaction.assert_not_called()
