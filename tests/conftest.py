"""
Shared fixtures: master secret, agent keypairs written to a temporary key store,
unsigned swap transactions and a minimal config.
"""

from __future__ import annotations

import base64
from types import SimpleNamespace

import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import MessageV0
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.system_program import TransferParams, transfer
from solders.transaction import VersionedTransaction

from agent_executor.data_fetchers.market_data_fetcher import MarketDataFetcher
from agent_executor.key_vault.crypto import encrypt_data
from agent_executor.models import Agent, AgentStatus

MASTER_KEY = "unit-test-master-secret-0123456789abcdef"


@pytest.fixture(autouse=True)
def no_dotenv(monkeypatch):
    """Keep a developer's .env out of config tests."""
    monkeypatch.setattr("agent_executor.config.load_dotenv", lambda *a, **k: False)


@pytest.fixture
def master_key() -> str:
    return MASTER_KEY


@pytest.fixture
def keys_dir(tmp_path):
    path = tmp_path / "keys"
    path.mkdir()
    return path


@pytest.fixture
def agent_keypair() -> Keypair:
    return Keypair()


def write_key_record(keys_dir, wallet_address: str, secret: bytes, master_key: str = MASTER_KEY) -> None:
    """Store an encrypted key record under a wallet address (provisioning stand-in)."""
    (keys_dir / f"{wallet_address}.enc").write_text(encrypt_data(secret, master_key), encoding="utf-8")


@pytest.fixture
def stored_keypair(keys_dir, agent_keypair) -> Keypair:
    write_key_record(keys_dir, str(agent_keypair.pubkey()), bytes(agent_keypair))
    return agent_keypair


def build_unsigned_transaction(payer: Pubkey) -> str:
    """Base64 unsigned v0 transaction paying a single lamport, like an aggregator swap payload."""
    message = MessageV0.try_compile(
        payer,
        [transfer(TransferParams(from_pubkey=payer, to_pubkey=Keypair().pubkey(), lamports=1))],
        [],
        Hash.default(),
    )
    unsigned = VersionedTransaction.populate(message, [Signature.default()])
    return base64.b64encode(bytes(unsigned)).decode("ascii")


@pytest.fixture
def config(keys_dir, tmp_path, master_key):
    return SimpleNamespace(
        rpc_endpoint="http://localhost:8899",
        backend_api_url="http://registry.test/api",
        jupiter_api_url="http://jupiter.test/v6",
        execution_interval_minutes=5,
        execution_interval_seconds=300,
        decision_api_key="test-key",
        decision_base_url="http://llm.test/v1",
        decision_model="test-model",
        decision_timeout_seconds=5.0,
        key_backend="local",
        keys_dir=str(keys_dir),
        encryption_master_key=master_key,
        aws_region=None,
        aws_kms_key_id=None,
        min_trade_balance_sol=0.01,
        trade_log_file=str(tmp_path / "logs" / "trade_log.jsonl"),
    )


@pytest.fixture
def snapshot():
    return MarketDataFetcher().fetch_market_snapshot()


@pytest.fixture
def active_agent(agent_keypair):
    return Agent(
        id="AgentPda1111111111111111111111111111111111",
        name="Momentum Bot",
        purpose="Buy memecoins with strong 24h momentum",
        wallet_address=str(agent_keypair.pubkey()),
        vault_balance=1.0,
        status=AgentStatus.ACTIVE,
        total_trades=3,
        total_volume=1.5,
    )
