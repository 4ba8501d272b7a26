"""Data models for the agent trading executor."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


BASE_ASSET = "SOL"


class AgentStatus(str, Enum):
    ACTIVE = "Active"
    PAUSED = "Paused"


class DecisionAction(str, Enum):
    SWAP = "SWAP"
    HOLD = "HOLD"


class ConfirmationStatus(str, Enum):
    CONFIRMED = "confirmed"
    FAILED = "failed"


class FeeStatus(str, Enum):
    """Lifecycle of the platform fee. Nothing in the executor collects it on-chain."""

    NONE = "none"
    COMPUTED_NOT_COLLECTED = "computed_not_collected"


class AgentCycleStatus(str, Enum):
    """Terminal state reached by one agent in one cycle."""

    SKIPPED_NO_STATE = "skipped_no_state"
    SKIPPED_PAUSED = "skipped_paused"
    SKIPPED_INSUFFICIENT_FUNDS = "skipped_insufficient_funds"
    HOLDING = "holding"
    QUOTE_FAILED = "quote_failed"
    CONFIRMED = "confirmed"
    FAILED = "failed"
    ERROR = "error"


@dataclass
class AgentSummary:
    """Entry of the active-agent list returned by the directory."""

    id: str  # Agent public key
    name: str
    status: Optional[str] = None


@dataclass
class Agent:
    """Detailed agent state. Owned by the external registry; read-only here."""

    id: str
    name: str
    purpose: str
    wallet_address: str
    vault_balance: float  # SOL
    status: AgentStatus
    total_trades: int = 0
    total_volume: float = 0.0

    @property
    def is_active(self) -> bool:
        return self.status == AgentStatus.ACTIVE


@dataclass
class Decision:
    """Structured SWAP/HOLD verdict for one agent in one cycle."""

    action: DecisionAction
    reasoning: str
    from_token: Optional[str] = None
    to_token: Optional[str] = None
    amount: Optional[str] = None  # Decimal string, in units of from_token

    @classmethod
    def hold(cls, reasoning: str) -> "Decision":
        return cls(action=DecisionAction.HOLD, reasoning=reasoning)

    @property
    def is_swap(self) -> bool:
        return self.action == DecisionAction.SWAP


@dataclass
class TrendingAsset:
    symbol: str
    change_24h: float  # percent
    volume: float  # USD


@dataclass
class MarketCap:
    total: float
    change_24h: float


@dataclass
class MarketSnapshot:
    """Market context for the decision prompt. Built fresh every cycle."""

    trending: List[TrendingAsset]
    sentiment: str
    market_cap: MarketCap

    @property
    def trending_symbols(self) -> List[str]:
        return [asset.symbol for asset in self.trending]


@dataclass
class Quote:
    """Point-in-time aggregator quote. Never reused across cycles."""

    input_mint: str
    output_mint: str
    in_amount: int  # smallest unit
    out_amount: int  # smallest unit
    slippage_bps: int
    raw: dict = field(default_factory=dict, repr=False)


@dataclass
class SwapPlan:
    """Quote plus the unsigned exchange transaction built for it."""

    quote: Quote
    unsigned_transaction: str  # base64
    amount_in: int  # smallest unit

    @property
    def expected_output(self) -> int:
        return self.quote.out_amount


@dataclass
class TradeOutcome:
    """Result of signing, submitting and confirming one swap."""

    signature: Optional[str]
    status: ConfirmationStatus
    amount_in: int
    expected_output: int
    actual_output: int  # assumed equal to the quoted output; no ledger read-back
    platform_fee: int
    fee_status: FeeStatus
    timestamp: int  # Unix milliseconds
    error: Optional[str] = None

    @property
    def confirmed(self) -> bool:
        return self.status == ConfirmationStatus.CONFIRMED


@dataclass
class AgentResult:
    """Outcome of processing a single agent within a cycle."""

    agent_id: str
    status: AgentCycleStatus
    decision: Optional[Decision] = None
    outcome: Optional[TradeOutcome] = None
    platform_fee: Optional[int] = None
    error: Optional[str] = None


@dataclass
class AgentCycleLog:
    """Complete log record for one agent in one cycle."""

    timestamp: int
    cycle: int
    agent_id: str
    status: str
    action: Optional[str]
    reasoning: Optional[str]
    from_token: Optional[str]
    to_token: Optional[str]
    amount: Optional[str]
    amount_in: Optional[int]
    expected_output: Optional[int]
    platform_fee: Optional[int]
    fee_status: Optional[str]
    signature: Optional[str]
    error: Optional[str]
