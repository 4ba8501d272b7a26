"""Decision provider interface and implementations for the agent trading executor."""

import logging
from abc import ABC, abstractmethod

from openai import OpenAI

from agent_executor.errors import TransportError
from agent_executor.models import BASE_ASSET, Agent, MarketSnapshot

logger = logging.getLogger(__name__)


def _signed(value: float) -> str:
    return f"+{value}" if value > 0 else f"{value}"


def build_prompt(agent: Agent, snapshot: MarketSnapshot) -> str:
    """
    Build the decision prompt for one agent.

    The output depends only on its inputs, so the same state and snapshot always
    produce the same prompt.

    Args:
        agent: Current agent state
        snapshot: Market snapshot for this cycle

    Returns:
        str: Formatted prompt string
    """
    trending_lines = "\n".join(
        f"- {asset.symbol}: {_signed(asset.change_24h)}% (24h), Volume: ${asset.volume:,.0f}"
        for asset in snapshot.trending
    )
    allowed_targets = ", ".join(snapshot.trending_symbols)
    example_target = snapshot.trending_symbols[0] if snapshot.trending else "USDC"

    return f"""You are an autonomous AI trading agent on the Solana blockchain.

**Your Mission**: {agent.purpose}

**Current Portfolio**:
- {BASE_ASSET} Balance: {agent.vault_balance}
- Total Trades Executed: {agent.total_trades}
- Total Volume: ${agent.total_volume}

**Market Data**:
Trending Memecoins:
{trending_lines}

Market Sentiment: {snapshot.sentiment}
Total Market Cap: ${snapshot.market_cap.total:,.0f} ({_signed(snapshot.market_cap.change_24h)}%)

**Instructions**:
1. Analyze the market data carefully based on your mission
2. Consider risk vs reward for each potential trade
3. Stay aligned with your specific trading strategy
4. Decide whether to execute a SWAP or HOLD your current position
5. If swapping, specify which tokens and how much {BASE_ASSET} to trade

**CRITICAL**: You MUST respond ONLY with a single valid JSON object in this EXACT format (no additional text):

{{
  "action": "SWAP",
  "fromToken": "{BASE_ASSET}",
  "toToken": "{example_target}",
  "amount": "0.5",
  "reasoning": "Brief explanation of your decision"
}}

OR

{{
  "action": "HOLD",
  "reasoning": "Brief explanation of why you're holding"
}}

Rules:
- action must be either "SWAP" or "HOLD"
- If action is SWAP, fromToken must be "{BASE_ASSET}"
- If action is SWAP, toToken must be one of: {allowed_targets} (from trending list)
- If action is SWAP, amount must be a positive number as string (e.g., "0.5") and not exceed your balance
- If action is HOLD, omit fromToken, toToken, and amount
- reasoning is always required

RESPOND ONLY WITH THE JSON. NO MARKDOWN. NO EXPLANATIONS BEFORE OR AFTER.
"""


class DecisionProvider(ABC):
    """Abstract base class for LLM decision providers."""

    @abstractmethod
    def get_decision(self, agent: Agent, snapshot: MarketSnapshot) -> str:
        """
        Generate a raw trading decision for an agent.

        Args:
            agent: Current agent state
            snapshot: Market snapshot for this cycle

        Returns:
            str: Raw LLM response (expected to be JSON)

        Raises:
            TransportError: If the backend could not be reached or returned nothing
        """
        pass


class OpenAICompatibleDecisionProvider(DecisionProvider):
    """Decision provider for any OpenAI-compatible chat completions endpoint (Gemini by default)."""

    def __init__(self, api_key: str, base_url: str, model: str, timeout: float = 30.0):
        """
        Initialize decision provider.

        Args:
            api_key: Backend API key
            base_url: OpenAI-compatible API base URL
            model: Model name
            timeout: Request timeout in seconds
        """
        self.client = OpenAI(api_key=api_key, base_url=base_url, max_retries=0)
        self.model = model
        self.timeout = timeout

    def get_decision(self, agent: Agent, snapshot: MarketSnapshot) -> str:
        prompt = build_prompt(agent, snapshot)

        # Single attempt; a failed call means HOLD until the next cycle
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                timeout=self.timeout,
            )
        except Exception as e:
            raise TransportError(f"Decision backend error: {type(e).__name__}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise TransportError("No response from decision backend")
        return content
