"""Decision engine: agent state and market snapshot in, validated Decision out."""

import logging

from agent_executor.decision_parser import DecisionParser
from agent_executor.decision_provider import DecisionProvider
from agent_executor.logger import mask_address
from agent_executor.models import Agent, Decision, MarketSnapshot

logger = logging.getLogger(__name__)

SAFETY_HOLD_REASON = "Error consulting AI, holding position for safety"


class DecisionEngine:
    """Wraps provider and parser. HOLD is the answer to every failure; nothing is raised."""

    def __init__(self, provider: DecisionProvider, parser: DecisionParser = None):
        self.provider = provider
        self.parser = parser or DecisionParser()

    def decide(self, agent: Agent, snapshot: MarketSnapshot) -> Decision:
        """
        Consult the model once and return a validated decision.

        Args:
            agent: Current agent state
            snapshot: Market snapshot for this cycle

        Returns:
            Decision (HOLD on any network, parsing or validation failure)
        """
        try:
            raw_response = self.provider.get_decision(agent, snapshot)
            return self.parser.parse(raw_response, snapshot.trending_symbols, agent.vault_balance)
        except Exception as e:
            logger.warning(f"Decision for {mask_address(agent.id)} defaulted to HOLD: {e}")
            return Decision.hold(SAFETY_HOLD_REASON)
