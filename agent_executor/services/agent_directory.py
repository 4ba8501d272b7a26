"""
Client for the agent directory (registry) service.

Never raises: transport or payload problems come back as an empty list or None so that
all failure handling stays in the cycle controller.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from agent_executor.logger import mask_address
from agent_executor.models import Agent, AgentStatus, AgentSummary

logger = logging.getLogger(__name__)


class AgentDirectoryClient:
    """Read-only client for the agent registry API."""

    def __init__(self, base_url: str, session: Optional[requests.Session] = None, timeout: float = 10.0):
        """
        Initialize directory client.

        Args:
            base_url: Base URL of the registry API (e.g. http://localhost:3001/api)
            session: Optional pre-configured requests session
            timeout: Per-request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    def _get(self, endpoint: str) -> Optional[Any]:
        """
        Send GET request and decode JSON body.

        Returns:
            Decoded body, or None on any transport or decoding failure
        """
        try:
            response = self.session.get(f"{self.base_url}/{endpoint}", timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            logger.warning(f"Agent directory request failed ({endpoint.split('/')[0]}): {type(e).__name__}")
            return None
        except ValueError:
            logger.warning(f"Agent directory returned invalid JSON ({endpoint.split('/')[0]})")
            return None

    def list_active_agents(self) -> List[AgentSummary]:
        """
        Fetch the list of active agents.

        Returns:
            List of agent summaries; empty on any failure
        """
        data = self._get("agent/all")
        if not isinstance(data, dict):
            return []

        agents = []
        for entry in data.get("agents") or []:
            summary = self._parse_summary(entry)
            if summary is not None:
                agents.append(summary)
        return agents

    def get_agent(self, agent_id: str) -> Optional[Agent]:
        """
        Fetch detailed state for one agent.

        Args:
            agent_id: Agent public key

        Returns:
            Agent, or None if unreachable, missing or malformed
        """
        data = self._get(f"agent/{agent_id}")
        if not isinstance(data, dict):
            return None

        try:
            return self._parse_agent(agent_id, data)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Malformed agent state for {mask_address(agent_id)}: {type(e).__name__}")
            return None

    @staticmethod
    def _parse_summary(entry: Any) -> Optional[AgentSummary]:
        if not isinstance(entry, dict):
            return None
        agent_id = entry.get("pubkey") or entry.get("id")
        if not agent_id:
            return None
        return AgentSummary(id=str(agent_id), name=str(entry.get("name", "")), status=entry.get("status"))

    @staticmethod
    def _parse_agent(agent_id: str, data: Dict[str, Any]) -> Agent:
        wallet_address = data.get("agentWallet") or data.get("walletAddress")
        if not wallet_address:
            raise KeyError("agentWallet")

        status = AgentStatus.ACTIVE if data.get("status") == AgentStatus.ACTIVE.value else AgentStatus.PAUSED

        return Agent(
            id=str(data.get("pubkey") or agent_id),
            name=str(data.get("name", "")),
            purpose=str(data.get("purpose", "")),
            wallet_address=str(wallet_address),
            vault_balance=float(data.get("vaultBalance") or 0),
            status=status,
            total_trades=int(data.get("totalTrades") or 0),
            total_volume=float(data.get("totalVolume") or 0),
        )
