"""Loop controller for the agent trading executor."""

import logging

import requests
from solana.rpc.api import Client
from solana.rpc.commitment import Confirmed

from agent_executor.config import Config
from agent_executor.controllers.cycle_controller import CycleController
from agent_executor.data_fetchers.market_data_fetcher import MarketDataFetcher
from agent_executor.decision_engine import DecisionEngine
from agent_executor.decision_parser import DecisionParser
from agent_executor.decision_provider import OpenAICompatibleDecisionProvider
from agent_executor.key_vault.backends import create_key_backend
from agent_executor.key_vault.vault import KeyVault
from agent_executor.logger import Logger
from agent_executor.services.agent_directory import AgentDirectoryClient
from agent_executor.swap_planner import JupiterClient, SwapPlanner
from agent_executor.transaction_submitter import TransactionSubmitter


logger = logging.getLogger(__name__)


class LoopController:
    """Builds every component from configuration and hands them to the cycle controller."""

    def __init__(self, config: Config):
        """
        Initialize loop controller with all components.

        Args:
            config: Configuration object

        Raises:
            ConfigurationError: If the selected key backend cannot be built
        """
        self.config = config

        logger.info("Initializing loop controller components...")

        # Custody first: a bad master secret must stop startup before anything else
        self.key_vault = KeyVault(create_key_backend(config))

        # One HTTP session and one RPC client, shared by every agent in a cycle
        self.http_session = requests.Session()
        self.rpc_client = Client(config.rpc_endpoint, commitment=Confirmed)

        self.agent_directory = AgentDirectoryClient(config.backend_api_url, session=self.http_session)
        self.market_data_fetcher = MarketDataFetcher()
        self.decision_engine = DecisionEngine(
            OpenAICompatibleDecisionProvider(
                api_key=config.decision_api_key,
                base_url=config.decision_base_url,
                model=config.decision_model,
                timeout=config.decision_timeout_seconds,
            ),
            DecisionParser(),
        )
        self.jupiter_client = JupiterClient(config.jupiter_api_url, session=self.http_session)
        self.swap_planner = SwapPlanner(self.jupiter_client)
        self.transaction_submitter = TransactionSubmitter(self.rpc_client)
        self.logger = Logger(config.trade_log_file)

        self.cycle_controller = CycleController(
            config, self.agent_directory, self.market_data_fetcher, self.decision_engine,
            self.swap_planner, self.key_vault, self.transaction_submitter, self.logger
        )

        logger.info("Loop controller initialized successfully")

    def startup(self) -> bool:
        """Delegate startup to cycle controller."""
        return self.cycle_controller.startup()

    def run(self) -> None:
        """Delegate run to cycle controller."""
        self.cycle_controller.run()

    def run_once(self) -> None:
        """Run a single cycle and return."""
        results = self.cycle_controller.run_cycle(1)
        self.cycle_controller.log_cycle_summary(1, results)

    def shutdown(self) -> None:
        """Delegate shutdown to cycle controller."""
        self.cycle_controller.shutdown()

    def register_signal_handlers(self) -> None:
        """Delegate signal handler registration to cycle controller."""
        self.cycle_controller.shutdown_service.register_signal_handlers()
