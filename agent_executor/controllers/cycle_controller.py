"""Cycle controller for orchestrating agent trading cycles."""

import logging
import threading
import time
from collections import Counter
from datetime import datetime, timezone
from typing import List

from agent_executor.errors import ConfigurationError
from agent_executor.fee_calculator import calculate_platform_fee
from agent_executor.logger import mask_address
from agent_executor.models import (
    AgentCycleLog,
    AgentCycleStatus,
    AgentResult,
    AgentSummary,
    ConfirmationStatus,
)
from agent_executor.services.shutdown_service import ShutdownService
from agent_executor.tokens import LAMPORTS_PER_SOL

logger = logging.getLogger(__name__)


class CycleController:
    """Runs agent cycles on a fixed interval and isolates failures per agent."""

    def __init__(self, config, agent_directory, market_data_fetcher, decision_engine,
                 swap_planner, key_vault, transaction_submitter, logger_instance):
        """
        Initialize cycle controller.

        Args:
            config: Configuration object
            agent_directory: AgentDirectoryClient instance
            market_data_fetcher: MarketDataFetcher instance
            decision_engine: DecisionEngine instance
            swap_planner: SwapPlanner instance
            key_vault: KeyVault instance
            transaction_submitter: TransactionSubmitter instance
            logger_instance: JSONL Logger instance
        """
        self.config = config
        self.agent_directory = agent_directory
        self.market_data_fetcher = market_data_fetcher
        self.decision_engine = decision_engine
        self.swap_planner = swap_planner
        self.key_vault = key_vault
        self.transaction_submitter = transaction_submitter
        self.logger = logger_instance

        self.shutdown_service = ShutdownService(self)

        self.running = True
        self._stop_event = threading.Event()
        self._cycle_lock = threading.Lock()

        logger.info("Cycle controller initialized successfully")

    def startup(self) -> bool:
        """
        Verify custody before the first cycle.

        Returns:
            bool: True if the key vault self-test passes
        """
        logger.info("=" * 60)
        logger.info("STARTING AGENT EXECUTOR")
        logger.info("=" * 60)

        logger.info(f"Validating encryption setup ({self.key_vault.backend.name} key backend)...")
        if not self.key_vault.validate_encryption_setup():
            logger.error("Encryption setup validation FAILED")
            return False

        logger.info("Encryption setup OK")
        logger.info("=" * 60)
        return True

    def run(self) -> None:
        """
        Run one cycle immediately, then one per interval until stopped.

        Cycles never overlap: the next one starts after the previous one has finished,
        immediately if it overran the interval.
        """
        cycle_count = 0

        while self.running:
            cycle_count += 1
            cycle_start_time = time.time()

            logger.info(f"\nCYCLE {cycle_count} - {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S')}")

            try:
                results = self.run_cycle(cycle_count)
                self.log_cycle_summary(cycle_count, results)
            except ConfigurationError:
                logger.error("Custody configuration error, stopping executor")
                raise
            except Exception as e:
                logger.error(f"Cycle {cycle_count} failed: {e}", exc_info=True)
                logger.info("Continuing to next cycle...")

            if not self.running:
                break
            self._sleep_until_next_cycle(cycle_start_time)

    def run_cycle(self, cycle_count: int = 0) -> List[AgentResult]:
        """
        Process every active agent once, sequentially.

        Args:
            cycle_count: Cycle number used in log records

        Returns:
            One AgentResult per processed agent (agents not reached before a stop
            request are left out); empty if the list could not be fetched or another
            cycle is still running

        Raises:
            ConfigurationError: If custody is unusable
        """
        if not self._cycle_lock.acquire(blocking=False):
            logger.warning("Previous cycle still running, skipping this one")
            return []

        try:
            try:
                agents = self.agent_directory.list_active_agents()
            except Exception as e:
                logger.error(f"Failed to fetch active agents: {e}")
                return []

            if not agents:
                logger.info("No active agents found")
                return []

            logger.info(f"Processing {len(agents)} active agent(s)...")

            results = []
            for index, summary in enumerate(agents):
                if not self.running:
                    logger.info(f"Stop requested, leaving {len(agents) - index} agent(s) for the next run")
                    break
                results.append(self._process_agent_safely(summary, cycle_count))
            return results
        finally:
            self._cycle_lock.release()

    def _process_agent_safely(self, summary: AgentSummary, cycle_count: int) -> AgentResult:
        """Per-agent isolation boundary: any failure becomes an ERROR result."""
        try:
            result = self.process_agent(summary)
        except ConfigurationError:
            raise
        except Exception as e:
            logger.error(f"Error processing agent {mask_address(summary.id)}: {type(e).__name__}: {e}")
            result = AgentResult(agent_id=summary.id, status=AgentCycleStatus.ERROR, error=str(e))

        self._record(cycle_count, result)
        return result

    def process_agent(self, summary: AgentSummary) -> AgentResult:
        """
        Drive one agent through fetch, decide, plan, sign, submit and confirm.

        Args:
            summary: Entry from the active-agent list

        Returns:
            AgentResult describing where the agent stopped this cycle
        """
        agent_id = summary.id
        masked = mask_address(agent_id)
        logger.info(f"\nProcessing agent: {summary.name} ({masked})")

        agent = self.agent_directory.get_agent(agent_id)
        if agent is None:
            logger.warning(f"  Could not fetch state for agent {masked}")
            return AgentResult(agent_id=agent_id, status=AgentCycleStatus.SKIPPED_NO_STATE)

        logger.info(f"  State fetched: balance={agent.vault_balance} SOL, trades={agent.total_trades}, status={agent.status.value}")

        if not agent.is_active:
            logger.info(f"  Agent {agent.name} is paused, skipping")
            return AgentResult(agent_id=agent_id, status=AgentCycleStatus.SKIPPED_PAUSED)

        if agent.vault_balance < self.config.min_trade_balance_sol:
            logger.info(f"  Agent {agent.name} has insufficient funds ({agent.vault_balance} SOL)")
            return AgentResult(agent_id=agent_id, status=AgentCycleStatus.SKIPPED_INSUFFICIENT_FUNDS)

        snapshot = self.market_data_fetcher.fetch_market_snapshot()

        logger.info("  Consulting AI for trading decision...")
        decision = self.decision_engine.decide(agent, snapshot)
        logger.info(f"  AI Decision: {decision.action.value} ({decision.reasoning})")

        if not decision.is_swap:
            logger.info("  Holding position, no trade executed")
            return AgentResult(agent_id=agent_id, status=AgentCycleStatus.HOLDING, decision=decision)

        logger.info(f"  Planning swap: {decision.amount} {decision.from_token} -> {decision.to_token}")
        plan = self.swap_planner.plan(decision, agent.wallet_address)
        if plan is None:
            return AgentResult(agent_id=agent_id, status=AgentCycleStatus.QUOTE_FAILED, decision=decision)

        platform_fee = calculate_platform_fee(plan.amount_in, plan.expected_output)
        if platform_fee > 0:
            logger.info(
                f"  Estimated platform fee: {platform_fee} lamports "
                f"({platform_fee / LAMPORTS_PER_SOL:.6f} SOL, not collected)"
            )

        keypair = self.key_vault.get_agent_keypair(agent.wallet_address)
        try:
            outcome = self.transaction_submitter.submit(plan, keypair, platform_fee)
        finally:
            del keypair

        if outcome.status == ConfirmationStatus.CONFIRMED:
            logger.info(f"  Trade executed successfully: {outcome.signature}")
            logger.info(
                f"  Input: {plan.amount_in / LAMPORTS_PER_SOL:.6f} SOL, "
                f"expected output: {outcome.expected_output}"
            )
            status = AgentCycleStatus.CONFIRMED
        else:
            status = AgentCycleStatus.FAILED

        return AgentResult(
            agent_id=agent_id,
            status=status,
            decision=decision,
            outcome=outcome,
            platform_fee=platform_fee,
            error=outcome.error,
        )

    def _record(self, cycle_count: int, result: AgentResult) -> None:
        decision = result.decision
        outcome = result.outcome
        cycle_log = AgentCycleLog(
            timestamp=int(time.time() * 1000),
            cycle=cycle_count,
            agent_id=result.agent_id,
            status=result.status.value,
            action=decision.action.value if decision else None,
            reasoning=decision.reasoning if decision else None,
            from_token=decision.from_token if decision else None,
            to_token=decision.to_token if decision else None,
            amount=decision.amount if decision else None,
            amount_in=outcome.amount_in if outcome else None,
            expected_output=outcome.expected_output if outcome else None,
            platform_fee=result.platform_fee,
            fee_status=outcome.fee_status.value if outcome else None,
            signature=outcome.signature if outcome else None,
            error=result.error,
        )
        try:
            self.logger.log_agent_cycle(cycle_log)
        except OSError as e:
            logger.warning(f"Failed to write trade log: {e}")

    @staticmethod
    def log_cycle_summary(cycle_count: int, results: List[AgentResult]) -> None:
        counts = Counter(result.status.value for result in results)
        summary = ", ".join(f"{status}={count}" for status, count in sorted(counts.items())) or "no agents"
        logger.info(f"CYCLE {cycle_count} COMPLETE: {summary}")

    def _sleep_until_next_cycle(self, cycle_start_time: float) -> None:
        """Sleep until the next cycle based on configured interval."""
        interval = self.config.execution_interval_seconds
        cycle_duration = time.time() - cycle_start_time
        sleep_time = max(0, interval - cycle_duration)

        if sleep_time > 0:
            logger.debug(f"Sleeping for {sleep_time:.1f} seconds until next cycle")
            self._stop_event.wait(sleep_time)
        else:
            logger.warning(f"Cycle took {cycle_duration:.1f}s, longer than interval {interval}s")

    def stop(self) -> None:
        """Stop after the current cycle and wake the loop if it is sleeping."""
        self.running = False
        self._stop_event.set()

    def shutdown(self) -> None:
        """Gracefully shutdown the executor."""
        self.shutdown_service.shutdown()
