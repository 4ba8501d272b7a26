"""Logging layer for the agent trading executor."""

import json
import os
from dataclasses import asdict
from typing import Optional

from agent_executor.models import AgentCycleLog


ADDRESS_PREFIX_LENGTH = 8


def mask_address(address: Optional[str]) -> str:
    """Return the loggable form of a wallet or agent address (short prefix only)."""
    if not address:
        return "<none>"
    return f"{address[:ADDRESS_PREFIX_LENGTH]}..."


class Logger:
    """Handles structured logging of per-agent cycle results to JSONL format."""

    def __init__(self, log_file: str):
        """
        Initialize logger with output file path.

        Args:
            log_file: Path to JSONL log file (will be created if doesn't exist)
        """
        self.log_file = log_file

        # Create logs directory if it doesn't exist
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

    def log_agent_cycle(self, cycle_log: AgentCycleLog) -> None:
        """
        Append one agent's cycle record to the JSONL file.

        The agent id is masked and the record sanitized before writing,
        so addresses and secrets never reach disk in full.

        Args:
            cycle_log: Complete per-agent cycle record
        """
        log_dict = asdict(cycle_log)
        log_dict["agent_id"] = mask_address(cycle_log.agent_id)

        log_dict = self._sanitize_log(log_dict)

        with open(self.log_file, 'a') as f:
            json.dump(log_dict, f)
            f.write('\n')
            f.flush()

    def _sanitize_log(self, log_dict: dict) -> dict:
        """
        Redact string fields that look like they carry credentials.

        Args:
            log_dict: Log dictionary to sanitize

        Returns:
            Sanitized log dictionary
        """
        sensitive_patterns = [
            'api_key', 'secret', 'password', 'private', 'master_key', 'credential'
        ]

        for key, value in log_dict.items():
            if isinstance(value, str):
                lower_value = value.lower()
                for pattern in sensitive_patterns:
                    if pattern in lower_value and len(value) > 20:
                        log_dict[key] = "[REDACTED]"
                        break

        return log_dict
