"""Decision parsing and validation layer."""

import json
import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from agent_executor.errors import DecisionValidationError
from agent_executor.models import BASE_ASSET, Decision, DecisionAction
from agent_executor.tokens import to_smallest_unit

logger = logging.getLogger(__name__)

INVALID_FORMAT_REASON = "Invalid AI response format"

_FENCE_OPEN = re.compile(r"^```[A-Za-z0-9_-]*[ \t]*\n?")
_FENCE_CLOSE = re.compile(r"\n?```\s*$")


def strip_code_fences(raw_response: str) -> str:
    """Remove a leading ``` (optionally language-tagged) and a trailing ``` fence."""
    cleaned = raw_response.strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_OPEN.sub("", cleaned, count=1)
        cleaned = _FENCE_CLOSE.sub("", cleaned, count=1)
    return cleaned.strip()


class DecisionParser:
    """Parses and validates LLM output into a Decision."""

    ALLOWED_ACTIONS = {action.value for action in DecisionAction}

    def parse(self, raw_response: str, trending_symbols: Iterable[str], balance: Optional[float] = None) -> Decision:
        """
        Parse LLM response into a Decision.

        An absent or unknown action yields HOLD with INVALID_FORMAT_REASON.

        Args:
            raw_response: Raw string response from LLM
            trending_symbols: Symbols a SWAP may target this cycle
            balance: Agent vault balance in base-asset units; a SWAP may not exceed it

        Returns:
            Validated Decision

        Raises:
            DecisionValidationError: If the payload is not a JSON object or a SWAP
                violates trading policy
        """
        cleaned_response = strip_code_fences(raw_response)

        try:
            data = json.loads(cleaned_response)
        except json.JSONDecodeError as e:
            raise DecisionValidationError(f"JSON parsing failed: {e.msg}") from e

        if not isinstance(data, dict):
            raise DecisionValidationError(f"Parsed JSON is not an object: {type(data).__name__}")

        action = data.get("action")
        if not isinstance(action, str) or action not in self.ALLOWED_ACTIONS:
            logger.warning(f"Invalid action {action!r}, defaulting to HOLD")
            return Decision.hold(INVALID_FORMAT_REASON)

        reasoning = data.get("reasoning")
        if not isinstance(reasoning, str) or not reasoning.strip():
            reasoning = "No reasoning provided"

        if action == DecisionAction.HOLD.value:
            return Decision.hold(reasoning)

        from_token = data.get("fromToken")
        to_token = data.get("toToken")
        amount = data.get("amount")

        if from_token != BASE_ASSET:
            raise DecisionValidationError(f"fromToken must be {BASE_ASSET}, got {from_token!r}")

        allowed_targets = set(trending_symbols)
        if to_token not in allowed_targets:
            raise DecisionValidationError(f"toToken {to_token!r} is not in the trending set")

        if isinstance(amount, bool) or not isinstance(amount, (str, int, float)):
            raise DecisionValidationError(f"Invalid amount type: {type(amount).__name__}")
        try:
            amount_value = Decimal(str(amount).strip())
        except InvalidOperation:
            raise DecisionValidationError(f"Amount is not a number: {amount!r}")
        if not amount_value.is_finite() or amount_value <= 0:
            raise DecisionValidationError(f"Amount must be positive: {amount!r}")

        # Positivity is judged on what would actually be traded
        try:
            amount_in = to_smallest_unit(str(amount).strip(), from_token)
        except ValueError as e:
            raise DecisionValidationError(str(e)) from e
        if amount_in <= 0:
            raise DecisionValidationError(f"Amount rounds to zero {from_token} base units: {amount!r}")

        if balance is not None and amount_value > Decimal(str(balance)):
            raise DecisionValidationError(f"Amount {amount} exceeds balance {balance} {from_token}")

        return Decision(
            action=DecisionAction.SWAP,
            reasoning=reasoning,
            from_token=from_token,
            to_token=to_token,
            amount=str(amount).strip(),
        )
