"""Platform fee computation."""

from agent_executor.models import FeeStatus

PLATFORM_FEE_DIVISOR = 100  # 1% of profit


def calculate_platform_fee(amount_in: int, expected_output: int) -> int:
    """
    Compute the platform's profit-share fee in smallest units.

    fee = floor(max(0, expected_output - amount_in) / 100); zero for unprofitable quotes.
    """
    profit = max(0, int(expected_output) - int(amount_in))
    return profit // PLATFORM_FEE_DIVISOR


def fee_status_for(fee: int) -> FeeStatus:
    # No on-chain deduction exists yet, so a positive fee is only ever computed
    return FeeStatus.COMPUTED_NOT_COLLECTED if fee > 0 else FeeStatus.NONE
