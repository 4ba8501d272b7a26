"""Token registry: symbol to mint address and decimals (mainnet)."""

from decimal import Decimal, InvalidOperation, ROUND_DOWN
from typing import Dict, Tuple

from agent_executor.models import BASE_ASSET


# symbol -> (mint, decimals)
TOKENS: Dict[str, Tuple[str, int]] = {
    "SOL": ("So11111111111111111111111111111111111111112", 9),
    "USDC": ("EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v", 6),
    "WIF": ("EKpQGSJtjMFqKZ9KQanSqYXRcF8fBopzLHYxdM65zcjm", 6),
    "BONK": ("DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263", 5),
    "MYRO": ("HhJpBhRRn4g56VsyLuT8DL5Bv31HkXqsrahTTUCZeZg4", 9),
}

LAMPORTS_PER_SOL = 10 ** TOKENS[BASE_ASSET][1]


def resolve_mint(symbol: str) -> str:
    """Map a symbol to its mint; unknown values are assumed to already be mints."""
    entry = TOKENS.get(symbol.upper())
    return entry[0] if entry else symbol


def decimals_for(symbol: str) -> int:
    entry = TOKENS.get(symbol.upper())
    if entry is None:
        raise KeyError(f"Unknown token: {symbol}")
    return entry[1]


def to_smallest_unit(amount: str, symbol: str) -> int:
    """
    Convert a decimal amount string to the token's smallest unit, rounding down.

    Raises:
        ValueError: If the amount is not a finite number or is out of range
        KeyError: If the symbol is unknown
    """
    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {amount!r}")
    if not value.is_finite():
        raise ValueError(f"Invalid amount: {amount!r}")
    try:
        scaled = value * (Decimal(10) ** decimals_for(symbol))
        return int(scaled.to_integral_value(rounding=ROUND_DOWN))
    except ArithmeticError:
        raise ValueError(f"Amount out of range: {amount!r}")
