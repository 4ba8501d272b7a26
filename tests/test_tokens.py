"""Tests for the token registry and unit conversion."""

from __future__ import annotations

import pytest

from agent_executor.tokens import LAMPORTS_PER_SOL, TOKENS, decimals_for, resolve_mint, to_smallest_unit


def test_resolve_mint():
    assert resolve_mint("sol") == TOKENS["SOL"][0]
    assert resolve_mint("SomeMintAddress") == "SomeMintAddress"


def test_decimals():
    assert decimals_for("BONK") == 5
    assert LAMPORTS_PER_SOL == 1_000_000_000
    with pytest.raises(KeyError):
        decimals_for("PEPE")


@pytest.mark.parametrize(
    "amount, symbol, expected",
    [("0.5", "SOL", 500_000_000), ("1", "USDC", 1_000_000), (" 0.123456789999 ", "SOL", 123_456_789), ("2", "BONK", 200_000)],
)
def test_to_smallest_unit(amount, symbol, expected):
    assert to_smallest_unit(amount, symbol) == expected


@pytest.mark.parametrize("amount", ["abc", "NaN", "Infinity"])
def test_to_smallest_unit_rejects_non_numbers(amount):
    with pytest.raises(ValueError):
        to_smallest_unit(amount, "SOL")


def test_to_smallest_unit_rejects_overflow():
    with pytest.raises(ValueError, match="out of range"):
        to_smallest_unit("1e999999", "SOL")
