"""Swap planning against the Jupiter liquidity aggregator."""

import logging
from typing import Any, Dict, Optional

import requests

from agent_executor.errors import TransportError
from agent_executor.logger import mask_address
from agent_executor.models import Decision, Quote, SwapPlan
from agent_executor.tokens import TOKENS, resolve_mint, to_smallest_unit

logger = logging.getLogger(__name__)

SLIPPAGE_BPS = 50  # 0.5%


class JupiterClient:
    """Thin HTTP client for the aggregator quote, swap and price endpoints."""

    def __init__(self, base_url: str, session: Optional[requests.Session] = None, timeout: float = 15.0):
        """
        Initialize aggregator client.

        Args:
            base_url: Aggregator API base URL (e.g. https://quote-api.jup.ag/v6)
            session: Optional requests session (shared connection pool)
            timeout: Per-request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    def get_quote(self, input_mint: str, output_mint: str, amount: int, slippage_bps: int = SLIPPAGE_BPS) -> Optional[Quote]:
        """
        Request a quote for an exact input amount.

        Args:
            input_mint: Input token mint
            output_mint: Output token mint
            amount: Input amount in smallest units
            slippage_bps: Slippage tolerance in basis points

        Returns:
            Quote, or None if the aggregator is unreachable or has no route
        """
        try:
            response = self.session.get(
                f"{self.base_url}/quote",
                params={
                    "inputMint": input_mint,
                    "outputMint": output_mint,
                    "amount": amount,
                    "slippageBps": slippage_bps,
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            logger.warning(f"Quote request failed: {type(e).__name__}")
            return None
        except ValueError:
            logger.warning("Quote response was not valid JSON")
            return None

        if not isinstance(data, dict) or data.get("outAmount") is None:
            return None

        try:
            return Quote(
                input_mint=data.get("inputMint", input_mint),
                output_mint=data.get("outputMint", output_mint),
                in_amount=int(data.get("inAmount", amount)),
                out_amount=int(data["outAmount"]),
                slippage_bps=int(data.get("slippageBps", slippage_bps)),
                raw=data,
            )
        except (TypeError, ValueError):
            logger.warning("Quote response had non-integer amounts")
            return None

    def build_swap_transaction(self, quote: Quote, user_public_key: str) -> str:
        """
        Request a prebuilt, unsigned swap transaction for a quote.

        Args:
            quote: Quote returned by get_quote
            user_public_key: Wallet that signs and receives the output

        Returns:
            Base64-encoded unsigned transaction

        Raises:
            TransportError: If the transaction could not be built
        """
        try:
            response = self.session.post(
                f"{self.base_url}/swap",
                json={
                    "quoteResponse": quote.raw,
                    "userPublicKey": user_public_key,
                    "wrapAndUnwrapSol": True,
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Swap build request failed: {type(e).__name__}") from e
        except ValueError as e:
            raise TransportError("Swap build response was not valid JSON") from e

        swap_transaction = data.get("swapTransaction") if isinstance(data, dict) else None
        if not swap_transaction:
            raise TransportError("Swap build response missing swapTransaction")
        return swap_transaction

    def get_token_price(self, symbol: str) -> float:
        """
        Get the USD price of a known token.

        Returns:
            Price, or 0.0 for unknown symbols and failed lookups
        """
        entry = TOKENS.get(symbol.upper())
        if not entry:
            return 0.0
        mint = entry[0]

        try:
            response = self.session.get(f"{self.base_url}/price", params={"ids": mint}, timeout=self.timeout)
            response.raise_for_status()
            data: Dict[str, Any] = response.json()
            return float(((data.get("data") or {}).get(mint) or {}).get("price") or 0.0)
        except (requests.exceptions.RequestException, ValueError, AttributeError) as e:
            logger.warning(f"Price lookup for {symbol} failed: {type(e).__name__}")
            return 0.0


class SwapPlanner:
    """Turns a validated SWAP decision into a quote plus an unsigned transaction."""

    def __init__(self, jupiter_client: JupiterClient, slippage_bps: int = SLIPPAGE_BPS):
        self.jupiter_client = jupiter_client
        self.slippage_bps = slippage_bps

    def plan(self, decision: Decision, wallet_address: str) -> Optional[SwapPlan]:
        """
        Plan a swap for an agent wallet.

        Args:
            decision: Validated SWAP decision
            wallet_address: Agent wallet (signer and beneficiary)

        Returns:
            SwapPlan, or None when no quote is available (no liquidity right now)

        Raises:
            TransportError: If a quote exists but the transaction could not be built
        """
        amount_in = to_smallest_unit(decision.amount, decision.from_token)
        input_mint = resolve_mint(decision.from_token)
        output_mint = resolve_mint(decision.to_token)

        logger.info(f"  Requesting quote: {decision.amount} {decision.from_token} -> {decision.to_token}")
        quote = self.jupiter_client.get_quote(input_mint, output_mint, amount_in, self.slippage_bps)
        if quote is None:
            logger.info("  No quote available, skipping trade this cycle")
            return None

        logger.info(f"  Got quote: {quote.out_amount} expected output")

        # Informational only; a missing price never blocks the trade
        price = self.jupiter_client.get_token_price(decision.from_token)
        if price > 0:
            logger.info(f"  Input value: ~${float(decision.amount) * price:,.2f} ({decision.from_token} @ ${price:,.4f})")

        unsigned_transaction = self.jupiter_client.build_swap_transaction(quote, wallet_address)
        logger.info(f"  Swap transaction built for wallet {mask_address(wallet_address)}")

        return SwapPlan(quote=quote, unsigned_transaction=unsigned_transaction, amount_in=amount_in)