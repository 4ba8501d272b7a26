"""Market context for the decision prompt."""

import logging
from typing import List, Optional

from agent_executor.models import MarketCap, MarketSnapshot, TrendingAsset

logger = logging.getLogger(__name__)

# (symbol, 24h change %, 24h volume USD)
DEFAULT_TRENDING = [
    ("WIF", 12.5, 15_000_000),
    ("BONK", -3.2, 8_000_000),
    ("MYRO", 45.8, 3_000_000),
]
DEFAULT_SENTIMENT = "bullish"
DEFAULT_MARKET_CAP = (2_400_000_000, 5.3)


class MarketDataFetcher:
    """Builds the market snapshot handed to the decision engine each cycle."""

    def __init__(self, trending: Optional[List[tuple]] = None, sentiment: str = DEFAULT_SENTIMENT):
        self.trending = trending or DEFAULT_TRENDING
        self.sentiment = sentiment

    def fetch_market_snapshot(self) -> MarketSnapshot:
        """
        Return a new snapshot. Callers must not hold on to it across cycles.

        Returns:
            MarketSnapshot with trending assets, sentiment and aggregate market cap
        """
        snapshot = MarketSnapshot(
            trending=[TrendingAsset(symbol=s, change_24h=c, volume=v) for s, c, v in self.trending],
            sentiment=self.sentiment,
            market_cap=MarketCap(total=DEFAULT_MARKET_CAP[0], change_24h=DEFAULT_MARKET_CAP[1]),
        )
        logger.debug(f"Market snapshot: {', '.join(snapshot.trending_symbols)} ({snapshot.sentiment})")
        return snapshot
