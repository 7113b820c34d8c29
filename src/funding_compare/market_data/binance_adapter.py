"""Binance USD-M premium index -> funding rate observations.

BINANCE CONVENTION: ``lastFundingRate`` is a fraction (0.0001 == 0.01%).
Scaling to percent is the comparison engine's job, not this adapter's.
"""

from collections.abc import Iterable
from typing import Any

from funding_compare.exceptions import PayloadFormatError
from funding_compare.exchange.client import SourceClient
from funding_compare.logging import get_logger
from funding_compare.market_data.settlement import MS_PER_HOUR
from funding_compare.market_data.source_adapter import SourceAdapter, parse_rate
from funding_compare.models import ExchangeId, RateObservation

logger = get_logger(__name__)


class BinanceAdapter(SourceAdapter):
    """Keeps perpetuals quoted in the configured suffixes that carry a rate.

    Args:
        client: Binance funding endpoint client.
        perpetual_suffixes: Quote suffixes that mark a perpetual contract.
            Dated delivery contracts (``BTCUSDT_250328``) never match.
        fallback_interval_hours: Used for ``now + interval`` when an item
            has no usable ``nextFundingTime``.
    """

    exchange = ExchangeId.BINANCE

    def __init__(
        self,
        client: SourceClient,
        perpetual_suffixes: Iterable[str] = ("USDT", "BUSD"),
        fallback_interval_hours: int = 8,
    ) -> None:
        super().__init__(client)
        self._suffixes = tuple(perpetual_suffixes)
        self._fallback_ms = fallback_interval_hours * MS_PER_HOUR

    def parse(self, payload: Any, now_ms: int) -> dict[str, RateObservation]:
        if not isinstance(payload, list):
            raise PayloadFormatError(
                f"binance premiumIndex: expected list, got {type(payload).__name__}"
            )

        observations: dict[str, RateObservation] = {}
        skipped = 0

        for item in payload:
            if not isinstance(item, dict):
                skipped += 1
                continue

            symbol = item.get("symbol")
            if not isinstance(symbol, str) or not symbol.endswith(self._suffixes):
                skipped += 1
                continue

            if "lastFundingRate" not in item:
                skipped += 1
                continue

            rate = parse_rate(item["lastFundingRate"])
            if rate is None:
                logger.debug(
                    "invalid_funding_rate",
                    symbol=symbol,
                    raw=item["lastFundingRate"],
                )
                skipped += 1
                continue

            observations[symbol] = RateObservation(
                raw_symbol=symbol,
                rate=rate,
                next_settlement=self._next_settlement(item.get("nextFundingTime"), now_ms),
            )

        logger.debug("binance_parsed", kept=len(observations), skipped=skipped)
        return observations

    def _next_settlement(self, raw: Any, now_ms: int) -> int:
        """Use the published timestamp verbatim; fall back when absent or zero."""
        try:
            next_time = int(raw)
        except (TypeError, ValueError):
            next_time = 0
        if next_time > 0:
            return next_time
        return now_ms + self._fallback_ms
