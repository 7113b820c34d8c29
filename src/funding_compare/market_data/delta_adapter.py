"""Delta Exchange tickers -> funding rate observations.

DELTA CONVENTION: ``funding_rate`` is already a percentage (0.01 == 0.01%).
Tickers carry no next-funding field; settlement follows a fixed UTC table.
"""

from typing import Any

from funding_compare.exceptions import PayloadFormatError
from funding_compare.exchange.client import SourceClient
from funding_compare.logging import get_logger
from funding_compare.market_data.settlement import SettlementSchedule
from funding_compare.market_data.source_adapter import SourceAdapter, parse_rate
from funding_compare.models import ExchangeId, RateObservation

logger = get_logger(__name__)

_PERPETUAL_CONTRACT_TYPE = "perpetual_futures"


class DeltaAdapter(SourceAdapter):
    """Keeps every perpetual ticker that carries a funding rate.

    Args:
        client: Delta funding endpoint client.
        schedule: Daily settlement table shared by all Delta perpetuals.
    """

    exchange = ExchangeId.DELTA

    def __init__(self, client: SourceClient, schedule: SettlementSchedule) -> None:
        super().__init__(client)
        self._schedule = schedule

    def parse(self, payload: Any, now_ms: int) -> dict[str, RateObservation]:
        if not isinstance(payload, dict):
            raise PayloadFormatError(
                f"delta tickers: expected object, got {type(payload).__name__}"
            )
        items = payload.get("result")
        if not isinstance(items, list):
            raise PayloadFormatError("delta tickers: missing 'result' list")

        # One settlement instant for the whole refresh
        next_settlement = self._schedule.next_settlement(now_ms)

        observations: dict[str, RateObservation] = {}
        skipped = 0

        for item in items:
            if not isinstance(item, dict):
                skipped += 1
                continue

            symbol = item.get("symbol")
            if not isinstance(symbol, str) or not symbol:
                skipped += 1
                continue

            contract_type = item.get("contract_type")
            if contract_type is not None and contract_type != _PERPETUAL_CONTRACT_TYPE:
                skipped += 1
                continue

            rate = parse_rate(item.get("funding_rate"))
            if rate is None:
                skipped += 1
                continue

            observations[symbol] = RateObservation(
                raw_symbol=symbol,
                rate=rate,
                next_settlement=next_settlement,
            )

        logger.debug("delta_parsed", kept=len(observations), skipped=skipped)
        return observations
