"""Binance USD-M futures client via ccxt async.

Calls the raw ``GET /fapi/v1/premiumIndex`` endpoint through ccxt's implicit
API so the adapter sees Binance's native field names (``lastFundingRate``,
``nextFundingTime``) rather than ccxt's unified funding-rate structure.
"""

from typing import Any

import ccxt.async_support as ccxt_async

from funding_compare.config import BinanceSettings
from funding_compare.exceptions import SourceUnavailableError
from funding_compare.exchange.client import SourceClient
from funding_compare.logging import get_logger

logger = get_logger(__name__)


class BinanceClient(SourceClient):
    """Public-only Binance USD-M client. No API keys are needed."""

    def __init__(self, settings: BinanceSettings) -> None:
        self._settings = settings
        self._exchange = ccxt_async.binanceusdm(
            {
                "enableRateLimit": True,
                "timeout": settings.timeout_ms,
            }
        )

    @property
    def exchange(self) -> ccxt_async.binanceusdm:
        """Access the underlying ccxt exchange instance."""
        return self._exchange

    async def fetch_funding_payload(self) -> Any:
        """Fetch premium index entries for every USD-M symbol."""
        try:
            payload = await self._exchange.fapiPublicGetPremiumIndex()
        except ccxt_async.BaseError as exc:
            raise SourceUnavailableError(f"binance premiumIndex failed: {exc}") from exc
        logger.debug(
            "binance_payload_fetched",
            items=len(payload) if isinstance(payload, list) else None,
        )
        return payload

    async def close(self) -> None:
        """Release the ccxt aiohttp session."""
        await self._exchange.close()
        logger.info("binance_connection_closed")
