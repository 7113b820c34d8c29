"""Delta Exchange client via ccxt async.

ccxt ships Delta's global host; the public URL is overridden to point at the
configured deployment (India by default), the same way a demo-trading host
would be swapped in. Tickers come from the raw ``GET /v2/tickers`` endpoint
filtered server-side to perpetual futures.
"""

from typing import Any

import ccxt.async_support as ccxt_async

from funding_compare.config import DeltaSettings
from funding_compare.exceptions import SourceUnavailableError
from funding_compare.exchange.client import SourceClient
from funding_compare.logging import get_logger

logger = get_logger(__name__)


class DeltaClient(SourceClient):
    """Public-only Delta Exchange client."""

    def __init__(self, settings: DeltaSettings) -> None:
        self._settings = settings
        api_url = settings.api_url.rstrip("/")
        self._exchange = ccxt_async.delta(
            {
                "enableRateLimit": True,
                "timeout": settings.timeout_ms,
                "urls": {
                    "api": {
                        "public": api_url,
                        "private": api_url,
                    },
                },
            }
        )

    @property
    def exchange(self) -> ccxt_async.delta:
        """Access the underlying ccxt exchange instance."""
        return self._exchange

    async def fetch_funding_payload(self) -> Any:
        """Fetch perpetual tickers. Response shape: ``{"result": [...]}``."""
        try:
            payload = await self._exchange.publicGetTickers(
                {"contract_types": self._settings.contract_types}
            )
        except ccxt_async.BaseError as exc:
            raise SourceUnavailableError(f"delta tickers failed: {exc}") from exc
        logger.debug("delta_payload_fetched", host=self._settings.api_url)
        return payload

    async def close(self) -> None:
        """Release the ccxt aiohttp session."""
        await self._exchange.close()
        logger.info("delta_connection_closed")
