"""Base class for per-exchange funding rate adapters.

An adapter turns one exchange's raw payload into ``raw symbol ->
RateObservation``. Failures for the whole payload are absorbed here: the
comparison engine always receives a mapping, possibly empty, never an
exception.
"""

import asyncio
import time
from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from typing import Any

from funding_compare.exchange.client import SourceClient
from funding_compare.logging import get_logger
from funding_compare.models import ExchangeId, RateObservation

logger = get_logger(__name__)


def parse_rate(raw: Any) -> Decimal | None:
    """Convert a string- or number-encoded rate to Decimal.

    Returns None for missing, empty, or non-finite values.
    """
    if raw is None or isinstance(raw, bool):
        return None
    try:
        rate = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        return None
    if not rate.is_finite():
        return None
    return rate


class SourceAdapter(ABC):
    """Fetches and normalizes one exchange's current funding rates.

    Args:
        client: Transport for the exchange's funding endpoint.
    """

    exchange: ExchangeId

    def __init__(self, client: SourceClient) -> None:
        self._client = client

    @abstractmethod
    def parse(self, payload: Any, now_ms: int) -> dict[str, RateObservation]:
        """Normalize a deserialized payload.

        Irrelevant or malformed items are skipped. Only a payload whose
        overall shape is wrong raises.

        Args:
            payload: The exchange response, already deserialized.
            now_ms: Current time in Unix milliseconds, for settlement fallbacks.

        Raises:
            PayloadFormatError: If the payload is not the expected container.
        """
        ...

    async def fetch(self) -> dict[str, RateObservation]:
        """Fetch and parse once. Returns an empty mapping on any failure."""
        try:
            payload = await self._client.fetch_funding_payload()
            observations = self.parse(payload, int(time.time() * 1000))
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.warning(
                "source_fetch_failed",
                exchange=self.exchange.value,
                exc_info=True,
            )
            return {}

        logger.info(
            "source_fetched",
            exchange=self.exchange.value,
            count=len(observations),
        )
        return observations

    async def close(self) -> None:
        await self._client.close()
