"""Abstract funding source client interface.

Adapters depend only on this interface, keeping ccxt and exchange
endpoint details isolated in the concrete implementations.
"""

from abc import ABC, abstractmethod
from typing import Any


class SourceClient(ABC):
    """Abstract base class for a single funding rate endpoint."""

    @abstractmethod
    async def fetch_funding_payload(self) -> Any:
        """Return the deserialized response of the exchange's funding endpoint.

        Raises:
            SourceUnavailableError: On any transport or exchange-side error.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Clean up resources (CRITICAL for ccxt async)."""
        ...
