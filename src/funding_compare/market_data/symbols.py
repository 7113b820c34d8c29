"""Per-exchange symbol normalization to a canonical base-asset key.

Exchanges append different quote-currency suffixes (Binance ``BTCUSDT`` /
``BTCBUSD``, Delta ``BTCUSD`` / ``BTCUSDT``). Stripping the configured
suffix yields the key the two sides are joined on.
"""

from collections.abc import Iterable


class SymbolNormalizer:
    """Strips one quote suffix from exchange-native symbols.

    Suffixes are tried in the order given and the first match wins, so list
    the most specific first (``USDT`` before ``USD``). A symbol that matches
    no suffix, or would be left empty, is its own canonical key.

    Args:
        suffixes: Ordered quote-currency suffixes for one exchange.
    """

    def __init__(self, suffixes: Iterable[str]) -> None:
        self._suffixes: tuple[str, ...] = tuple(s for s in suffixes if s)

    @property
    def suffixes(self) -> tuple[str, ...]:
        return self._suffixes

    def matched_suffix(self, symbol: str) -> str | None:
        """Return the first configured suffix ``symbol`` ends with, if any."""
        for suffix in self._suffixes:
            if symbol.endswith(suffix):
                return suffix
        return None

    def normalize(self, symbol: str) -> str:
        """Return the canonical base-asset key for ``symbol``."""
        suffix = self.matched_suffix(symbol)
        if suffix is None:
            return symbol
        base = symbol[: -len(suffix)]
        return base or symbol

    def suffix_rank(self, symbol: str) -> int:
        """Position of the matching suffix; unmatched symbols rank last."""
        suffix = self.matched_suffix(symbol)
        if suffix is None:
            return len(self._suffixes)
        return self._suffixes.index(suffix)
