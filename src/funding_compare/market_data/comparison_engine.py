"""Cross-exchange funding rate comparison engine.

Joins two exchanges' observations on canonical base asset, brings both rates
to the same percentage scale, and ranks the spread.

Core formula:
  rate_a = native_rate_a * profile_a.rate_scale
  rate_b = native_rate_b * profile_b.rate_scale
  difference = rate_b - rate_a

The scale is declared once per exchange on its SourceProfile (Binance
fractions x100, Delta percentages x1) and never inferred at join time.
"""

from dataclasses import dataclass
from decimal import Decimal

from funding_compare.logging import get_logger
from funding_compare.market_data.symbols import SymbolNormalizer
from funding_compare.models import (
    ComparisonResult,
    ExchangeId,
    MatchedPair,
    RankedObservation,
    RateObservation,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class SourceProfile:
    """How one exchange's symbols and rates map onto the common scale."""

    exchange: ExchangeId
    normalizer: SymbolNormalizer
    rate_scale: Decimal
    label: str

    def scale(self, rate: Decimal) -> Decimal:
        return rate * self.rate_scale


class ComparisonEngine:
    """Matches and ranks funding rates from two sources.

    Args:
        profile_a: Side A (subtracted). Binance in the default wiring.
        profile_b: Side B. Delta in the default wiring.
    """

    def __init__(self, profile_a: SourceProfile, profile_b: SourceProfile) -> None:
        self._profile_a = profile_a
        self._profile_b = profile_b

    @property
    def profile_a(self) -> SourceProfile:
        return self._profile_a

    @property
    def profile_b(self) -> SourceProfile:
        return self._profile_b

    def profile_for(self, exchange: ExchangeId) -> SourceProfile:
        """Return the profile for ``exchange``.

        Raises:
            KeyError: If ``exchange`` is not one of the two configured sides.
        """
        for profile in (self._profile_a, self._profile_b):
            if profile.exchange == exchange:
                return profile
        raise KeyError(exchange)

    def compare(
        self,
        source_a: dict[str, RateObservation],
        source_b: dict[str, RateObservation],
    ) -> ComparisonResult:
        """Join both mappings on canonical symbol and rank by spread.

        1. Index each side by canonical symbol
        2. Intersect the keys (alphabetical order)
        3. Scale both rates to percent and compute rate_b - rate_a
        4. Stable sort by difference descending

        Unmatched symbols are dropped. Empty inputs or an empty
        intersection give an empty result, not an error.
        """
        index_a = index_by_canonical(source_a, self._profile_a.normalizer)
        index_b = index_by_canonical(source_b, self._profile_b.normalizer)

        shared = sorted(index_a.keys() & index_b.keys())

        pairs: list[MatchedPair] = []
        for key in shared:
            obs_a = index_a[key]
            obs_b = index_b[key]
            rate_a = self._profile_a.scale(obs_a.rate)
            rate_b = self._profile_b.scale(obs_b.rate)
            pairs.append(
                MatchedPair(
                    canonical_symbol=key,
                    source_a_symbol=obs_a.raw_symbol,
                    source_b_symbol=obs_b.raw_symbol,
                    rate_a=rate_a,
                    rate_b=rate_b,
                    difference=rate_b - rate_a,
                    next_settlement_a=obs_a.next_settlement,
                    next_settlement_b=obs_b.next_settlement,
                )
            )

        pairs.sort(key=lambda p: p.difference, reverse=True)

        logger.debug(
            "comparison_computed",
            side_a=len(index_a),
            side_b=len(index_b),
            matched=len(pairs),
        )
        return ComparisonResult(pairs=pairs)

    def rank_observations(
        self,
        observations: dict[str, RateObservation],
        exchange: ExchangeId,
    ) -> list[RankedObservation]:
        """Standalone per-exchange view: scaled to percent, highest rate first."""
        profile = self.profile_for(exchange)
        ranked = [
            RankedObservation(
                raw_symbol=obs.raw_symbol,
                rate=profile.scale(obs.rate),
                next_settlement=obs.next_settlement,
            )
            for obs in observations.values()
        ]
        ranked.sort(key=lambda r: r.rate, reverse=True)
        return ranked


def index_by_canonical(
    observations: dict[str, RateObservation],
    normalizer: SymbolNormalizer,
) -> dict[str, RateObservation]:
    """Key observations by canonical symbol.

    When two raw symbols share a key (``BTCUSDT`` and ``BTCBUSD``), the one
    whose suffix comes first in the normalizer's list is kept; on equal rank
    the first one seen stays.
    """
    index: dict[str, RateObservation] = {}
    for raw_symbol, obs in observations.items():
        key = normalizer.normalize(raw_symbol)
        current = index.get(key)
        if current is not None:
            if normalizer.suffix_rank(raw_symbol) >= normalizer.suffix_rank(
                current.raw_symbol
            ):
                logger.debug(
                    "canonical_symbol_collision",
                    canonical=key,
                    kept=current.raw_symbol,
                    dropped=raw_symbol,
                )
                continue
            logger.debug(
                "canonical_symbol_collision",
                canonical=key,
                kept=raw_symbol,
                dropped=current.raw_symbol,
            )
        index[key] = obs
    return index
