"""Shared data models for the funding rate comparison service.

CRITICAL: All rates use Decimal. Never use float for funding rates.
All instants are Unix epoch milliseconds (UTC).
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum


class ExchangeId(str, Enum):
    """Supported funding rate sources."""

    BINANCE = "binance"
    DELTA = "delta"


@dataclass(frozen=True)
class RateObservation:
    """One exchange's funding data for one raw symbol in a single refresh."""

    raw_symbol: str
    rate: Decimal  # exchange-native unit
    next_settlement: int  # Unix milliseconds


@dataclass(frozen=True)
class RankedObservation:
    """A row of a standalone per-exchange view, rate scaled to percent."""

    raw_symbol: str
    rate: Decimal
    next_settlement: int


@dataclass(frozen=True)
class MatchedPair:
    """Two observations joined on the same canonical symbol.

    Both rates are already on the common percentage scale.
    ``difference`` is ``rate_b - rate_a``: positive means side B pays more.
    """

    canonical_symbol: str
    source_a_symbol: str
    source_b_symbol: str
    rate_a: Decimal
    rate_b: Decimal
    difference: Decimal
    next_settlement_a: int
    next_settlement_b: int

    def is_material(self, threshold: Decimal) -> bool:
        """True when the absolute spread exceeds ``threshold``."""
        return abs(self.difference) > threshold


@dataclass
class ComparisonResult:
    """Matched pairs ranked by ``difference``, highest first.

    Top and bottom views are positional slices of this order, not
    independently filtered sets.
    """

    pairs: list[MatchedPair] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.pairs)

    def __iter__(self) -> Iterator[MatchedPair]:
        return iter(self.pairs)

    @property
    def is_empty(self) -> bool:
        return not self.pairs

    def top(self, n: int) -> list[MatchedPair]:
        """The ``n`` largest spreads, in ranked order."""
        if n <= 0:
            return []
        return self.pairs[:n]

    def bottom(self, n: int) -> list[MatchedPair]:
        """The ``n`` smallest spreads, most negative first."""
        if n <= 0:
            return []
        return list(reversed(self.pairs[-n:]))

    def canonical_symbols(self) -> set[str]:
        return {p.canonical_symbol for p in self.pairs}


@dataclass(frozen=True)
class SummaryStatistics:
    """Scalar statistics over a non-empty ComparisonResult."""

    count: int
    mean: Decimal
    maximum: Decimal
    minimum: Decimal
    material_count: int
    threshold: Decimal


class RefreshStatus(str, Enum):
    """Outcome of a refresh cycle as seen by the presentation layer."""

    OK = "ok"
    NO_DATA = "no_data"
    SOURCE_A_EMPTY = "source_a_empty"
    SOURCE_B_EMPTY = "source_b_empty"
    NO_OVERLAP = "no_overlap"

    @classmethod
    def classify(
        cls,
        source_a: dict[str, RateObservation],
        source_b: dict[str, RateObservation],
        result: ComparisonResult,
    ) -> "RefreshStatus":
        """Distinguish "nothing fetched" from "nothing in common"."""
        if not source_a and not source_b:
            return cls.NO_DATA
        if not source_a:
            return cls.SOURCE_A_EMPTY
        if not source_b:
            return cls.SOURCE_B_EMPTY
        if result.is_empty:
            return cls.NO_OVERLAP
        return cls.OK

    def message(self, label_a: str = "Binance", label_b: str = "Delta Exchange") -> str:
        """User-facing description of this status."""
        if self is RefreshStatus.NO_DATA:
            return "Could not fetch data from both exchanges"
        if self is RefreshStatus.SOURCE_A_EMPTY:
            return f"Could not fetch data from {label_a}"
        if self is RefreshStatus.SOURCE_B_EMPTY:
            return f"Could not fetch data from {label_b}"
        if self is RefreshStatus.NO_OVERLAP:
            return "No common symbols found between exchanges"
        return "Data loaded successfully"


@dataclass(frozen=True)
class RefreshReport:
    """Self-contained snapshot of one refresh cycle.

    Replaced wholesale by the next cycle; never mutated after publication.
    """

    cycle_id: int
    source_a: dict[str, RateObservation]
    source_b: dict[str, RateObservation]
    result: ComparisonResult
    summary: SummaryStatistics | None
    status: RefreshStatus
    completed_at: int  # Unix milliseconds
