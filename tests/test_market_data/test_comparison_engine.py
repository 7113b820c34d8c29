"""Tests for ComparisonEngine -- matching, scaling, ranking.

Verifies:
- Matched key set equals the intersection of canonical keys
- difference == scaled_b - scaled_a exactly (Binance x100, Delta x1)
- Descending order by difference, alphabetical within ties
- Idempotence on identical inputs
- Collision handling for two raw symbols with one canonical key
- Empty inputs and empty intersection give an empty result
- Standalone per-exchange ranked views
"""

from decimal import Decimal

import pytest

from funding_compare.market_data.comparison_engine import (
    ComparisonEngine,
    SourceProfile,
    index_by_canonical,
)
from funding_compare.market_data.symbols import SymbolNormalizer
from funding_compare.models import ExchangeId, RateObservation

T1 = 1_710_057_600_000
T2 = 1_710_086_400_000


def _obs(symbol: str, rate: str, next_settlement: int = T1) -> RateObservation:
    return RateObservation(raw_symbol=symbol, rate=Decimal(rate), next_settlement=next_settlement)


def _mapping(*observations: RateObservation) -> dict[str, RateObservation]:
    return {o.raw_symbol: o for o in observations}


@pytest.fixture
def binance_rates() -> dict[str, RateObservation]:
    return _mapping(
        _obs("BTCUSDT", "0.0001"),
        _obs("ETHUSDT", "0.0002"),
        _obs("SOLUSDT", "-0.0003"),
        _obs("DOGEUSDT", "0.0001"),
        _obs("PEPEUSDT", "0.0005"),  # not listed on Delta
    )


@pytest.fixture
def delta_rates() -> dict[str, RateObservation]:
    return _mapping(
        _obs("BTCUSD", "0.02", T2),
        _obs("ETHUSD", "0.01", T2),
        _obs("SOLUSD", "0.01", T2),
        _obs("DOGEUSD", "-0.01", T2),
        _obs("AVAXUSD", "0.05", T2),  # not listed on Binance
    )


class TestEndToEnd:
    def test_single_pair_scenario(self, engine: ComparisonEngine) -> None:
        a = _mapping(_obs("BTCUSDT", "0.0001", T1))
        b = _mapping(_obs("BTCUSD", "0.02", T2))

        result = engine.compare(a, b)

        assert len(result) == 1
        pair = result.pairs[0]
        assert pair.canonical_symbol == "BTC"
        assert pair.source_a_symbol == "BTCUSDT"
        assert pair.source_b_symbol == "BTCUSD"
        assert pair.rate_a == Decimal("0.01")
        assert pair.rate_b == Decimal("0.02")
        assert pair.difference == Decimal("0.01")
        assert pair.next_settlement_a == T1
        assert pair.next_settlement_b == T2


class TestMatching:
    def test_keys_are_intersection(
        self,
        engine: ComparisonEngine,
        binance_rates: dict[str, RateObservation],
        delta_rates: dict[str, RateObservation],
    ) -> None:
        result = engine.compare(binance_rates, delta_rates)
        assert result.canonical_symbols() == {"BTC", "ETH", "SOL", "DOGE"}

    def test_usdt_on_delta_matches_usdt_on_binance(self, engine: ComparisonEngine) -> None:
        result = engine.compare(
            _mapping(_obs("SOLUSDT", "0.0001")),
            _mapping(_obs("SOLUSDT", "0.01")),
        )
        assert result.canonical_symbols() == {"SOL"}

    def test_disjoint_keys_give_empty_result(self, engine: ComparisonEngine) -> None:
        result = engine.compare(
            _mapping(_obs("BTCUSDT", "0.0001")),
            _mapping(_obs("ETHUSD", "0.01")),
        )
        assert result.is_empty
        assert result.pairs == []

    @pytest.mark.parametrize("side", ["a", "b", "both"])
    def test_empty_input_gives_empty_result(
        self,
        engine: ComparisonEngine,
        binance_rates: dict[str, RateObservation],
        delta_rates: dict[str, RateObservation],
        side: str,
    ) -> None:
        a = {} if side in ("a", "both") else binance_rates
        b = {} if side in ("b", "both") else delta_rates
        assert engine.compare(a, b).is_empty

    def test_unmatched_suffix_joins_only_on_identical_symbol(self, engine: ComparisonEngine) -> None:
        result = engine.compare(
            _mapping(_obs("1000SHIBUSDC", "0.0001")),
            _mapping(_obs("1000SHIBUSDC", "0.01")),
        )
        assert result.canonical_symbols() == {"1000SHIBUSDC"}


class TestSpread:
    def test_difference_matches_scaling_rule(
        self,
        engine: ComparisonEngine,
        binance_rates: dict[str, RateObservation],
        delta_rates: dict[str, RateObservation],
    ) -> None:
        result = engine.compare(binance_rates, delta_rates)
        for pair in result:
            raw_a = binance_rates[pair.source_a_symbol].rate
            raw_b = delta_rates[pair.source_b_symbol].rate
            assert pair.rate_a == raw_a * 100
            assert pair.rate_b == raw_b
            assert pair.difference == raw_b - raw_a * 100

    def test_scale_is_per_profile(self, delta_profile: SourceProfile) -> None:
        unscaled_a = SourceProfile(
            exchange=ExchangeId.BINANCE,
            normalizer=SymbolNormalizer(["USDT"]),
            rate_scale=Decimal("1"),
            label="Binance",
        )
        engine = ComparisonEngine(unscaled_a, delta_profile)
        result = engine.compare(
            _mapping(_obs("BTCUSDT", "0.01")),
            _mapping(_obs("BTCUSD", "0.02")),
        )
        assert result.pairs[0].difference == Decimal("0.01")


class TestRanking:
    def test_sorted_descending(
        self,
        engine: ComparisonEngine,
        binance_rates: dict[str, RateObservation],
        delta_rates: dict[str, RateObservation],
    ) -> None:
        result = engine.compare(binance_rates, delta_rates)
        diffs = [p.difference for p in result]
        assert all(diffs[i] >= diffs[i + 1] for i in range(len(diffs) - 1))
        # SOL 0.04 > BTC 0.01 > ETH -0.01 > DOGE -0.02
        assert [p.canonical_symbol for p in result] == ["SOL", "BTC", "ETH", "DOGE"]

    def test_ties_in_alphabetical_order(self, engine: ComparisonEngine) -> None:
        a = _mapping(_obs("ZECUSDT", "0"), _obs("ADAUSDT", "0"), _obs("LTCUSDT", "0"))
        b = _mapping(_obs("ZECUSD", "0.01"), _obs("ADAUSD", "0.01"), _obs("LTCUSD", "0.01"))
        result = engine.compare(a, b)
        assert [p.canonical_symbol for p in result] == ["ADA", "LTC", "ZEC"]

    def test_idempotent(
        self,
        engine: ComparisonEngine,
        binance_rates: dict[str, RateObservation],
        delta_rates: dict[str, RateObservation],
    ) -> None:
        assert engine.compare(binance_rates, delta_rates) == engine.compare(
            binance_rates, delta_rates
        )

    def test_inputs_not_mutated(
        self,
        engine: ComparisonEngine,
        binance_rates: dict[str, RateObservation],
        delta_rates: dict[str, RateObservation],
    ) -> None:
        before_a, before_b = dict(binance_rates), dict(delta_rates)
        engine.compare(binance_rates, delta_rates)
        assert binance_rates == before_a
        assert delta_rates == before_b

    def test_top_and_bottom_are_positional(
        self,
        engine: ComparisonEngine,
        binance_rates: dict[str, RateObservation],
        delta_rates: dict[str, RateObservation],
    ) -> None:
        result = engine.compare(binance_rates, delta_rates)
        assert [p.canonical_symbol for p in result.top(2)] == ["SOL", "BTC"]
        assert [p.canonical_symbol for p in result.bottom(2)] == ["DOGE", "ETH"]
        assert len(result.top(10)) == 4
        assert result.top(0) == []
        assert result.bottom(0) == []


class TestCollisions:
    def test_preferred_suffix_wins_regardless_of_order(self, binance_profile: SourceProfile) -> None:
        busd_first = _mapping(_obs("BTCBUSD", "0.0009"), _obs("BTCUSDT", "0.0001"))
        usdt_first = _mapping(_obs("BTCUSDT", "0.0001"), _obs("BTCBUSD", "0.0009"))
        for mapping in (busd_first, usdt_first):
            index = index_by_canonical(mapping, binance_profile.normalizer)
            assert index["BTC"].raw_symbol == "BTCUSDT"

    def test_suffixed_symbol_beats_unsuffixed(self) -> None:
        normalizer = SymbolNormalizer(["USD"])
        mapping = _mapping(_obs("BTC", "0.1"), _obs("BTCUSD", "0.2"))
        assert index_by_canonical(mapping, normalizer)["BTC"].raw_symbol == "BTCUSD"

    def test_equal_rank_keeps_first_seen(self) -> None:
        normalizer = SymbolNormalizer(["USD"])
        # "USD" cannot be stripped to nothing, so both land on key "USD"
        mapping = _mapping(_obs("USD", "0.1"), _obs("USDUSD", "0.2"))
        assert index_by_canonical(mapping, normalizer)["USD"].raw_symbol == "USD"


class TestRankObservations:
    def test_binance_view_scaled_and_sorted(
        self, engine: ComparisonEngine, binance_rates: dict[str, RateObservation]
    ) -> None:
        rows = engine.rank_observations(binance_rates, ExchangeId.BINANCE)
        assert [r.raw_symbol for r in rows][0] == "PEPEUSDT"
        assert rows[0].rate == Decimal("0.05")
        assert rows[-1].raw_symbol == "SOLUSDT"
        assert len(rows) == len(binance_rates)

    def test_delta_view_unscaled(
        self, engine: ComparisonEngine, delta_rates: dict[str, RateObservation]
    ) -> None:
        rows = engine.rank_observations(delta_rates, ExchangeId.DELTA)
        assert rows[0].raw_symbol == "AVAXUSD"
        assert rows[0].rate == Decimal("0.05")
        assert rows[0].next_settlement == T2

    def test_empty_view(self, engine: ComparisonEngine) -> None:
        assert engine.rank_observations({}, ExchangeId.DELTA) == []

    def test_profile_for_unknown_exchange(self, binance_profile: SourceProfile) -> None:
        engine = ComparisonEngine(binance_profile, binance_profile)
        with pytest.raises(KeyError):
            engine.profile_for(ExchangeId.DELTA)
