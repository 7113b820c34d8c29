"""Shared test fixtures for the funding rate comparison service."""

from decimal import Decimal

import pytest

from funding_compare.config import (
    AppSettings,
    BinanceSettings,
    ComparisonSettings,
    DashboardSettings,
    DeltaSettings,
)
from funding_compare.market_data.comparison_engine import ComparisonEngine, SourceProfile
from funding_compare.market_data.symbols import SymbolNormalizer
from funding_compare.models import ExchangeId


@pytest.fixture
def mock_settings() -> AppSettings:
    """Return AppSettings with test defaults (headless, debug logging)."""
    return AppSettings(
        log_level="DEBUG",
        binance=BinanceSettings(),
        delta=DeltaSettings(),
        comparison=ComparisonSettings(),
        dashboard=DashboardSettings(enabled=False, refresh_interval=0.01),
    )


@pytest.fixture
def binance_profile() -> SourceProfile:
    """Side A: Binance fractions scaled x100."""
    return SourceProfile(
        exchange=ExchangeId.BINANCE,
        normalizer=SymbolNormalizer(["USDT", "BUSD"]),
        rate_scale=Decimal("100"),
        label="Binance",
    )


@pytest.fixture
def delta_profile() -> SourceProfile:
    """Side B: Delta percentages scaled x1."""
    return SourceProfile(
        exchange=ExchangeId.DELTA,
        normalizer=SymbolNormalizer(["USDT", "USD"]),
        rate_scale=Decimal("1"),
        label="Delta Exchange",
    )


@pytest.fixture
def engine(binance_profile: SourceProfile, delta_profile: SourceProfile) -> ComparisonEngine:
    return ComparisonEngine(binance_profile, delta_profile)
