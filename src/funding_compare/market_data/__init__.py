"""Market data layer -- source adapters, settlement schedules, symbol matching and comparison."""

from funding_compare.market_data.binance_adapter import BinanceAdapter
from funding_compare.market_data.comparison_engine import ComparisonEngine, SourceProfile
from funding_compare.market_data.delta_adapter import DeltaAdapter
from funding_compare.market_data.settlement import SettlementSchedule
from funding_compare.market_data.source_adapter import SourceAdapter
from funding_compare.market_data.symbols import SymbolNormalizer

__all__ = [
    "BinanceAdapter",
    "ComparisonEngine",
    "DeltaAdapter",
    "SettlementSchedule",
    "SourceAdapter",
    "SourceProfile",
    "SymbolNormalizer",
]
