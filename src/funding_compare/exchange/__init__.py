"""Exchange client layer -- raw funding endpoints via ccxt."""

from funding_compare.exchange.binance_client import BinanceClient
from funding_compare.exchange.client import SourceClient
from funding_compare.exchange.delta_client import DeltaClient

__all__ = ["BinanceClient", "DeltaClient", "SourceClient"]
