"""Configuration system using pydantic-settings with environment variable loading."""

from decimal import Decimal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BinanceSettings(BaseSettings):
    """Binance USD-M futures source (side A of every comparison)."""

    model_config = SettingsConfigDict(env_prefix="BINANCE_")

    perpetual_suffixes: list[str] = ["USDT", "BUSD"]  # most specific first
    rate_scale: Decimal = Decimal("100")  # native unit is a fraction
    fallback_interval_hours: int = 8  # used when nextFundingTime is missing
    timeout_ms: int = 10000


class DeltaSettings(BaseSettings):
    """Delta Exchange India source (side B of every comparison)."""

    model_config = SettingsConfigDict(env_prefix="DELTA_")

    api_url: str = "https://api.india.delta.exchange"
    contract_types: str = "perpetual_futures"
    symbol_suffixes: list[str] = ["USDT", "USD"]  # most specific first
    rate_scale: Decimal = Decimal("1")  # already a percentage
    settlement_hours: list[float] = [0, 8, 16]  # UTC
    timeout_ms: int = 10000


class ComparisonSettings(BaseSettings):
    """Spread ranking and summary parameters."""

    model_config = SettingsConfigDict(env_prefix="COMPARISON_")

    materiality_threshold: Decimal = Decimal("0.01")  # percentage points
    top_n: int = 5


class DashboardSettings(BaseSettings):
    """Dashboard server configuration."""

    model_config = SettingsConfigDict(env_prefix="DASHBOARD_")

    host: str = "0.0.0.0"
    port: int = 8080
    enabled: bool = True
    refresh_interval: float = 60.0  # seconds between refresh cycles


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings.

    Sub-settings are built when ``AppSettings`` is instantiated, so their
    prefixed environment variables (``COMPARISON_TOP_N``) are read at that
    point. Only the root reads ``.env``; there, nested values use the ``__``
    delimiter (``COMPARISON__TOP_N=3``).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    binance: BinanceSettings = Field(default_factory=BinanceSettings)
    delta: DeltaSettings = Field(default_factory=DeltaSettings)
    comparison: ComparisonSettings = Field(default_factory=ComparisonSettings)
    dashboard: DashboardSettings = Field(default_factory=DashboardSettings)
