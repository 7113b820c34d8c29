"""Entry point for the funding rate comparison service.

Wires both sources, the comparison engine and the refresh orchestrator, then
either serves the JSON dashboard (default) or runs the refresh loop headless.
When the dashboard is enabled, the refresh loop and uvicorn share a single
asyncio event loop via FastAPI's lifespan context manager.

Component wiring order (in build_components):
1. BinanceClient + BinanceAdapter (side A)
2. DeltaClient + SettlementSchedule + DeltaAdapter (side B)
3. SourceProfiles (symbol suffixes and rate scales per side)
4. ComparisonEngine
5. RefreshOrchestrator
"""

import asyncio
import signal
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from funding_compare.config import AppSettings
from funding_compare.exchange.binance_client import BinanceClient
from funding_compare.exchange.delta_client import DeltaClient
from funding_compare.logging import get_logger, setup_logging
from funding_compare.market_data.binance_adapter import BinanceAdapter
from funding_compare.market_data.comparison_engine import ComparisonEngine, SourceProfile
from funding_compare.market_data.delta_adapter import DeltaAdapter
from funding_compare.market_data.settlement import SettlementSchedule
from funding_compare.market_data.symbols import SymbolNormalizer
from funding_compare.models import ExchangeId
from funding_compare.orchestrator import RefreshOrchestrator


def build_components(settings: AppSettings) -> RefreshOrchestrator:
    """Build the refresh pipeline from settings.

    Does not perform any network I/O; the first fetch happens on the first
    refresh cycle.

    Raises:
        ValueError: If the Delta settlement table is invalid.
    """
    binance_adapter = BinanceAdapter(
        BinanceClient(settings.binance),
        perpetual_suffixes=settings.binance.perpetual_suffixes,
        fallback_interval_hours=settings.binance.fallback_interval_hours,
    )

    delta_adapter = DeltaAdapter(
        DeltaClient(settings.delta),
        schedule=SettlementSchedule(settings.delta.settlement_hours),
    )

    engine = ComparisonEngine(
        profile_a=SourceProfile(
            exchange=ExchangeId.BINANCE,
            normalizer=SymbolNormalizer(settings.binance.perpetual_suffixes),
            rate_scale=settings.binance.rate_scale,
            label="Binance",
        ),
        profile_b=SourceProfile(
            exchange=ExchangeId.DELTA,
            normalizer=SymbolNormalizer(settings.delta.symbol_suffixes),
            rate_scale=settings.delta.rate_scale,
            label="Delta Exchange",
        ),
    )

    return RefreshOrchestrator(
        source_a=binance_adapter,
        source_b=delta_adapter,
        engine=engine,
        materiality_threshold=settings.comparison.materiality_threshold,
        refresh_interval=settings.dashboard.refresh_interval,
    )


def _setup_signal_handlers(orchestrator: RefreshOrchestrator) -> None:
    """SIGINT/SIGTERM stop the refresh loop. Needs a running event loop."""
    logger = get_logger("funding_compare.main")
    loop = asyncio.get_running_loop()

    def _graceful_handler() -> None:
        logger.info("graceful_shutdown_signal")
        asyncio.create_task(orchestrator.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _graceful_handler)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the refresh loop with the server and tear it down on shutdown."""
    logger = get_logger("funding_compare.main")
    orchestrator: RefreshOrchestrator = app.state.orchestrator

    await orchestrator.start()
    logger.info("lifespan_started")

    yield

    await orchestrator.close()
    logger.info("funding_compare_stopped")


async def run() -> None:
    """Run the service.

    With DASHBOARD_ENABLED=true (the default) uvicorn serves the JSON API and
    the lifespan owns the refresh loop. Otherwise the loop runs headless
    until SIGINT/SIGTERM, logging each cycle's outcome.
    """
    settings = AppSettings()

    setup_logging(settings.log_level)
    logger = get_logger("funding_compare.main")

    orchestrator = build_components(settings)

    if settings.dashboard.enabled:
        from funding_compare.dashboard.app import create_dashboard_app

        app = create_dashboard_app(lifespan=lifespan)
        app.state.orchestrator = orchestrator
        app.state.top_n = settings.comparison.top_n
        app.state.materiality_threshold = settings.comparison.materiality_threshold

        logger.info(
            "starting_with_dashboard",
            host=settings.dashboard.host,
            port=settings.dashboard.port,
            refresh_interval=settings.dashboard.refresh_interval,
        )

        config = uvicorn.Config(
            app,
            host=settings.dashboard.host,
            port=settings.dashboard.port,
            log_level="warning",  # Suppress uvicorn access logs
        )
        server = uvicorn.Server(config)
        await server.serve()
    else:
        _setup_signal_handlers(orchestrator)
        logger.info(
            "starting_without_dashboard",
            refresh_interval=settings.dashboard.refresh_interval,
        )
        try:
            await orchestrator.start()
            await orchestrator.wait()
        finally:
            await orchestrator.close()
            logger.info("funding_compare_stopped")


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
