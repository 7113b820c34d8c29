"""Refresh orchestrator -- one fetch/compare/summarize cycle per refresh.

Each cycle:
  1. FETCH: both adapters concurrently; wait for both (barrier)
  2. COMPARE: join on canonical symbol and rank by spread
  3. SUMMARIZE: scalar statistics, None when nothing matched
  4. CLASSIFY: which informational state the presentation layer shows
  5. PUBLISH: replace the previous report wholesale

Cycles share no mutable state. If an older cycle finishes after a newer one
it is discarded instead of published.
"""

import asyncio
import itertools
import time
from decimal import Decimal

from funding_compare.analytics.summary import DEFAULT_MATERIALITY_THRESHOLD, summarize
from funding_compare.logging import bind_cycle, get_logger, unbind_cycle
from funding_compare.market_data.comparison_engine import ComparisonEngine
from funding_compare.market_data.source_adapter import SourceAdapter
from funding_compare.models import RateObservation, RefreshReport, RefreshStatus

logger = get_logger(__name__)


class RefreshOrchestrator:
    """Runs refresh cycles on demand or on a fixed interval.

    Args:
        source_a: Adapter for side A of the comparison.
        source_b: Adapter for side B of the comparison.
        engine: Comparison engine configured with both sides' profiles.
        materiality_threshold: Spread counted as material in summaries.
        refresh_interval: Seconds between cycles when running in the background.
    """

    def __init__(
        self,
        source_a: SourceAdapter,
        source_b: SourceAdapter,
        engine: ComparisonEngine,
        materiality_threshold: Decimal = DEFAULT_MATERIALITY_THRESHOLD,
        refresh_interval: float = 60.0,
    ) -> None:
        self._source_a = source_a
        self._source_b = source_b
        self._engine = engine
        self._threshold = materiality_threshold
        self._refresh_interval = refresh_interval
        self._cycle_ids = itertools.count(1)
        self._latest: RefreshReport | None = None
        self._running = False
        self._task: asyncio.Task | None = None  # type: ignore[type-arg]

    @property
    def engine(self) -> ComparisonEngine:
        return self._engine

    @property
    def latest(self) -> RefreshReport | None:
        """Most recently published report, or None before the first cycle."""
        return self._latest

    @property
    def is_running(self) -> bool:
        return self._running

    async def refresh(self) -> RefreshReport:
        """Run one full cycle and publish its report.

        Never raises for source failures: an adapter that fails contributes
        an empty mapping and the status records it.
        """
        cycle_id = next(self._cycle_ids)
        bind_cycle(cycle_id)
        try:
            started = time.monotonic()
            source_a, source_b = await self._fetch_both()

            result = self._engine.compare(source_a, source_b)
            summary = summarize(result, self._threshold)
            status = RefreshStatus.classify(source_a, source_b, result)

            report = RefreshReport(
                cycle_id=cycle_id,
                source_a=source_a,
                source_b=source_b,
                result=result,
                summary=summary,
                status=status,
                completed_at=int(time.time() * 1000),
            )
            self._publish(report)

            log = logger.info if status is RefreshStatus.OK else logger.warning
            log(
                "refresh_cycle_completed",
                status=status.value,
                message=status.message(
                    self._engine.profile_a.label, self._engine.profile_b.label
                ),
                count_a=len(source_a),
                count_b=len(source_b),
                matched=len(result),
                material=summary.material_count if summary else 0,
                elapsed_ms=round((time.monotonic() - started) * 1000),
            )
            return report
        finally:
            unbind_cycle()

    async def _fetch_both(
        self,
    ) -> tuple[dict[str, RateObservation], dict[str, RateObservation]]:
        """Fan out to both adapters and wait for both, whatever the outcome."""
        results = await asyncio.gather(
            self._source_a.fetch(),
            self._source_b.fetch(),
            return_exceptions=True,
        )
        mappings: list[dict[str, RateObservation]] = []
        for adapter, outcome in zip((self._source_a, self._source_b), results):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                logger.warning(
                    "source_fetch_raised",
                    exchange=adapter.exchange.value,
                    error=repr(outcome),
                )
                mappings.append({})
            else:
                mappings.append(outcome)
        return mappings[0], mappings[1]

    def _publish(self, report: RefreshReport) -> None:
        if self._latest is not None and report.cycle_id < self._latest.cycle_id:
            logger.info(
                "stale_cycle_discarded",
                published_cycle=self._latest.cycle_id,
            )
            return
        self._latest = report

    async def start(self) -> None:
        """Begin refreshing in the background."""
        if self._running:
            logger.warning("refresh_loop_already_running")
            return
        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info("refresh_loop_started", interval=self._refresh_interval)

    async def stop(self) -> None:
        """Stop the background loop gracefully."""
        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("refresh_loop_stopped")

    async def wait(self) -> None:
        """Block until the background loop ends."""
        if self._task is not None:
            try:
                await self._task
            except asyncio.CancelledError:
                pass

    async def close(self) -> None:
        """Stop the loop and release both sources' connections."""
        await self.stop()
        for adapter in (self._source_a, self._source_b):
            try:
                await adapter.close()
            except Exception:
                logger.warning(
                    "source_close_failed",
                    exchange=adapter.exchange.value,
                    exc_info=True,
                )

    async def _run_loop(self) -> None:
        while self._running:
            try:
                await self.refresh()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.warning("refresh_cycle_error", exc_info=True)
            if self._running:
                await asyncio.sleep(self._refresh_interval)
