"""JSON API over the latest refresh report.

Every data route answers 503 ``{"status": "pending"}`` until the first cycle
has been published. Decimals are serialized as strings.
"""

from __future__ import annotations

import time
from decimal import Decimal
from typing import Any

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from funding_compare.market_data.settlement import seconds_until
from funding_compare.models import (
    ExchangeId,
    MatchedPair,
    RankedObservation,
    RefreshReport,
    SummaryStatistics,
)
from funding_compare.orchestrator import RefreshOrchestrator

log = structlog.get_logger(__name__)

router = APIRouter()


def _decimal_to_str(obj: Any) -> Any:
    """Recursively convert Decimal values to strings for JSON serialization."""
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, dict):
        return {k: _decimal_to_str(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_decimal_to_str(item) for item in obj]
    return obj


def _pending() -> JSONResponse:
    return JSONResponse(status_code=503, content={"status": "pending"})


def _pair_to_dict(pair: MatchedPair, threshold: Decimal, now_ms: int) -> dict:
    return {
        "symbol": pair.canonical_symbol,
        "source_a_symbol": pair.source_a_symbol,
        "source_b_symbol": pair.source_b_symbol,
        "rate_a": pair.rate_a,
        "rate_b": pair.rate_b,
        "difference": pair.difference,
        "is_material": pair.is_material(threshold),
        "next_settlement_a": pair.next_settlement_a,
        "next_settlement_b": pair.next_settlement_b,
        "seconds_until_a": seconds_until(pair.next_settlement_a, now_ms),
        "seconds_until_b": seconds_until(pair.next_settlement_b, now_ms),
    }


def _summary_to_dict(summary: SummaryStatistics | None) -> dict | None:
    if summary is None:
        return None
    return {
        "count": summary.count,
        "mean": summary.mean,
        "max": summary.maximum,
        "min": summary.minimum,
        "material_count": summary.material_count,
        "threshold": summary.threshold,
    }


def _ranked_to_dict(row: RankedObservation, now_ms: int) -> dict:
    return {
        "symbol": row.raw_symbol,
        "rate": row.rate,
        "next_settlement": row.next_settlement,
        "seconds_until": seconds_until(row.next_settlement, now_ms),
    }


def _pairs_response(report: RefreshReport, pairs: list[MatchedPair], threshold: Decimal) -> JSONResponse:
    now_ms = int(time.time() * 1000)
    return JSONResponse(
        content=_decimal_to_str({
            "cycle_id": report.cycle_id,
            "status": report.status.value,
            "pairs": [_pair_to_dict(p, threshold, now_ms) for p in pairs],
        })
    )


def _threshold(request: Request) -> Decimal:
    return request.app.state.materiality_threshold


@router.get("/status")
async def get_status(request: Request) -> JSONResponse:
    """Refresh outcome plus per-exchange counts."""
    orchestrator: RefreshOrchestrator = request.app.state.orchestrator
    report = orchestrator.latest
    if report is None:
        return _pending()

    engine = orchestrator.engine
    return JSONResponse(content={
        "cycle_id": report.cycle_id,
        "status": report.status.value,
        "message": report.status.message(engine.profile_a.label, engine.profile_b.label),
        "counts": {
            engine.profile_a.exchange.value: len(report.source_a),
            engine.profile_b.exchange.value: len(report.source_b),
        },
        "matched": len(report.result),
        "completed_at": report.completed_at,
    })


@router.get("/comparison")
async def get_comparison(request: Request) -> JSONResponse:
    """All matched pairs ranked by difference descending."""
    report = request.app.state.orchestrator.latest
    if report is None:
        return _pending()
    return _pairs_response(report, report.result.pairs, _threshold(request))


@router.get("/comparison/top")
async def get_top(request: Request, limit: int | None = None) -> JSONResponse:
    """Largest positive spreads (first ``limit`` of the ranking)."""
    report = request.app.state.orchestrator.latest
    if report is None:
        return _pending()
    n = limit if limit is not None else request.app.state.top_n
    return _pairs_response(report, report.result.top(n), _threshold(request))


@router.get("/comparison/bottom")
async def get_bottom(request: Request, limit: int | None = None) -> JSONResponse:
    """Most negative spreads (last ``limit`` of the ranking, reversed)."""
    report = request.app.state.orchestrator.latest
    if report is None:
        return _pending()
    n = limit if limit is not None else request.app.state.top_n
    return _pairs_response(report, report.result.bottom(n), _threshold(request))


@router.get("/summary")
async def get_summary(request: Request) -> JSONResponse:
    """Summary statistics; ``summary`` is null when nothing matched."""
    report = request.app.state.orchestrator.latest
    if report is None:
        return _pending()
    return JSONResponse(
        content=_decimal_to_str({
            "cycle_id": report.cycle_id,
            "status": report.status.value,
            "summary": _summary_to_dict(report.summary),
        })
    )


@router.get("/exchanges/{exchange}")
async def get_exchange(request: Request, exchange: str) -> JSONResponse:
    """Standalone view of one exchange, rates in percent, highest first."""
    orchestrator: RefreshOrchestrator = request.app.state.orchestrator
    try:
        exchange_id = ExchangeId(exchange.lower())
    except ValueError:
        return JSONResponse(status_code=404, content={"error": f"Unknown exchange: {exchange}"})

    report = orchestrator.latest
    if report is None:
        return _pending()

    engine = orchestrator.engine
    if exchange_id == engine.profile_a.exchange:
        observations = report.source_a
    else:
        observations = report.source_b

    now_ms = int(time.time() * 1000)
    rows = engine.rank_observations(observations, exchange_id)
    return JSONResponse(
        content=_decimal_to_str({
            "cycle_id": report.cycle_id,
            "exchange": exchange_id.value,
            "count": len(rows),
            "rates": [_ranked_to_dict(r, now_ms) for r in rows],
        })
    )


@router.post("/refresh")
async def trigger_refresh(request: Request) -> JSONResponse:
    """Run a refresh cycle now and return its status.

    ``published`` is false when a newer cycle finished first and this
    report was discarded.
    """
    orchestrator: RefreshOrchestrator = request.app.state.orchestrator
    report = await orchestrator.refresh()
    published = orchestrator.latest is report
    log.info(
        "manual_refresh",
        cycle_id=report.cycle_id,
        status=report.status.value,
        published=published,
    )
    engine = orchestrator.engine
    return JSONResponse(content={
        "cycle_id": report.cycle_id,
        "status": report.status.value,
        "message": report.status.message(engine.profile_a.label, engine.profile_b.label),
        "matched": len(report.result),
        "published": published,
    })
