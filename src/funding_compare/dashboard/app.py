"""FastAPI dashboard application factory (JSON API only)."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from fastapi import FastAPI

from funding_compare.dashboard.routes import api


def create_dashboard_app(lifespan: Any = None) -> FastAPI:
    """Create and configure the FastAPI dashboard application.

    Args:
        lifespan: Optional async context manager for application lifespan events.
                  Used by main.py to start and stop the refresh loop.

    Returns:
        FastAPI application exposing the comparison under ``/api``. Route
        handlers read ``app.state.orchestrator``, ``app.state.top_n`` and
        ``app.state.materiality_threshold``.
    """
    app = FastAPI(
        title="Funding Rate Compare",
        lifespan=lifespan,
    )
    app.state.top_n = 5
    app.state.materiality_threshold = Decimal("0.01")
    app.include_router(api.router, prefix="/api")
    return app
