"""FastAPI application factory.

``create_app`` builds a fully configured ``FastAPI`` instance with:

* CORS middleware
* Request-logging / exception-handling middleware
* Claims-review routes
* An isolated entity store and the workflow engine bound to it
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from claims_review.api.middleware import ExceptionHandlerMiddleware, RequestLoggingMiddleware
from claims_review.api.routes.claims import router as claims_router
from claims_review.core.store import ClaimStore
from claims_review.core.workflow import ClaimWorkflow
from claims_review.logging.setup import setup_logging

if TYPE_CHECKING:
    from omegaconf import DictConfig


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle for the FastAPI application."""
    store: ClaimStore = app.state.store
    logger.info(
        "Application startup complete, {n} claims loaded",
        n=len(store.list_claims()),
    )
    yield
    logger.info("Application shutting down")


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

def create_app(cfg: DictConfig, store: ClaimStore | None = None) -> FastAPI:
    """Build and return a fully configured :class:`FastAPI` application.

    Parameters
    ----------
    cfg:
        The merged Hydra configuration.
    store:
        Optional pre-built store (tests inject their own); otherwise a new
        one is created and seeded according to ``cfg.store.seed_on_startup``.

    Returns
    -------
    FastAPI
        Ready-to-run application instance.
    """
    # ── Logging ──────────────────────────────────────────────────────────
    setup_logging(cfg.logging)

    # ── App ──────────────────────────────────────────────────────────────
    app = FastAPI(
        title="Claims Review Dashboard API",
        description="Review AI-assessed vehicle-damage claims and route them to repair shops",
        version="1.0.0",
        lifespan=_lifespan,
    )

    # Store config in app state for access in lifespan & routes
    app.state.cfg = cfg

    # ── Store & workflow ─────────────────────────────────────────────────
    if store is None:
        store = ClaimStore(seed=bool(cfg.store.seed_on_startup))
    app.state.store = store
    app.state.workflow = ClaimWorkflow(store)
    logger.info("Workflow engine registered (default actor: {actor})", actor=cfg.workflow.default_actor)

    # ── CORS ─────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cfg.server.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Custom middleware (outermost = first to run) ─────────────────────
    app.add_middleware(ExceptionHandlerMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    # ── Routes ───────────────────────────────────────────────────────────
    app.include_router(claims_router, prefix="/api/v1")

    return app
