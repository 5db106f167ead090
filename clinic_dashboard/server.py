"""FastAPI server for the Clinic Dashboard.

Run with:
    uvicorn clinic_dashboard.server:app --reload --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from clinic_dashboard.api.appointment_routes import router as appointment_router
from clinic_dashboard.api.catalog_routes import router as catalog_router
from clinic_dashboard.api.routes import router
from clinic_dashboard.config import CORS_ORIGINS, SERVER_HOST, SERVER_PORT
from clinic_dashboard.services.metrics import metrics
from clinic_dashboard.services.store import DashboardStore
from clinic_dashboard.services.webhook_client import get_webhook_client

# ── Logging ──────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan: initialise / tear-down shared resources ────────────────
@asynccontextmanager
async def lifespan(application: FastAPI):
    """Seed the in-memory store and open the webhook client.

    State lives only for the lifetime of the process; a restart starts
    again from the demo data.
    """
    logger.info("Seeding dashboard store…")
    application.state.store = DashboardStore()
    application.state.webhook_client = get_webhook_client()
    logger.info("Dashboard ready.")
    yield
    metrics.flush()
    application.state.webhook_client.close()


# ── FastAPI application ──────────────────────────────────────────────
app = FastAPI(
    title="Clinic Dashboard",
    description=(
        "Multi-clinic management for dental practices: scheduling, "
        "patients, doctors, finance and an AI assistant."
    ),
    version="1.0.0",
    lifespan=lifespan,
)

# ── CORS (the dashboard front end runs on another origin) ───────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request-ID middleware ────────────────────────────────────────────
@app.middleware("http")
async def add_request_id(request: Request, call_next) -> Response:
    """Attach a request ID (``X-Request-ID``) to every request and response."""
    request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
    request.state.request_id = request_id
    logger.info(
        "[%s] %s %s", request_id, request.method, request.url.path,
    )
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# ── Register routes ──────────────────────────────────────────────────
app.include_router(router, prefix="/api")
app.include_router(catalog_router, prefix="/api")
app.include_router(appointment_router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "service": "Clinic Dashboard",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/health",
    }


# ── CLI entry point ──────────────────────────────────────────────────

if __name__ == "__main__":
    logger.info("Starting Clinic Dashboard API on %s:%d", SERVER_HOST, SERVER_PORT)
    uvicorn.run(
        "clinic_dashboard.server:app",
        host=SERVER_HOST,
        port=SERVER_PORT,
        reload=True,
    )
