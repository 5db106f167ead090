"""Request-scoped helpers shared by every router."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any, TypeVar

from fastapi import Depends, HTTPException, Request

from clinic_dashboard.domain.models import User
from clinic_dashboard.errors import (
    AccessDeniedError,
    AuthenticationError,
    ConfigurationError,
    FormValidationError,
    NotFoundError,
)
from clinic_dashboard.services.appointments import AppointmentService
from clinic_dashboard.services.assistant import AssistantService
from clinic_dashboard.services.auth import AuthService
from clinic_dashboard.services.catalog import CatalogService
from clinic_dashboard.services.store import DashboardStore
from clinic_dashboard.services.webhook_client import WebhookClient, WebhookError, get_webhook_client

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Known failures and the status each one maps to; the message is user-facing
_STATUS_FOR: tuple[tuple[type[Exception], int], ...] = (
    (FormValidationError, 422),
    (NotFoundError, 404),
    (AccessDeniedError, 403),
    (AuthenticationError, 401),
    (ConfigurationError, 503),
    (WebhookError, 502),
)


def get_store(request: Request) -> DashboardStore:
    """Retrieve the dashboard store from app state (set up in the lifespan)."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(
            status_code=503,
            detail="O serviço ainda está iniciando. Tente novamente em instantes.",
        )
    return store


def require_user(store: DashboardStore = Depends(get_store)) -> User:
    if store.user is None:
        raise HTTPException(status_code=401, detail="Sessão não iniciada.")
    return store.user


async def run_service(request: Request, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run a blocking service call off the event loop and map its errors.

    Service calls may block on the webhook, so they go to the default
    thread pool. Unexpected errors are logged with their traceback and
    reported as a generic 500.
    """
    request_id = getattr(request.state, "request_id", "?")
    try:
        return await asyncio.to_thread(func, *args, **kwargs)
    except HTTPException:
        raise
    except Exception as exc:
        for error_type, status_code in _STATUS_FOR:
            if isinstance(exc, error_type):
                logger.info("[%s] %s: %s", request_id, type(exc).__name__, exc)
                raise HTTPException(status_code=status_code, detail=str(exc)) from exc
        logger.exception("[%s] Error processing request", request_id)
        raise HTTPException(
            status_code=500,
            detail="Ocorreu um erro interno. Tente novamente.",
        ) from exc


def get_client(request: Request) -> WebhookClient:
    client = getattr(request.app.state, "webhook_client", None)
    return client if client is not None else get_webhook_client()


# ── Service factories ────────────────────────────────────────────────


def catalog_service(
    store: DashboardStore = Depends(get_store),
    client: WebhookClient = Depends(get_client),
) -> CatalogService:
    return CatalogService(store, client)


def appointment_service(
    store: DashboardStore = Depends(get_store),
    client: WebhookClient = Depends(get_client),
) -> AppointmentService:
    return AppointmentService(store, client)


def assistant_service(
    store: DashboardStore = Depends(get_store),
    client: WebhookClient = Depends(get_client),
) -> AssistantService:
    return AssistantService(store, client)


def auth_service(client: WebhookClient = Depends(get_client)) -> AuthService:
    return AuthService(client)
