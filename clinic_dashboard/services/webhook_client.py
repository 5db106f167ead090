"""HTTP client for the automation webhook.

All remote writes, the AI prompt panel and the login/registration flows go
through one mechanism: a JSON ``POST`` whose ``tag`` field tells the remote
automation which operation is meant. Any non-2xx status is a failure.

Calls are never retried: a failure is reported to the user, who retries
by hand.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any

import httpx

from clinic_dashboard.config import WEBHOOK_TIMEOUT_SECONDS
from clinic_dashboard.services.metrics import metrics

logger = logging.getLogger(__name__)


class WebhookError(Exception):
    """Raised when a webhook call fails (non-2xx status or network error)."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class WebhookClient:
    """Posts tagged JSON envelopes to a webhook URL.

    The URL is passed per call because the settings screen can change it at
    any time.
    """

    def __init__(self, *, timeout: float | None = WEBHOOK_TIMEOUT_SECONDS):
        self._client = httpx.Client(
            headers={"Content-Type": "application/json"},
            timeout=timeout,
        )

    def post(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Send *payload* to *url* and return the decoded JSON body.

        Bodies that are empty or not JSON decode to ``{}``: most automation
        flows answer a plain ``200 OK``.
        """
        tag = str(payload.get("tag", "unknown"))
        started = time.monotonic()
        try:
            response = self._client.post(url, json=payload)
        except httpx.HTTPError as exc:
            elapsed = (time.monotonic() - started) * 1000
            metrics.record_call(tag, ok=False, latency_ms=elapsed, error_type=type(exc).__name__)
            logger.warning("Webhook %s failed: %s", tag, exc)
            raise WebhookError(f"Falha de rede ao contatar o webhook: {exc}") from exc

        elapsed = (time.monotonic() - started) * 1000
        if not 200 <= response.status_code < 300:
            metrics.record_call(
                tag, ok=False, latency_ms=elapsed, error_type=f"http_{response.status_code}",
            )
            logger.warning("Webhook %s returned status %d", tag, response.status_code)
            raise WebhookError(
                f"Webhook retornou status {response.status_code}",
                status_code=response.status_code,
            )

        metrics.record_call(tag, ok=True, latency_ms=elapsed)
        logger.info("Webhook %s ok (%.0fms)", tag, elapsed)
        if not response.content:
            return {}
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    @property
    def closed(self) -> bool:
        return self._client.is_closed

    def close(self) -> None:
        self._client.close()


# ── Module-level singleton (thread-safe) ────────────────────────────
_client: WebhookClient | None = None
_client_lock = threading.Lock()


def get_webhook_client() -> WebhookClient:
    """Return the shared :class:`WebhookClient`, creating it on first use or once closed."""
    global _client
    if _client is None or _client.closed:
        with _client_lock:
            if _client is None or _client.closed:
                _client = WebhookClient()
    return _client
