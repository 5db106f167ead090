"""CloudWatch custom metrics for outbound webhook calls.

Every webhook POST produces one ``Webhook/Calls`` data point dimensioned by
the payload ``tag`` and its outcome, plus a ``Webhook/Latency`` point when
the call got far enough to be timed. Failed calls also carry the error kind
(``http_502``, ``ConnectError``, ...) as a dimension of ``Webhook/Errors``.

Data points are buffered in memory. With metrics enabled a daemon thread
ships the buffer every ``FLUSH_INTERVAL_SECONDS`` and once more at process
exit; otherwise the buffer is only drained and logged at DEBUG level.

Usage
-----
>>> from clinic_dashboard.services.metrics import metrics
>>> metrics.record_call("paciente", ok=True, latency_ms=84.2)
>>> metrics.record_call("aiia_ia", ok=False, latency_ms=310.0, error_type="http_502")
"""

from __future__ import annotations

import atexit
import logging
import os
import threading
import time
from datetime import UTC, datetime
from typing import Any

logger = logging.getLogger(__name__)

NAMESPACE = "ClinicDashboard"
FLUSH_INTERVAL_SECONDS = 60
MAX_BATCH_SIZE = 1_000  # PutMetricData limit per call


def _enabled_from_env() -> bool:
    return os.getenv("METRICS_ENABLED", "false").strip().lower() in ("1", "true", "yes")


class MetricsClient:
    """Collects webhook call metrics and ships them to CloudWatch."""

    def __init__(self, enabled: bool | None = None, *, background: bool = True) -> None:
        self.enabled = _enabled_from_env() if enabled is None else enabled
        self._pending: list[dict[str, Any]] = []
        self._lock = threading.Lock()
        self._cloudwatch = None

        if self.enabled and background:
            self._start_background_flush()

    @property
    def pending(self) -> list[dict[str, Any]]:
        """A copy of the buffered, not yet shipped data points."""
        with self._lock:
            return list(self._pending)

    def record_call(
        self,
        tag: str,
        *,
        ok: bool,
        latency_ms: float = 0.0,
        error_type: str | None = None,
    ) -> None:
        now = datetime.now(UTC)
        outcome = "success" if ok else "failure"
        points = [_datum("Webhook/Calls", now, 1, "Count", Tag=tag, Outcome=outcome)]
        if latency_ms > 0:
            points.append(_datum("Webhook/Latency", now, latency_ms, "Milliseconds", Tag=tag))
        if not ok:
            points.append(
                _datum("Webhook/Errors", now, 1, "Count", Tag=tag, ErrorType=error_type or "unknown")
            )
        with self._lock:
            self._pending.extend(points)
        logger.debug("Metric: webhook %s %s (%.1fms)", tag, outcome, latency_ms)

    def flush(self) -> int:
        """Drain the buffer; returns how many data points reached CloudWatch."""
        with self._lock:
            batch, self._pending = self._pending, []
        if not batch:
            return 0
        if not self.enabled:
            logger.debug("Metrics disabled, dropped %d data points", len(batch))
            return 0
        try:
            return self._ship(batch)
        except Exception:
            logger.exception("Failed to ship %d metrics to CloudWatch", len(batch))
            return 0

    # ── Internal ──────────────────────────────────────────────────────

    def _client(self):
        if self._cloudwatch is None:
            import boto3  # noqa: PLC0415: boto3 is an optional extra

            self._cloudwatch = boto3.client("cloudwatch")
        return self._cloudwatch

    def _ship(self, batch: list[dict[str, Any]]) -> int:
        cloudwatch = self._client()
        for start in range(0, len(batch), MAX_BATCH_SIZE):
            cloudwatch.put_metric_data(
                Namespace=NAMESPACE, MetricData=batch[start : start + MAX_BATCH_SIZE],
            )
        logger.info("Shipped %d metrics to CloudWatch", len(batch))
        return len(batch)

    def _start_background_flush(self) -> None:
        def _run() -> None:
            while True:
                time.sleep(FLUSH_INTERVAL_SECONDS)
                self.flush()

        threading.Thread(target=_run, daemon=True, name="metrics-flush").start()
        atexit.register(self.flush)
        logger.info("Metrics enabled; flushing every %ds", FLUSH_INTERVAL_SECONDS)


def _datum(
    name: str, when: datetime, value: float, unit: str, **dimensions: str,
) -> dict[str, Any]:
    return {
        "MetricName": name,
        "Dimensions": [{"Name": key, "Value": val} for key, val in dimensions.items()],
        "Timestamp": when,
        "Value": value,
        "Unit": unit,
    }


metrics = MetricsClient()
