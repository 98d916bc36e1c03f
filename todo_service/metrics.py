"""
Todo Service - Request Metrics
===============================

What:  Prometheus instruments observed by the request pipeline.
How:   One Metrics value is built at startup and handed to TodoService.
       Instruments live in a private CollectorRegistry, so each Metrics value
       is independent (tests build as many as they like).
Who:   Written by TodoService in its per-request finalizer; read only by the
       Prometheus scrape listener started with `serve()`.

Instruments:
    todo_service_http_errors_count             counter, non-2xx requests
    todo_service_http_request_count            counter, all requests
    todo_service_http_request_duration_seconds histogram, label `status`

    Quantiles (p50/p90/p99) are computed at query time with
    histogram_quantile() over the duration buckets.
"""

import logging
from typing import Optional

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
    start_http_server,
)

logger = logging.getLogger(__name__)

NAMESPACE = "todo_service"
SUBSYSTEM = "http"


class Metrics:
    """
    Request counters and duration distribution for the HTTP handlers.

    All instruments are thread-safe accumulators; there is no read API for
    the handlers.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or CollectorRegistry()
        self._server = None
        self._thread = None

        self.errors_count = Counter(
            "errors_count",
            "The total number of HTTP errors",
            namespace=NAMESPACE,
            subsystem=SUBSYSTEM,
            registry=self.registry,
        )
        self.request_count = Counter(
            "request_count",
            "The total number of HTTP requests",
            namespace=NAMESPACE,
            subsystem=SUBSYSTEM,
            registry=self.registry,
        )
        self.request_duration = Histogram(
            "request_duration_seconds",
            "HTTP request duration by final status code",
            ["status"],
            namespace=NAMESPACE,
            subsystem=SUBSYSTEM,
            registry=self.registry,
        )

    def inc_error(self) -> None:
        self.errors_count.inc()

    def inc_request(self) -> None:
        self.request_count.inc()

    def observe_request(self, seconds: float, status: int) -> None:
        self.request_duration.labels(status=str(status)).observe(seconds)

    def render(self) -> bytes:
        """Current exposition text, as served on the metrics listener."""
        return generate_latest(self.registry)

    # ── Exposition Listener ───────────────────────────────────────────────

    def serve(self, host: str, port: int) -> None:
        """Start the pull-based exposition listener in a daemon thread."""
        if self._server is not None:
            return
        self._server, self._thread = start_http_server(port, addr=host, registry=self.registry)
        logger.info("Metrics listening on %s:%d", host, port)

    def shutdown(self) -> None:
        if self._server is None:
            return
        self._server.shutdown()
        self._server.server_close()
        self._thread.join(timeout=5)
        self._server = None
        self._thread = None
        logger.info("Metrics listener stopped")
