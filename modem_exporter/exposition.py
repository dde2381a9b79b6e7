"""Prometheus exposition of the registry state.

Each scrape renders one registry read into the text format through
prometheus_client. Rendering never talks to the modem, so a scrape cannot
fail or stall because the modem is down; modem trouble is reported through
the exporter_* health metrics instead.
"""

from __future__ import annotations

import logging
import socket
import threading
from collections.abc import Iterator
from socketserver import ThreadingMixIn
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from prometheus_client import CollectorRegistry, generate_latest, make_wsgi_app
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, InfoMetricFamily, Metric

from .core.exceptions import BindFailedError
from .core.registry import MetricRegistry, RegistrySnapshot
from .core.schema import FAMILY_METRICS, INFO_DOCUMENTATION, INFO_METRIC, MetricType
from .core.types import StatSnapshot

_LOGGER = logging.getLogger(__name__)

DEFAULT_LISTEN_ADDRESS = "0.0.0.0"
DEFAULT_LISTEN_PORT = 9091


def health_families(state: RegistrySnapshot) -> list[Metric]:
    """Build the exporter self-health metrics."""
    health = state.health
    families: list[Metric] = [
        GaugeMetricFamily(
            "exporter_up",
            "Whether device data is present and the last modem poll succeeded",
            value=1 if state.up else 0,
        ),
        GaugeMetricFamily(
            "exporter_consecutive_failures",
            "Number of modem polls that failed in a row",
            value=health.consecutive_failures,
        ),
        GaugeMetricFamily(
            "exporter_last_success_timestamp_seconds",
            "Unix time of the last successful modem poll, 0 if none",
            value=health.last_success or 0,
        ),
        CounterMetricFamily("exporter_polls", "Modem polls attempted", value=health.total_polls),
        CounterMetricFamily("exporter_poll_failures", "Modem polls that failed", value=health.total_failures),
    ]
    if health.last_error is not None:
        families.append(
            InfoMetricFamily(
                "exporter_last_error",
                "Most recent modem poll error",
                value={"type": health.last_error_type or "", "message": health.last_error},
            )
        )
    if state.latest is not None:
        families.append(
            GaugeMetricFamily(
                "exporter_snapshot_timestamp_seconds",
                "Unix time the published device snapshot was captured",
                value=state.latest.captured_at,
            )
        )
    return families


def device_families(snapshot: StatSnapshot) -> list[Metric]:
    """Build the device metrics of one snapshot, in schema order."""
    families: list[Metric] = []
    for descriptor in FAMILY_METRICS[snapshot.family]:
        samples = [s for s in snapshot.samples if s.name == descriptor.name]
        if not samples:
            continue

        labels = list(descriptor.labels)
        family: Metric
        if descriptor.type is MetricType.COUNTER:
            family = CounterMetricFamily(descriptor.name, descriptor.documentation, labels=labels)
        else:
            family = GaugeMetricFamily(descriptor.name, descriptor.documentation, labels=labels)

        for sample in samples:
            sample_labels = dict(sample.labels)
            family.add_metric([sample_labels.get(name, "") for name in labels], sample.value)
        families.append(family)

    families.append(
        InfoMetricFamily(
            INFO_METRIC.removesuffix("_info"),
            INFO_DOCUMENTATION,
            value={"family": snapshot.family.value, **snapshot.device_info},
        )
    )
    return families


class SnapshotCollector:
    """Custom collector: one registry read per collection."""

    def __init__(self, registry: MetricRegistry):
        self._registry = registry

    def describe(self) -> list[Metric]:
        # Nothing to pre-register; avoids a collect() at registration time
        return []

    def collect(self) -> Iterator[Metric]:
        state = self._registry.read()
        yield from health_families(state)
        if state.latest is not None:
            yield from device_families(state.latest)


class _DrainingWSGIServer(ThreadingMixIn, WSGIServer):
    """Thread per request; server_close() waits for in-flight responses."""

    daemon_threads = False
    block_on_close = True


class _DrainingWSGIServerV6(_DrainingWSGIServer):
    address_family = socket.AF_INET6


class _QuietHandler(WSGIRequestHandler):
    """Route per-request access logs to debug logging instead of stderr."""

    def log_message(self, format: str, *args) -> None:  # noqa: A002
        _LOGGER.debug("%s - %s", self.address_string(), format % args)


class ExpositionServer:
    """Serve the registry in Prometheus text format over HTTP."""

    def __init__(
        self,
        registry: MetricRegistry,
        address: str = DEFAULT_LISTEN_ADDRESS,
        port: int = DEFAULT_LISTEN_PORT,
    ):
        """Initialize the server (nothing is bound until start()).

        Args:
            registry: Source of the state rendered on each scrape
            address: Listen address
            port: Listen port, 0 picks a free port
        """
        self.address = address
        self.port = port
        self._metrics = CollectorRegistry(auto_describe=False)
        self._metrics.register(SnapshotCollector(registry))
        self._app = make_wsgi_app(self._metrics)
        self._httpd: WSGIServer | None = None
        self._thread: threading.Thread | None = None

    def handle_scrape(self) -> bytes:
        """Render the current registry state."""
        return generate_latest(self._metrics)

    def start(self) -> None:
        """Bind the listen socket and serve in a background thread.

        Raises:
            BindFailedError: The address cannot be bound
        """
        server_class = _DrainingWSGIServerV6 if ":" in self.address else _DrainingWSGIServer
        try:
            self._httpd = make_server(
                self.address, self.port, self._app, server_class=server_class, handler_class=_QuietHandler
            )
        except OSError as err:
            raise BindFailedError(self.address, self.port, err.strerror or str(err)) from err

        self.port = self._httpd.server_port
        self._thread = threading.Thread(target=self._httpd.serve_forever, name="exposition-server", daemon=True)
        self._thread.start()
        _LOGGER.info("Serving metrics on http://%s:%d/metrics", self.address, self.port)

    def stop(self) -> None:
        """Stop accepting scrapes and wait for in-flight responses."""
        if self._httpd is None:
            return
        self._httpd.shutdown()
        self._httpd.server_close()
        if self._thread is not None:
            self._thread.join()
        self._httpd = None
        self._thread = None
        _LOGGER.info("Metrics server stopped")
