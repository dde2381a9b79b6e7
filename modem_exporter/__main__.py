"""Command line entry point.

Usage:
    modem-exporter --config exporter.yaml
    modem-exporter --base-url http://192.168.8.1 --family huawei_hilink

Exit codes:
    0 - graceful shutdown (SIGTERM/SIGINT)
    1 - startup error (invalid configuration, cannot bind)
"""

from __future__ import annotations

import argparse
import functools
import logging
import signal
import sys
import threading

from .config import ExporterConfig, load_config
from .const import LOG_FORMAT, VERSION
from .core.client import ModemClient
from .core.exceptions import StartupError
from .core.poller import BackoffPolicy, Poller
from .core.registry import MetricRegistry
from .core.types import DeviceFamily
from .exposition import ExpositionServer
from .parsers import parse

_LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="modem-exporter",
        description="Expose modem status pages as Prometheus metrics",
    )
    parser.add_argument("--config", help="YAML config file")
    parser.add_argument("--base-url", help="Modem base URL (e.g., http://192.168.8.1)")
    parser.add_argument(
        "--family",
        choices=[family.value for family in DeviceFamily],
        help="Device family of the modem",
    )
    parser.add_argument("--listen-address", help="Metrics server listen address (default: 0.0.0.0)")
    parser.add_argument("--listen-port", type=int, help="Metrics server listen port (default: 9091)")
    parser.add_argument("--poll-interval", type=float, help="Seconds between polls (default: 30)")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    return parser


def setup_logging(level: str) -> None:
    """Configure root logging."""
    logging.basicConfig(level=getattr(logging, level), format=LOG_FORMAT)


def run(config: ExporterConfig, stop_event: threading.Event) -> None:
    """Run the exporter until ``stop_event`` is set.

    Raises:
        BindFailedError: The metrics server cannot bind its address
    """
    registry = MetricRegistry()
    server = ExpositionServer(registry, config.listen_address, config.listen_port)
    server.start()

    client = ModemClient(
        config.base_url,
        config.family,
        username=config.username,
        password=config.password_value(),
        timeout=config.request_timeout,
        session_max_age=config.session_max_age,
        verify_ssl=config.verify_ssl,
    )
    poller = Poller(
        client,
        functools.partial(parse, family=config.family),
        registry,
        BackoffPolicy(config.poll_interval, config.max_backoff),
    )

    _LOGGER.info("Polling %s modem at %s every %.0fs", config.family.value, config.base_url, config.poll_interval)
    poller_thread = poller.start(stop_event)
    try:
        stop_event.wait()
    finally:
        stop_event.set()
        _LOGGER.info("Shutting down")
        server.stop()
        # Best effort: the poller is a daemon thread and is abandoned on exit
        poller_thread.join(timeout=client.max_fetch_duration())
        if poller_thread.is_alive():
            _LOGGER.warning("Poller did not stop in time, exiting anyway")
        client.close()


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, load configuration and run the exporter."""
    args = build_parser().parse_args(argv)
    overrides = {
        "base_url": args.base_url,
        "family": args.family,
        "listen_address": args.listen_address,
        "listen_port": args.listen_port,
        "poll_interval": args.poll_interval,
        "log_level": args.log_level,
    }

    try:
        config = load_config(args.config, overrides=overrides)
    except StartupError as err:
        setup_logging("INFO")
        _LOGGER.error("%s", err)
        return 1

    setup_logging(config.log_level)
    _LOGGER.info("modem-exporter %s starting", VERSION)

    stop_event = threading.Event()

    def handle_signal(signum, frame):
        _LOGGER.info("Received %s", signal.Signals(signum).name)
        stop_event.set()

    signal.signal(signal.SIGTERM, handle_signal)
    signal.signal(signal.SIGINT, handle_signal)

    try:
        run(config, stop_event)
    except StartupError as err:
        _LOGGER.error("%s", err)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
