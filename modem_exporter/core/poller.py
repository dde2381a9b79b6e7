"""Background polling loop with exponential backoff.

State machine:

    IDLE -> FETCHING -> UPDATING    -> IDLE   (next poll after base interval)
                     -> BACKING_OFF -> IDLE   (next poll after backoff delay)

Every fetch or parse failure is retryable. A modem that never recovers
shows up as a permanently failing exporter_up metric, not as a dead process.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from ..const import MAX_BACKOFF_EXPONENT
from .exceptions import ClientError, ParseError

if TYPE_CHECKING:
    from .client import ModemClient
    from .registry import MetricRegistry
    from .types import RawPayload, StatSnapshot

_LOGGER = logging.getLogger(__name__)


class PollerState(Enum):
    """Poller lifecycle state."""

    IDLE = "idle"
    FETCHING = "fetching"
    UPDATING = "updating"
    BACKING_OFF = "backing_off"


@dataclass(frozen=True)
class BackoffPolicy:
    """Delay before the next poll given the consecutive failure count.

    delay = min(base_interval * 2 ** min(failures, max_exponent), max_backoff)
    """

    base_interval: float
    max_backoff: float
    max_exponent: int = MAX_BACKOFF_EXPONENT

    def delay(self, consecutive_failures: int) -> float:
        """Return seconds to wait before the next attempt."""
        if consecutive_failures <= 0:
            return self.base_interval
        exponent = min(consecutive_failures, self.max_exponent)
        return min(self.base_interval * 2**exponent, self.max_backoff)


class Poller:
    """Fetch, parse and publish modem status on a schedule."""

    def __init__(
        self,
        client: ModemClient,
        parse: Callable[[RawPayload], StatSnapshot],
        registry: MetricRegistry,
        backoff: BackoffPolicy,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the poller.

        Args:
            client: Source of raw payloads
            parse: Payload to snapshot function for the configured family
            registry: Destination of snapshots and failures
            backoff: Delay policy
            clock: Monotonic clock, used for cycle duration logging
        """
        self._client = client
        self._parse = parse
        self._registry = registry
        self.backoff = backoff
        self._clock = clock
        self.state = PollerState.IDLE
        self.consecutive_failures = 0

    def run_once(self) -> float:
        """Run one poll cycle and return the delay before the next one."""
        started = self._clock()
        self.state = PollerState.FETCHING
        try:
            payload = self._client.fetch_status()
            snapshot = self._parse(payload)
        except (ClientError, ParseError) as err:
            return self._back_off(err)
        except Exception as err:
            _LOGGER.exception("Unexpected error during poll")
            return self._back_off(err)

        self.state = PollerState.UPDATING
        self._registry.update(snapshot)
        if self.consecutive_failures:
            _LOGGER.info("Modem poll recovered after %d failures", self.consecutive_failures)
        self.consecutive_failures = 0
        self.state = PollerState.IDLE
        _LOGGER.debug("Poll succeeded in %.2fs (%d samples)", self._clock() - started, len(snapshot.samples))
        return self.backoff.delay(0)

    def _back_off(self, error: Exception) -> float:
        self.state = PollerState.BACKING_OFF
        self._registry.record_failure(error)
        self.consecutive_failures += 1
        delay = self.backoff.delay(self.consecutive_failures)
        _LOGGER.warning(
            "Modem poll failed (%s: %s), %d consecutive failures, next attempt in %.0fs",
            type(error).__name__,
            error,
            self.consecutive_failures,
            delay,
        )
        self.state = PollerState.IDLE
        return delay

    def run(self, stop_event: threading.Event) -> None:
        """Poll until ``stop_event`` is set; the first poll runs immediately."""
        _LOGGER.info("Poller started (interval %.0fs)", self.backoff.base_interval)
        while not stop_event.is_set():
            delay = self.run_once()
            if stop_event.wait(delay):
                break
        _LOGGER.info("Poller stopped")

    def start(self, stop_event: threading.Event) -> threading.Thread:
        """Run the poll loop in a background thread."""
        thread = threading.Thread(target=self.run, args=(stop_event,), name="modem-poller", daemon=True)
        thread.start()
        return thread
