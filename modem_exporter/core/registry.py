"""Concurrency-safe store of the latest snapshot and exporter health.

One writer (the poller) and many readers (scrape handlers). State is an
immutable RegistrySnapshot; writers build a replacement and swap the
reference, readers take the current reference and render it without holding
any lock. A reader therefore sees a state from fully before or fully after
any update, never a mix.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, replace

from .types import StatSnapshot

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExporterHealth:
    """Poll outcome bookkeeping exposed as self-health metrics."""

    consecutive_failures: int = 0
    last_success: float | None = None
    last_error: str | None = None
    last_error_type: str | None = None
    total_polls: int = 0
    total_failures: int = 0


@dataclass(frozen=True)
class RegistrySnapshot:
    """Self-consistent view of the registry for rendering."""

    latest: StatSnapshot | None
    health: ExporterHealth

    @property
    def up(self) -> bool:
        """True when device data exists and the most recent poll succeeded."""
        return self.latest is not None and self.health.consecutive_failures == 0


class MetricRegistry:
    """Copy-on-write holder of ``{latest, health}``."""

    def __init__(self, clock: Callable[[], float] = time.time):
        """Initialize an empty registry.

        Args:
            clock: Wall clock used for the last-success timestamp
        """
        self._clock = clock
        self._lock = threading.Lock()
        self._state = RegistrySnapshot(latest=None, health=ExporterHealth())

    def update(self, snapshot: StatSnapshot) -> None:
        """Publish a new snapshot and mark the poll successful."""
        now = self._clock()
        with self._lock:
            health = replace(
                self._state.health,
                consecutive_failures=0,
                last_success=now,
                total_polls=self._state.health.total_polls + 1,
            )
            self._state = RegistrySnapshot(latest=snapshot, health=health)

    def record_failure(self, error: Exception) -> None:
        """Record a failed poll; the last good snapshot stays published."""
        with self._lock:
            previous = self._state.health
            health = replace(
                previous,
                consecutive_failures=previous.consecutive_failures + 1,
                last_error=str(error) or type(error).__name__,
                last_error_type=type(error).__name__,
                total_polls=previous.total_polls + 1,
                total_failures=previous.total_failures + 1,
            )
            self._state = RegistrySnapshot(latest=self._state.latest, health=health)
            failures = health.consecutive_failures
        _LOGGER.debug("Recorded failure #%d: %s", failures, error)

    def read(self) -> RegistrySnapshot:
        """Return the current immutable state."""
        with self._lock:
            return self._state
