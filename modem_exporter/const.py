"""Constants for the modem exporter."""

from __future__ import annotations

VERSION = "0.1.0"

# Network retries inside one poll; the poller's backoff handles the rest
NETWORK_RETRIES = 2
RETRY_DELAY = 1.0

# Backoff doubles at most this many times before max_backoff applies
MAX_BACKOFF_EXPONENT = 6

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
