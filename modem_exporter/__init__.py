"""Prometheus exporter for consumer modem status pages."""

from __future__ import annotations

from .const import VERSION

__version__ = VERSION
