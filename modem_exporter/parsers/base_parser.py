"""Base class for device family parsers."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Mapping

from ..core.exceptions import MalformedValueError, MissingFieldError, UnexpectedFormatError
from ..core.schema import DESCRIPTORS
from ..core.types import DeviceFamily, MetricSample, PayloadKind, RawPayload, StatSnapshot
from ..lib.utils import extract_float

_LOGGER = logging.getLogger(__name__)


class ModemParser(ABC):
    """Abstract base class for family-specific status parsers.

    Subclasses implement parse_resources(); the base class checks the payload
    kind, validates every sample against the metric schema and stamps the
    snapshot. Parsers are pure: no I/O, no shared state.
    """

    family: DeviceFamily
    payload_kind: PayloadKind

    def parse(self, payload: RawPayload, captured_at: float | None = None) -> StatSnapshot:
        """Parse a raw payload into a fully populated snapshot.

        Args:
            payload: Documents fetched by the family driver
            captured_at: Capture timestamp, defaults to now

        Raises:
            MissingFieldError: A required field is absent
            MalformedValueError: A field cannot be converted to its type
            UnexpectedFormatError: The payload does not match the family template
        """
        if payload.kind != self.payload_kind:
            raise UnexpectedFormatError(
                f"{self.family.value} expects {self.payload_kind.value} payload, got {payload.kind.value}"
            )

        samples, device_info = self.parse_resources(payload.resources)

        for sample in samples:
            if sample.name not in DESCRIPTORS:
                raise ValueError(f"Parser emitted unknown metric {sample.name}")

        _LOGGER.debug("Parsed %d samples for %s", len(samples), self.family.value)
        return StatSnapshot(
            family=self.family,
            captured_at=time.time() if captured_at is None else captured_at,
            samples=tuple(samples),
            device_info=device_info,
        )

    @abstractmethod
    def parse_resources(self, resources: Mapping[str, bytes]) -> tuple[list[MetricSample], dict[str, str]]:
        """Parse modem data from pre-fetched resources.

        Args:
            resources: Dictionary mapping request paths to raw bodies

        Returns:
            Tuple of (samples, device info strings)
        """
        raise NotImplementedError

    @staticmethod
    def require_resource(resources: Mapping[str, bytes], path: str) -> bytes:
        """Return the document fetched from ``path``."""
        body = resources.get(path)
        if body is None:
            raise UnexpectedFormatError(f"Payload has no document for {path}")
        return body

    @staticmethod
    def require_text(value: str | None, field: str) -> str:
        """Return stripped text, treating None and empty text as missing."""
        if value is None or not value.strip():
            raise MissingFieldError(field)
        return value.strip()

    @staticmethod
    def to_int(text: str, field: str) -> int:
        """Convert an integer field, rejecting anything else."""
        try:
            return int(text.strip())
        except ValueError as err:
            raise MalformedValueError(field, text) from err

    @staticmethod
    def to_float(text: str, field: str) -> float:
        """Convert a number with an optional unit suffix (e.g., "-95dBm")."""
        value = extract_float(text)
        if value is None:
            raise MalformedValueError(field, text)
        return value
