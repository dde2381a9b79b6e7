"""Data model shared by the client, parsers, registry and exposition server."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType


class DeviceFamily(str, Enum):
    """Supported device families.

    The family is a configuration input. It selects the driver used to log in
    and fetch status pages, and the parser that maps those pages onto the
    family's fixed metric schema.
    """

    HUAWEI_HILINK = "huawei_hilink"
    """Huawei HiLink LTE modems (E3372h, B535, ...): XML API under /api/."""

    ARRIS_SURFBOARD = "arris_surfboard"
    """ARRIS SURFboard cable modems (SB8200, SB6183): HTML status pages."""

    TMOBILE_GATEWAY = "tmobile_gateway"
    """T-Mobile 5G home internet gateways: JSON TMI API."""


class PayloadKind(str, Enum):
    """Content kind of a raw status payload."""

    XML = "xml"
    HTML = "html"
    JSON = "json"


@dataclass(frozen=True)
class RawPayload:
    """Status documents fetched from the modem in one poll.

    Attributes:
        kind: Content kind, must match what the family's parser expects
        resources: Raw response bodies keyed by request path
    """

    kind: PayloadKind
    resources: Mapping[str, bytes]

    def __post_init__(self) -> None:
        object.__setattr__(self, "resources", MappingProxyType(dict(self.resources)))


@dataclass(frozen=True)
class MetricSample:
    """One exposition sample: metric name, sorted label pairs, value."""

    name: str
    value: float
    labels: tuple[tuple[str, str], ...] = ()

    @classmethod
    def of(cls, name: str, value: float, **labels: str) -> MetricSample:
        """Build a sample with labels given as keyword arguments."""
        return cls(name=name, value=float(value), labels=tuple(sorted(labels.items())))


@dataclass(frozen=True)
class StatSnapshot:
    """One immutable, fully-populated capture of device statistics.

    Parsers either build a complete snapshot or raise a ParseError; there is
    no partially populated snapshot.
    """

    family: DeviceFamily
    captured_at: float
    samples: tuple[MetricSample, ...]
    device_info: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "samples", tuple(self.samples))
        object.__setattr__(self, "device_info", MappingProxyType(dict(self.device_info)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StatSnapshot):
            return NotImplemented
        return (
            self.family == other.family
            and self.captured_at == other.captured_at
            and self.samples == other.samples
            and dict(self.device_info) == dict(other.device_info)
        )

    def __hash__(self) -> int:
        return hash((self.family, self.captured_at, self.samples, tuple(sorted(self.device_info.items()))))

    def get(self, name: str, **labels: str) -> float | None:
        """Return the value of the sample with this name and exact labels."""
        wanted = tuple(sorted(labels.items()))
        for sample in self.samples:
            if sample.name == name and sample.labels == wanted:
                return sample.value
        return None
