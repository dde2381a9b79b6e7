"""Status parsers, one per device family.

The set of families is closed; the configured DeviceFamily picks the parser.
"""

from __future__ import annotations

from ..core.types import DeviceFamily, RawPayload, StatSnapshot
from .base_parser import ModemParser
from .hilink import HiLinkParser
from .surfboard import SurfboardParser
from .tmi import TMobileGatewayParser

__all__ = [
    "HiLinkParser",
    "ModemParser",
    "SurfboardParser",
    "TMobileGatewayParser",
    "get_parser",
    "parse",
]

_PARSERS: dict[DeviceFamily, type[ModemParser]] = {
    DeviceFamily.HUAWEI_HILINK: HiLinkParser,
    DeviceFamily.ARRIS_SURFBOARD: SurfboardParser,
    DeviceFamily.TMOBILE_GATEWAY: TMobileGatewayParser,
}


def get_parser(family: DeviceFamily) -> ModemParser:
    """Return the parser for a device family."""
    try:
        return _PARSERS[family]()
    except KeyError:
        raise ValueError(f"Unsupported device family: {family}") from None


def parse(payload: RawPayload, family: DeviceFamily, captured_at: float | None = None) -> StatSnapshot:
    """Parse a raw payload with the family's parser."""
    return get_parser(family).parse(payload, captured_at)
