"""Device family drivers.

Each driver implements the login and status-fetch exchange of one device
family. Drivers are selected by the configured DeviceFamily; there is no
auto-detection.

Available drivers:
    HiLinkDriver
        Huawei HiLink LTE modems, XML API with session cookie + CSRF token.

    SurfboardDriver
        ARRIS SURFboard cable modems, HTML pages with optional URL-token auth.

    TMobileGatewayDriver
        T-Mobile 5G gateways, JSON API with optional bearer token.
"""

from __future__ import annotations

from ..core.types import DeviceFamily
from .base import ModemDriver, Session
from .hilink import HiLinkDriver
from .surfboard import SurfboardDriver
from .tmi import TMobileGatewayDriver

__all__ = [
    "DriverFactory",
    "HiLinkDriver",
    "ModemDriver",
    "Session",
    "SurfboardDriver",
    "TMobileGatewayDriver",
]


class DriverFactory:
    """Factory for creating driver instances."""

    _drivers: dict[DeviceFamily, type[ModemDriver]] = {
        DeviceFamily.HUAWEI_HILINK: HiLinkDriver,
        DeviceFamily.ARRIS_SURFBOARD: SurfboardDriver,
        DeviceFamily.TMOBILE_GATEWAY: TMobileGatewayDriver,
    }

    @classmethod
    def get_driver(cls, family: DeviceFamily) -> ModemDriver:
        """Get driver instance by device family.

        Raises:
            ValueError: If the family is not supported
        """
        if family not in cls._drivers:
            raise ValueError(f"Unsupported device family: {family}")
        return cls._drivers[family]()
