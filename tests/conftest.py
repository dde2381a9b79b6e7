"""Pytest configuration and shared fixtures for modem_exporter tests."""

from __future__ import annotations

import pytest

from modem_exporter.core.types import DeviceFamily, PayloadKind, RawPayload
from modem_exporter.drivers import hilink, surfboard, tmi
from tests.fixtures import load_fixture_bytes


class FakeClock:
    """Manually advanced clock, usable wherever a time function is injected."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock():
    """Clock starting at t=1000."""
    return FakeClock()


@pytest.fixture
def hilink_resources():
    """HiLink status documents keyed by request path."""
    family = DeviceFamily.HUAWEI_HILINK
    return {
        hilink.TRAFFIC_PATH: load_fixture_bytes(family, "traffic-statistics.xml"),
        hilink.SIGNAL_PATH: load_fixture_bytes(family, "signal.xml"),
        hilink.INFORMATION_PATH: load_fixture_bytes(family, "information.xml"),
    }


@pytest.fixture
def hilink_payload(hilink_resources):
    """Complete HiLink payload."""
    return RawPayload(PayloadKind.XML, hilink_resources)


@pytest.fixture
def surfboard_resources():
    """SURFboard status pages keyed by request path."""
    family = DeviceFamily.ARRIS_SURFBOARD
    return {
        surfboard.STATUS_PATH: load_fixture_bytes(family, "cmconnectionstatus.html"),
        surfboard.SOFTWARE_PATH: load_fixture_bytes(family, "cmswinfo.html"),
    }


@pytest.fixture
def surfboard_payload(surfboard_resources):
    """Complete SURFboard payload."""
    return RawPayload(PayloadKind.HTML, surfboard_resources)


@pytest.fixture
def tmi_payload():
    """Complete T-Mobile gateway payload."""
    body = load_fixture_bytes(DeviceFamily.TMOBILE_GATEWAY, "gateway.json")
    return RawPayload(PayloadKind.JSON, {tmi.STATUS_PATH: body})
