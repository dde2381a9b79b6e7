"""Parser for Huawei HiLink status documents.

Documents (all wrapped in <response>):
- /api/monitoring/traffic-statistics: byte counters, rates, connect times
- /api/device/signal: radio signal with unit suffixes ("-95dBm", "9dB")
- /api/device/information: device name and versions

Serial number and IMEI are present in /api/device/information but are not
exported.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from xml.etree.ElementTree import Element

from defusedxml import ElementTree

from ..core import schema
from ..core.exceptions import MissingFieldError, UnexpectedFormatError
from ..core.types import DeviceFamily, MetricSample, PayloadKind
from ..drivers.hilink import INFORMATION_PATH, SIGNAL_PATH, TRAFFIC_PATH
from .base_parser import ModemParser

_LOGGER = logging.getLogger(__name__)

# The signal document carries every tag in every mode and leaves the ones of
# inactive radios empty. A radio is active when one of its own tags (rssi is
# shared) has a value; an active radio must then be complete.
RADIO_SIGNAL_FIELDS = (
    (
        "lte",
        ("sinr", "rsrq", "rsrp"),
        (
            ("sinr", schema.SIGNAL_SINR),
            ("rsrq", schema.SIGNAL_RSRQ),
            ("rsrp", schema.SIGNAL_RSRP),
            ("rssi", schema.SIGNAL_RSSI),
        ),
    ),
    (
        "wcdma",
        ("rscp", "ecio"),
        (
            ("rssi", schema.SIGNAL_RSSI),
            ("rscp", schema.SIGNAL_RSCP),
            ("ecio", schema.SIGNAL_ECIO),
        ),
    ),
)

INFO_FIELDS = (
    ("DeviceName", "device_name"),
    ("SoftwareVersion", "software_version"),
    ("HardwareVersion", "hardware_version"),
)


class HiLinkParser(ModemParser):
    """Parser for Huawei HiLink XML API responses."""

    family = DeviceFamily.HUAWEI_HILINK
    payload_kind = PayloadKind.XML

    def parse_resources(self, resources: Mapping[str, bytes]) -> tuple[list[MetricSample], dict[str, str]]:
        """Parse traffic statistics, signal and device information."""
        traffic = self._load(resources, TRAFFIC_PATH)
        signal = self._load(resources, SIGNAL_PATH)
        information = self._load(resources, INFORMATION_PATH)

        samples = self._parse_traffic(traffic)
        samples.extend(self._parse_signal(signal))
        device_info = {
            key: self.require_text(information.findtext(tag), tag) for tag, key in INFO_FIELDS
        }
        return samples, device_info

    def _load(self, resources: Mapping[str, bytes], path: str) -> Element:
        body = self.require_resource(resources, path)
        try:
            root = ElementTree.fromstring(body)
        except ElementTree.ParseError as err:
            raise UnexpectedFormatError(f"{path} is not well-formed XML: {err}") from err
        if root.tag != "response":
            raise UnexpectedFormatError(f"{path} has root <{root.tag}>, expected <response>")
        return root

    def _counter(self, root: Element, tag: str) -> int:
        return self.to_int(self.require_text(root.findtext(tag), tag), tag)

    def _parse_traffic(self, root: Element) -> list[MetricSample]:
        current_connect_time = self._counter(root, "CurrentConnectTime")
        return [
            MetricSample.of(schema.UPLINK_RATE.name, self._counter(root, "CurrentUploadRate")),
            MetricSample.of(schema.DOWNLINK_RATE.name, self._counter(root, "CurrentDownloadRate")),
            MetricSample.of(
                schema.TRANSFERRED.name, self._counter(root, "CurrentUpload"), period="session", direction="upload"
            ),
            MetricSample.of(
                schema.TRANSFERRED.name,
                self._counter(root, "CurrentDownload"),
                period="session",
                direction="download",
            ),
            MetricSample.of(
                schema.TRANSFERRED.name, self._counter(root, "TotalUpload"), period="total", direction="upload"
            ),
            MetricSample.of(
                schema.TRANSFERRED.name, self._counter(root, "TotalDownload"), period="total", direction="download"
            ),
            MetricSample.of(schema.CONNECT_DURATION.name, current_connect_time, period="session"),
            MetricSample.of(schema.CONNECT_DURATION.name, self._counter(root, "TotalConnectTime"), period="total"),
            MetricSample.of(schema.UPTIME.name, current_connect_time),
        ]

    def _parse_signal(self, root: Element) -> list[MetricSample]:
        samples: list[MetricSample] = []
        radios = []
        for radio, marker_tags, fields in RADIO_SIGNAL_FIELDS:
            if not any((root.findtext(tag) or "").strip() for tag in marker_tags):
                continue
            radios.append(radio)
            samples.extend(
                MetricSample.of(
                    descriptor.name, self.to_float(self.require_text(root.findtext(tag), tag), tag), radio=radio
                )
                for tag, descriptor in fields
            )

        if not radios:
            # No registered radio, e.g. SIM not inserted
            raise MissingFieldError("rsrp")
        _LOGGER.debug("Signal radios: %s", ", ".join(radios))
        return samples
