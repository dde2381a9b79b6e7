"""Parser for the T-Mobile gateway TMI status document.

GET /TMI/v1/gateway?get=all returns device, signal and time objects. The
signal object carries one block per active radio ("5g", "4g"); a gateway in
standalone 5G mode has no "4g" block, so each radio is optional but at least
one must be present, and every present radio must be complete.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from ..core import schema
from ..core.exceptions import MalformedValueError, MissingFieldError, UnexpectedFormatError
from ..core.types import DeviceFamily, MetricSample, PayloadKind
from ..drivers.tmi import STATUS_PATH
from .base_parser import ModemParser

_LOGGER = logging.getLogger(__name__)

RADIOS = ("5g", "4g")

SIGNAL_FIELDS = (
    ("sinr", schema.SIGNAL_SINR),
    ("rsrq", schema.SIGNAL_RSRQ),
    ("rsrp", schema.SIGNAL_RSRP),
    ("rssi", schema.SIGNAL_RSSI),
    ("bars", schema.SIGNAL_BARS),
)

INFO_FIELDS = (
    ("model", "model"),
    ("softwareVersion", "software_version"),
)


class TMobileGatewayParser(ModemParser):
    """Parser for TMI gateway JSON."""

    family = DeviceFamily.TMOBILE_GATEWAY
    payload_kind = PayloadKind.JSON

    def parse_resources(self, resources: Mapping[str, bytes]) -> tuple[list[MetricSample], dict[str, str]]:
        """Parse signal, uptime and device identity."""
        body = self.require_resource(resources, STATUS_PATH)
        try:
            data = json.loads(body)
        except ValueError as err:
            raise UnexpectedFormatError(f"{STATUS_PATH} is not valid JSON: {err}") from err
        if not isinstance(data, dict):
            raise UnexpectedFormatError(f"{STATUS_PATH} is not a JSON object")

        device = self._section(data, "device")
        signal = self._section(data, "signal")
        time_info = self._section(data, "time")

        samples: list[MetricSample] = []
        radios = [radio for radio in RADIOS if radio in signal]
        if not radios:
            raise MissingFieldError("signal.5g")
        for radio in radios:
            block = self._section(signal, radio, f"signal.{radio}")
            for key, descriptor in SIGNAL_FIELDS:
                value = self._number(block, key, f"signal.{radio}.{key}")
                samples.append(MetricSample.of(descriptor.name, value, radio=radio))

        samples.append(MetricSample.of(schema.UPTIME.name, self._number(time_info, "upTime", "time.upTime")))

        device_info = {}
        for key, info_key in INFO_FIELDS:
            value = device.get(key)
            if not isinstance(value, str):
                if value is None:
                    raise MissingFieldError(f"device.{key}")
                raise MalformedValueError(f"device.{key}", repr(value))
            device_info[info_key] = self.require_text(value, f"device.{key}")
        return samples, device_info

    @staticmethod
    def _section(data: dict[str, Any], key: str, field: str | None = None) -> dict[str, Any]:
        section = data.get(key)
        if section is None:
            raise MissingFieldError(field or key)
        if not isinstance(section, dict):
            raise UnexpectedFormatError(f"{field or key} is not an object")
        return section

    @staticmethod
    def _number(data: dict[str, Any], key: str, field: str) -> float:
        if key not in data or data[key] is None:
            raise MissingFieldError(field)
        value = data[key]
        # bool is an int subclass, but never a valid measurement
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise MalformedValueError(field, repr(value))
        return float(value)
