"""Fixed metric schema.

Every sample a parser emits must name one of the descriptors below. The
exposition collector uses these to build metric families; parsers only deal
in names and values.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .types import DeviceFamily


class MetricType(str, Enum):
    """Exposition metric type."""

    GAUGE = "gauge"
    COUNTER = "counter"


@dataclass(frozen=True)
class MetricDescriptor:
    """Name, help text, type and label names of an exported metric."""

    name: str
    documentation: str
    type: MetricType = MetricType.GAUGE
    labels: tuple[str, ...] = ()


def _gauge(name: str, documentation: str, *labels: str) -> MetricDescriptor:
    return MetricDescriptor(name, documentation, MetricType.GAUGE, labels)


def _counter(name: str, documentation: str, *labels: str) -> MetricDescriptor:
    return MetricDescriptor(name, documentation, MetricType.COUNTER, labels)


# Shared by all families
UPTIME = _gauge("modem_uptime_seconds", "Time since the modem connection was established")

# Huawei HiLink traffic statistics
UPLINK_RATE = _gauge("modem_uplink_rate_bytes_per_second", "Current upload rate")
DOWNLINK_RATE = _gauge("modem_downlink_rate_bytes_per_second", "Current download rate")
TRANSFERRED = _gauge("modem_transferred_bytes", "Transferred bytes", "period", "direction")
CONNECT_DURATION = _counter("modem_connect_duration_seconds", "Connected duration", "period")

# Radio signal (HiLink, T-Mobile gateway)
SIGNAL_SINR = _gauge("modem_signal_sinr_db", "Signal to interference plus noise ratio", "radio")
SIGNAL_RSRQ = _gauge("modem_signal_rsrq_db", "Reference signal received quality", "radio")
SIGNAL_RSRP = _gauge("modem_signal_rsrp_dbm", "Reference signal received power", "radio")
SIGNAL_RSSI = _gauge("modem_signal_rssi_dbm", "Received signal strength indicator", "radio")
SIGNAL_RSCP = _gauge("modem_signal_rscp_dbm", "Received signal code power", "radio")
SIGNAL_ECIO = _gauge("modem_signal_ecio_db", "Pilot energy per chip to interference ratio", "radio")
SIGNAL_BARS = _gauge("modem_signal_bars", "Signal bars reported by the device", "radio")

# DOCSIS channels (ARRIS SURFboard)
DOWNSTREAM_FREQUENCY = _gauge("modem_downstream_frequency_hz", "Downstream channel frequency", "channel_id")
DOWNSTREAM_POWER = _gauge("modem_downstream_power_dbmv", "Downstream channel power", "channel_id")
DOWNSTREAM_SNR = _gauge("modem_downstream_snr_db", "Downstream channel signal to noise ratio", "channel_id")
DOWNSTREAM_CORRECTED = _counter(
    "modem_downstream_corrected_codewords", "Downstream codewords corrected by FEC", "channel_id"
)
DOWNSTREAM_UNCORRECTABLE = _counter(
    "modem_downstream_uncorrectable_codewords", "Downstream codewords that could not be corrected", "channel_id"
)
UPSTREAM_FREQUENCY = _gauge("modem_upstream_frequency_hz", "Upstream channel frequency", "channel_id")
UPSTREAM_POWER = _gauge("modem_upstream_power_dbmv", "Upstream channel transmit power", "channel_id")

DESCRIPTORS: dict[str, MetricDescriptor] = {
    d.name: d
    for d in (
        UPTIME,
        UPLINK_RATE,
        DOWNLINK_RATE,
        TRANSFERRED,
        CONNECT_DURATION,
        SIGNAL_SINR,
        SIGNAL_RSRQ,
        SIGNAL_RSRP,
        SIGNAL_RSSI,
        SIGNAL_RSCP,
        SIGNAL_ECIO,
        SIGNAL_BARS,
        DOWNSTREAM_FREQUENCY,
        DOWNSTREAM_POWER,
        DOWNSTREAM_SNR,
        DOWNSTREAM_CORRECTED,
        DOWNSTREAM_UNCORRECTABLE,
        UPSTREAM_FREQUENCY,
        UPSTREAM_POWER,
    )
}

# Metrics each family publishes, in exposition order
FAMILY_METRICS: dict[DeviceFamily, tuple[MetricDescriptor, ...]] = {
    DeviceFamily.HUAWEI_HILINK: (
        UPLINK_RATE,
        DOWNLINK_RATE,
        TRANSFERRED,
        CONNECT_DURATION,
        UPTIME,
        SIGNAL_SINR,
        SIGNAL_RSRQ,
        SIGNAL_RSRP,
        SIGNAL_RSSI,
        SIGNAL_RSCP,
        SIGNAL_ECIO,
    ),
    DeviceFamily.ARRIS_SURFBOARD: (
        DOWNSTREAM_FREQUENCY,
        DOWNSTREAM_POWER,
        DOWNSTREAM_SNR,
        DOWNSTREAM_CORRECTED,
        DOWNSTREAM_UNCORRECTABLE,
        UPSTREAM_FREQUENCY,
        UPSTREAM_POWER,
        UPTIME,
    ),
    DeviceFamily.TMOBILE_GATEWAY: (
        SIGNAL_SINR,
        SIGNAL_RSRQ,
        SIGNAL_RSRP,
        SIGNAL_RSSI,
        SIGNAL_BARS,
        UPTIME,
    ),
}

INFO_METRIC = "modem_info"
INFO_DOCUMENTATION = "Modem identity; value is always 1"
