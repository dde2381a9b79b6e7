"""Tests for core/types.py."""

from __future__ import annotations

import pytest

from modem_exporter.core.types import DeviceFamily, MetricSample, PayloadKind, RawPayload, StatSnapshot


class TestMetricSample:
    """Tests for MetricSample."""

    def test_labels_sorted(self):
        """Test label order does not affect equality."""
        a = MetricSample.of("modem_transferred_bytes", 1, period="total", direction="upload")
        b = MetricSample.of("modem_transferred_bytes", 1, direction="upload", period="total")

        assert a == b
        assert a.labels == (("direction", "upload"), ("period", "total"))

    def test_value_is_float(self):
        """Test integer values are stored as floats."""
        assert isinstance(MetricSample.of("modem_uptime_seconds", 5).value, float)


class TestRawPayload:
    """Tests for RawPayload."""

    def test_resources_copied_and_read_only(self):
        """Test the payload does not share the caller's dict."""
        resources = {"/a": b"1"}
        payload = RawPayload(PayloadKind.JSON, resources)
        resources["/b"] = b"2"

        assert set(payload.resources) == {"/a"}
        with pytest.raises(TypeError):
            payload.resources["/c"] = b"3"


class TestStatSnapshot:
    """Tests for StatSnapshot."""

    def test_get(self):
        """Test lookup by name and exact labels."""
        snapshot = StatSnapshot(
            family=DeviceFamily.TMOBILE_GATEWAY,
            captured_at=1.0,
            samples=[MetricSample.of("modem_signal_bars", 4, radio="4g")],
        )

        assert snapshot.get("modem_signal_bars", radio="4g") == 4
        assert snapshot.get("modem_signal_bars") is None
        assert snapshot.get("modem_signal_bars", radio="5g") is None

    def test_equality_and_hash(self):
        """Test equal content gives equal, hashable snapshots."""
        kwargs = {"family": DeviceFamily.HUAWEI_HILINK, "captured_at": 2.0, "samples": ()}
        a = StatSnapshot(device_info={"model": "x"}, **kwargs)
        b = StatSnapshot(device_info={"model": "x"}, **kwargs)

        assert a == b
        assert hash(a) == hash(b)
        assert a != StatSnapshot(device_info={"model": "y"}, **kwargs)
