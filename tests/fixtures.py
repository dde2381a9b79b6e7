"""Test fixture utilities.

Provides consistent access to captured modem responses stored in
tests/fixtures/{family}/. Tests should use these helpers instead of relative
path construction.
"""

from __future__ import annotations

from pathlib import Path

from modem_exporter.core.types import DeviceFamily

FIXTURES_ROOT = Path(__file__).parent / "fixtures"


def get_fixture_path(family: DeviceFamily | str, filename: str) -> Path:
    """Get path to a fixture file.

    Args:
        family: Device family (e.g., DeviceFamily.HUAWEI_HILINK or "huawei_hilink")
        filename: Fixture filename (e.g., "signal.xml")

    Raises:
        FileNotFoundError: If fixture doesn't exist.
    """
    name = family.value if isinstance(family, DeviceFamily) else family
    path = FIXTURES_ROOT / name / filename
    if not path.exists():
        raise FileNotFoundError(f"Fixture not found: {path}")
    return path


def load_fixture(family: DeviceFamily | str, filename: str, encoding: str = "utf-8") -> str:
    """Load fixture file contents as string."""
    return get_fixture_path(family, filename).read_text(encoding=encoding)


def load_fixture_bytes(family: DeviceFamily | str, filename: str) -> bytes:
    """Load fixture file contents as bytes."""
    return get_fixture_path(family, filename).read_bytes()
