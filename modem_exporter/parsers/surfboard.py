"""Parser for ARRIS SURFboard status pages.

/cmconnectionstatus.html holds two tables, each starting with a title row
("Downstream Bonded Channels" / "Upstream Bonded Channels") followed by a
header row and one row per channel:

    Channel ID | Lock Status | Modulation | Frequency | Power | SNR/MER | Corrected | Uncorrectables

Columns are located by header text, so firmware that adds or reorders
columns still parses.

/cmswinfo.html holds label/value rows: Hardware Version, Software Version,
Up Time ("7 days 00h:37m:20s.00").
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from bs4 import BeautifulSoup, Tag

from ..core import schema
from ..core.exceptions import MalformedValueError, MissingFieldError, UnexpectedFormatError
from ..core.types import DeviceFamily, MetricSample, PayloadKind
from ..drivers.surfboard import SOFTWARE_PATH, STATUS_PATH
from ..lib.utils import parse_uptime_to_seconds
from .base_parser import ModemParser

_LOGGER = logging.getLogger(__name__)

DOWNSTREAM_TITLE = "Downstream Bonded Channels"
UPSTREAM_TITLE = "Upstream Bonded Channels"

# (column header, metric, integer?) per direction; "Channel ID" is the label
DOWNSTREAM_COLUMNS = (
    ("Frequency", schema.DOWNSTREAM_FREQUENCY, False),
    ("Power", schema.DOWNSTREAM_POWER, False),
    ("SNR/MER", schema.DOWNSTREAM_SNR, False),
    ("Corrected", schema.DOWNSTREAM_CORRECTED, True),
    ("Uncorrectables", schema.DOWNSTREAM_UNCORRECTABLE, True),
)
UPSTREAM_COLUMNS = (
    ("Frequency", schema.UPSTREAM_FREQUENCY, False),
    ("Power", schema.UPSTREAM_POWER, False),
)

INFO_FIELDS = (
    ("Software Version", "software_version"),
    ("Hardware Version", "hardware_version"),
)
UPTIME_LABEL = "Up Time"


def _cell_text(cell: Tag) -> str:
    return cell.get_text(" ", strip=True)


class SurfboardParser(ModemParser):
    """Parser for ARRIS SURFboard HTML status pages."""

    family = DeviceFamily.ARRIS_SURFBOARD
    payload_kind = PayloadKind.HTML

    def parse_resources(self, resources: Mapping[str, bytes]) -> tuple[list[MetricSample], dict[str, str]]:
        """Parse channel tables and software information."""
        status_soup = BeautifulSoup(self.require_resource(resources, STATUS_PATH), "html.parser")
        info_soup = BeautifulSoup(self.require_resource(resources, SOFTWARE_PATH), "html.parser")

        samples = self._parse_channels(status_soup, DOWNSTREAM_TITLE, "downstream", DOWNSTREAM_COLUMNS)
        samples.extend(self._parse_channels(status_soup, UPSTREAM_TITLE, "upstream", UPSTREAM_COLUMNS))

        info_rows = self._parse_label_rows(info_soup)
        uptime_text = self.require_text(info_rows.get(UPTIME_LABEL), UPTIME_LABEL)
        uptime = parse_uptime_to_seconds(uptime_text)
        if uptime is None:
            raise MalformedValueError(UPTIME_LABEL, uptime_text)
        samples.append(MetricSample.of(schema.UPTIME.name, uptime))

        device_info = {key: self.require_text(info_rows.get(label), label) for label, key in INFO_FIELDS}
        return samples, device_info

    def _find_table(self, soup: BeautifulSoup, title: str) -> Tag:
        """Find the table whose title row contains ``title``."""
        for table in soup.find_all("table"):
            first_row = table.find("tr")
            if first_row is not None and title in first_row.get_text(" ", strip=True):
                return table
        raise UnexpectedFormatError(f"No '{title}' table in status page")

    def _parse_channels(
        self,
        soup: BeautifulSoup,
        title: str,
        direction: str,
        columns: tuple[tuple[str, schema.MetricDescriptor, bool], ...],
    ) -> list[MetricSample]:
        rows = self._find_table(soup, title).find_all("tr")
        if len(rows) < 2:
            raise UnexpectedFormatError(f"'{title}' table has no header row")

        headers = [_cell_text(cell) for cell in rows[1].find_all(["td", "th"])]
        index: dict[str, int] = {}
        for header, _, _ in (("Channel ID", None, False), *columns):
            if header not in headers:
                raise MissingFieldError(f"{direction}.{header}")
            index[header] = headers.index(header)

        samples: list[MetricSample] = []
        for number, row in enumerate(rows[2:], start=1):
            cells = [_cell_text(cell) for cell in row.find_all("td")]
            if not cells:
                continue
            if len(cells) < len(headers):
                raise MissingFieldError(f"{direction}.row{number}")

            channel_id = self.require_text(cells[index["Channel ID"]], f"{direction}.Channel ID")
            for header, descriptor, integer in columns:
                field = f"{direction}.{header}"
                text = self.require_text(cells[index[header]], field)
                value = self.to_int(text, field) if integer else self.to_float(text, field)
                samples.append(MetricSample.of(descriptor.name, value, channel_id=channel_id))

        _LOGGER.debug("Parsed %d %s samples", len(samples), direction)
        return samples

    @staticmethod
    def _parse_label_rows(soup: BeautifulSoup) -> dict[str, str]:
        """Collect two-cell label/value rows from every table."""
        values: dict[str, str] = {}
        for row in soup.find_all("tr"):
            cells = row.find_all("td")
            if len(cells) == 2:
                values[_cell_text(cells[0])] = _cell_text(cells[1])
        return values
