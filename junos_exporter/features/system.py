"""System metrics: buffers, hardware information, satellites and licenses."""

from __future__ import annotations

import math
import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from ..metrics import Desc, Metric, RPCCollector, ValueType
from ..xmlutil import find_int, find_text, parse_xml
from .system_buffers import buffer_descriptions, buffer_metrics, parse_buffers

_PREFIX = "junos_system_"
_LICENSE_LABELS = ("target", "feature_name", "feature_description")

HARDWARE_INFO = Desc(
    _PREFIX + "hardware_info",
    "Hardware information about this system",
    (
        "target",
        "model",
        "os",
        "os_version",
        "serial",
        "hostname",
        "alias",
        "slot_id",
        "state",
    ),
)
LICENSE_USED = Desc(_PREFIX + "license_used", "Amount of license used", _LICENSE_LABELS)
LICENSE_INSTALLED = Desc(
    _PREFIX + "license_installed", "Amount of license installed", _LICENSE_LABELS
)
LICENSE_NEEDED = Desc(_PREFIX + "license_needed", "Amount of license needed", _LICENSE_LABELS)
LICENSE_EXPIRY = Desc(
    _PREFIX + "license_expiry",
    "Days until expiry, if applicable; -1 = expired; +Inf = permanent; -Inf = invalid",
    _LICENSE_LABELS,
)

# "2006-01-02 03:04:05 MST": twelve hour clock, zone abbreviation taken as UTC.
_EXPIRY_PATTERN = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2}) (\d{2}):(\d{2}):(\d{2}) ([a-z]{3,5})$", re.ASCII
)


@dataclass(frozen=True)
class SystemInformation:
    """Model, operating system and identity of the device."""

    model: str = ""
    os: str = ""
    os_version: str = ""
    serial: str = ""
    hostname: str = ""


@dataclass(frozen=True)
class Satellite:
    """A satellite device attached to the chassis."""

    alias: str = ""
    slot_id: int = 0
    state: str = ""
    model: str = ""
    serial: str = ""
    version: str = ""


@dataclass(frozen=True)
class License:
    """Usage of one licensed feature."""

    name: str = ""
    description: str = ""
    installed: int = 0
    used: int = 0
    needed: int = 0
    validity_type: str = ""


def parse_system_information(data: bytes | str) -> SystemInformation:
    """Read a system information reply."""
    root = parse_xml(data)
    el = root.find("system-information")
    if el is None:
        return SystemInformation()
    return SystemInformation(
        model=find_text(el, "hardware-model"),
        os=find_text(el, "os-name"),
        os_version=find_text(el, "os-version"),
        serial=find_text(el, "serial-number"),
        hostname=find_text(el, "host-name"),
    )


def parse_satellites(data: bytes | str) -> list[Satellite]:
    """Read the satellites of a chassis satellite detail reply."""
    root = parse_xml(data)
    return [
        Satellite(
            alias=find_text(el, "satellite-alias"),
            slot_id=find_int(el, "slot-id"),
            state=find_text(el, "operation-state"),
            model=find_text(el, "product-model"),
            serial=find_text(el, "serial-number"),
            version=find_text(el, "version"),
        )
        for el in root.findall("satellite-information/satellite")
    ]


def parse_licenses(data: bytes | str) -> list[License]:
    """Read the features of a license usage reply."""
    root = parse_xml(data)
    return [
        License(
            name=find_text(el, "name"),
            description=find_text(el, "description"),
            installed=find_int(el, "licensed"),
            used=find_int(el, "used-licensed"),
            needed=find_int(el, "needed"),
            validity_type=find_text(el, "validity-type"),
        )
        for el in root.findall("license-usage-summary/feature-summary")
    ]


def _parse_expiry(text: str) -> datetime | None:
    match = _EXPIRY_PATTERN.match(text)
    if not match:
        return None
    year, month, day, hour, minute, second = (int(g) for g in match.groups()[:6])
    if hour > 12:
        return None
    try:
        return datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)
    except ValueError:
        return None


def license_expiry_days(validity_type: str, now: datetime | None = None) -> float:
    """Days until a license expires.

    Returns -1 for expired licenses, +inf for permanent ones and -inf for
    anything that cannot be read.
    """
    text = validity_type.lower()
    expiry = _parse_expiry(text)
    if expiry is None:
        if text == "expired":
            return -1.0
        if text == "permanent":
            return math.inf
        return -math.inf
    current = now if now is not None else datetime.now(timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)
    return (expiry - current).total_seconds() / 86400.0


class SystemCollector(RPCCollector):
    """Collects buffer, hardware, satellite and license metrics."""

    name = "System"

    def describe(self) -> list[Desc]:
        return [
            *buffer_descriptions(),
            HARDWARE_INFO,
            LICENSE_USED,
            LICENSE_INSTALLED,
            LICENSE_NEEDED,
            LICENSE_EXPIRY,
        ]

    def collect(self, client: Any, label_values: Sequence[str]) -> Iterator[Metric]:
        labels = tuple(label_values)

        try:
            stats = client.run_command_and_parse("show system buffers", parse_buffers)
        except Exception as exc:
            raise RuntimeError(f"could not get buffer information: {exc}") from exc
        if stats is not None:
            yield from buffer_metrics(stats, labels)

        try:
            info = client.run_command_and_parse(
                "show system information", parse_system_information
            )
        except Exception as exc:
            raise RuntimeError(f"could not get system information: {exc}") from exc
        yield Metric(
            HARDWARE_INFO,
            ValueType.GAUGE,
            1,
            (*labels, info.model, info.os, info.os_version, info.serial, info.hostname, "", "", ""),
        )

        if client.is_satellite_enabled():
            yield from self._collect_satellites(client, labels)

        if client.is_scraping_license_enabled():
            yield from self._collect_licenses(client, labels)

    def _collect_satellites(self, client: Any, labels: tuple[str, ...]) -> Iterator[Metric]:
        try:
            satellites = client.run_command_and_parse(
                "show chassis satellite detail", parse_satellites
            )
        except Exception:
            # devices without satellites answer with assorted errors
            return
        for sat in satellites:
            yield Metric(
                HARDWARE_INFO,
                ValueType.GAUGE,
                1,
                (
                    *labels,
                    sat.model.lower(),
                    "satellite",
                    sat.version,
                    sat.serial,
                    "",
                    sat.alias,
                    str(sat.slot_id),
                    sat.state.lower(),
                ),
            )

    def _collect_licenses(self, client: Any, labels: tuple[str, ...]) -> Iterator[Metric]:
        try:
            licenses = client.run_command_and_parse("show system license usage", parse_licenses)
        except Exception:
            return
        for lic in licenses:
            lic_labels = (*labels, lic.name.lower(), lic.description.lower())
            yield Metric(LICENSE_USED, ValueType.GAUGE, lic.used, lic_labels)
            yield Metric(LICENSE_INSTALLED, ValueType.GAUGE, lic.installed, lic_labels)
            yield Metric(LICENSE_NEEDED, ValueType.GAUGE, lic.needed, lic_labels)
            yield Metric(
                LICENSE_EXPIRY,
                ValueType.GAUGE,
                license_expiry_days(lic.validity_type),
                lic_labels,
            )