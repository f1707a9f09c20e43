"""Chassis power usage metrics."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any

from ..metrics import Desc, Metric, RPCCollector, ValueType
from ..xmlutil import find_int, find_text, is_multi_routing_engine, parse_xml

_PREFIX = "junos_power_"
_SYS_LABELS = ("target", "re_name")
_ZONE_LABELS = ("target", "re_name", "zone")
_PEM_LABELS = ("target", "re_name", "name", "zone")

CAPACITY_SYS_ACTUAL = Desc(
    _PREFIX + "capacity_sys_actual_usage",
    "Actual power usage for the system, in watts",
    _SYS_LABELS,
)
CAPACITY_SYS_MAX = Desc(
    _PREFIX + "capacity_sys_max", "Maximum power capacity for the system, in watts", _SYS_LABELS
)
CAPACITY_SYS_REMAINING = Desc(
    _PREFIX + "capacity_sys_remaining", "Remaining capacity for the system, in watts", _SYS_LABELS
)
CAPACITY_ACTUAL = Desc(
    _PREFIX + "capacity_actual", "Power capacity applicable for the zone, in watts", _ZONE_LABELS
)
CAPACITY_MAX = Desc(
    _PREFIX + "capacity_max",
    "Maximum power capacity applicable for the zone, in watts",
    _ZONE_LABELS,
)
CAPACITY_ALLOCATED = Desc(
    _PREFIX + "capacity_allocated", "Actual capacity allocated for the zone, in watts", _ZONE_LABELS
)
CAPACITY_REMAINING = Desc(
    _PREFIX + "capacity_remaining", "Remaining capacity for the zone, in watts", _ZONE_LABELS
)
CAPACITY_ACTUAL_USAGE = Desc(
    _PREFIX + "capacity_actual_usage", "Actual power usage for the zone, in watts", _ZONE_LABELS
)
DC_POWER = Desc(_PREFIX + "pem_power_usage", "PEM power usage in W", _PEM_LABELS)
DC_CURRENT = Desc(_PREFIX + "pem_current", "PEM current value", _PEM_LABELS)
DC_VOLTAGE = Desc(_PREFIX + "pem_voltage", "PEM voltage value", _PEM_LABELS)
DC_LOAD = Desc(_PREFIX + "pem_power_load_percent", "PEM power usage percent of total", _PEM_LABELS)
PEM_POWER_STATE = Desc(
    _PREFIX + "pem_power_state",
    "PEM power state. 1 - Online, 2 - Present, 3 - Empty",
    (*_PEM_LABELS, "state"),
)

STATE_VALUES = {"Online": 1, "Present": 2, "Empty": 3}


@dataclass(frozen=True)
class DcOutputDetail:
    """DC output readings of a power entry module."""

    power: int = 0
    zone: str = ""
    current: int = 0
    voltage: int = 0
    load: int = 0


@dataclass(frozen=True)
class PowerUsageItem:
    """A power entry module."""

    name: str = ""
    state: str = ""
    dc_output: DcOutputDetail = field(default_factory=DcOutputDetail)


@dataclass(frozen=True)
class PowerUsageZone:
    """Power capacity figures of one zone."""

    zone: str = ""
    capacity_actual: int = 0
    capacity_max: int = 0
    capacity_allocated: int = 0
    capacity_remaining: int = 0
    capacity_actual_usage: int = 0


@dataclass(frozen=True)
class PowerUsageSystem:
    """System wide power capacity figures."""

    zones: list[PowerUsageZone] = field(default_factory=list)
    capacity_sys_actual: int = 0
    capacity_sys_max: int = 0
    capacity_sys_remaining: int = 0


@dataclass(frozen=True)
class PowerUsageInformation:
    """Power modules and capacity of a routing engine."""

    items: list[PowerUsageItem] = field(default_factory=list)
    system: PowerUsageSystem = field(default_factory=PowerUsageSystem)


@dataclass(frozen=True)
class RoutingEngine:
    """Power information reported by one routing engine."""

    name: str
    information: PowerUsageInformation = field(default_factory=PowerUsageInformation)


def _expect_reply(root: ET.Element) -> None:
    if root.tag != "rpc-reply":
        raise ValueError(f"expected element <rpc-reply> but have <{root.tag}>")


def _parse_item(element: ET.Element) -> PowerUsageItem:
    detail = element.find("dc-output-detail")
    dc_output = DcOutputDetail()
    if detail is not None:
        dc_output = DcOutputDetail(
            power=find_int(detail, "dc-power"),
            zone=find_text(detail, "zone"),
            current=find_int(detail, "dc-current"),
            voltage=find_int(detail, "dc-voltage"),
            load=find_int(detail, "dc-load"),
        )
    return PowerUsageItem(
        name=find_text(element, "name"),
        state=find_text(element, "state"),
        dc_output=dc_output,
    )


def _parse_system(element: ET.Element | None) -> PowerUsageSystem:
    if element is None:
        return PowerUsageSystem()
    return PowerUsageSystem(
        zones=[
            PowerUsageZone(
                zone=find_text(z, "zone"),
                capacity_actual=find_int(z, "capacity-actual"),
                capacity_max=find_int(z, "capacity-max"),
                capacity_allocated=find_int(z, "capacity-allocated"),
                capacity_remaining=find_int(z, "capacity-remaining"),
                capacity_actual_usage=find_int(z, "capacity-actual-usage"),
            )
            for z in element.findall("power-usage-zone-information")
        ],
        capacity_sys_actual=find_int(element, "capacity-sys-actual"),
        capacity_sys_max=find_int(element, "capacity-sys-max"),
        capacity_sys_remaining=find_int(element, "capacity-sys-remaining"),
    )


def _parse_information(element: ET.Element | None) -> PowerUsageInformation:
    if element is None:
        return PowerUsageInformation()
    return PowerUsageInformation(
        items=[_parse_item(el) for el in element.findall("power-usage-item")],
        system=_parse_system(element.find("power-usage-system")),
    )


def parse_power(data: bytes | str) -> list[RoutingEngine]:
    """Read the routing engines of a chassis power reply.

    A reply of a single routing engine yields one engine named "N/A".
    """
    root = parse_xml(data)
    _expect_reply(root)
    if is_multi_routing_engine(data):
        return [
            RoutingEngine(
                name=find_text(item, "re-name"),
                information=_parse_information(item.find("power-usage-information")),
            )
            for item in root.findall("multi-routing-engine-results/multi-routing-engine-item")
        ]
    return [RoutingEngine("N/A", _parse_information(root.find("power-usage-information")))]


class PowerCollector(RPCCollector):
    """Collects power capacity and power entry module metrics."""

    name = "Power"

    def describe(self) -> list[Desc]:
        return [
            PEM_POWER_STATE,
            CAPACITY_ACTUAL,
            CAPACITY_MAX,
            CAPACITY_ALLOCATED,
            CAPACITY_REMAINING,
            CAPACITY_ACTUAL_USAGE,
            CAPACITY_SYS_ACTUAL,
            CAPACITY_SYS_MAX,
            CAPACITY_SYS_REMAINING,
            DC_POWER,
            DC_CURRENT,
            DC_VOLTAGE,
            DC_LOAD,
        ]

    def collect(self, client: Any, label_values: Sequence[str]) -> Iterator[Metric]:
        engines = client.run_command_and_parse("show chassis power", parse_power)
        for engine in engines:
            labels = (*label_values, engine.name)
            system = engine.information.system

            for desc, value in (
                (CAPACITY_SYS_ACTUAL, system.capacity_sys_actual),
                (CAPACITY_SYS_MAX, system.capacity_sys_max),
                (CAPACITY_SYS_REMAINING, system.capacity_sys_remaining),
            ):
                if value > 0:
                    yield Metric(desc, ValueType.GAUGE, value, labels)

            for zone in system.zones:
                zone_labels = (*labels, zone.zone)
                yield Metric(CAPACITY_ACTUAL, ValueType.GAUGE, zone.capacity_actual, zone_labels)
                yield Metric(CAPACITY_MAX, ValueType.GAUGE, zone.capacity_max, zone_labels)
                yield Metric(
                    CAPACITY_ALLOCATED, ValueType.GAUGE, zone.capacity_allocated, zone_labels
                )
                yield Metric(
                    CAPACITY_REMAINING, ValueType.GAUGE, zone.capacity_remaining, zone_labels
                )
                yield Metric(
                    CAPACITY_ACTUAL_USAGE, ValueType.GAUGE, zone.capacity_actual_usage, zone_labels
                )

            for item in engine.information.items:
                dc = item.dc_output
                pem_labels = (*labels, item.name, dc.zone)
                yield Metric(DC_POWER, ValueType.GAUGE, dc.power, pem_labels)
                yield Metric(DC_CURRENT, ValueType.GAUGE, dc.current, pem_labels)
                yield Metric(DC_VOLTAGE, ValueType.GAUGE, dc.voltage, pem_labels)
                yield Metric(DC_LOAD, ValueType.GAUGE, dc.load, pem_labels)
                yield Metric(
                    PEM_POWER_STATE,
                    ValueType.GAUGE,
                    STATE_VALUES.get(item.state, 0),
                    (*pem_labels, item.state),
                )