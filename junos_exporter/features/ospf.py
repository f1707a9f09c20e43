"""OSPF and OSPFv3 neighbour metrics."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from functools import partial
from typing import Any

from ..metrics import Desc, Metric, RPCCollector, ValueType
from ..xmlutil import find_int, find_text, parse_xml

OSPF_UP = Desc("junos_ospf_up", "OSPF is up and running (1 = up)", ("target",))
OSPF3_UP = Desc("junos_ospf3_up", "OSPFv3 is up and running (1 = up)", ("target",))
OSPF_NEIGHBORS = Desc("junos_ospf_neighbors_count", "Number of neighbors", ("target", "area"))
OSPF3_NEIGHBORS = Desc("junos_ospf3_neighbors_count", "Number of neighbors", ("target", "area"))

V2_INFORMATION = "ospf-overview-information"
V3_INFORMATION = "ospf3-overview-information"


@dataclass(frozen=True)
class Area:
    """An OSPF area and its number of neighbours that are up."""

    name: str
    neighbors_up: int


def parse_areas(data: bytes | str, information_tag: str) -> list[Area]:
    """Read the areas of an OSPF overview reply."""
    root = parse_xml(data)
    return [
        Area(
            name=find_text(el, "ospf-area"),
            neighbors_up=find_int(el, "ospf-nbr-overview/ospf-nbr-up-count"),
        )
        for el in root.findall(f"{information_tag}/ospf-overview/ospf-area-overview")
    ]


class OSPFCollector(RPCCollector):
    """Collects OSPF and OSPFv3 metrics."""

    name = "OSPF"

    def __init__(self, logical_system: str = "") -> None:
        self.logical_system = logical_system

    def describe(self) -> list[Desc]:
        return [OSPF_UP, OSPF3_UP, OSPF_NEIGHBORS, OSPF3_NEIGHBORS]

    def collect(self, client: Any, label_values: Sequence[str]) -> Iterator[Metric]:
        yield from self._collect_version(
            client, label_values, "show ospf overview", V2_INFORMATION, OSPF_UP, OSPF_NEIGHBORS
        )
        yield from self._collect_version(
            client, label_values, "show ospf3 overview", V3_INFORMATION, OSPF3_UP, OSPF3_NEIGHBORS
        )

    def _command(self, base: str) -> str:
        if self.logical_system:
            return f"{base} logical-system {self.logical_system}"
        return base

    def _collect_version(
        self,
        client: Any,
        label_values: Sequence[str],
        base_command: str,
        information_tag: str,
        up_desc: Desc,
        neighbors_desc: Desc,
    ) -> Iterator[Metric]:
        areas = client.run_command_and_parse(
            self._command(base_command), partial(parse_areas, information_tag=information_tag)
        )
        labels = tuple(label_values)
        yield Metric(up_desc, ValueType.GAUGE, 1 if areas else 0, labels)
        for area in areas:
            yield Metric(neighbors_desc, ValueType.GAUGE, area.neighbors_up, (*labels, area.name))