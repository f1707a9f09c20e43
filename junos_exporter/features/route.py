"""Routing table size metrics."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any

from ..metrics import Desc, Metric, RPCCollector, ValueType
from ..xmlutil import find_int, find_text, parse_xml

_PREFIX = "junos_routes_"
_TABLE_LABELS = ("target", "table")
_PROTOCOL_LABELS = ("target", "table", "protocol")

TOTAL_ROUTES = Desc(_PREFIX + "total_count", "Number of routes in table", _TABLE_LABELS)
ACTIVE_ROUTES = Desc(_PREFIX + "active_count", "Number of active routes in table", _TABLE_LABELS)
MAX_ROUTES = Desc(_PREFIX + "max_count", "Max. number of routes", _TABLE_LABELS)
PROTOCOL_ROUTES = Desc(
    _PREFIX + "protocol_count", "Number of routes by protocol in table", _PROTOCOL_LABELS
)
PROTOCOL_ACTIVE_ROUTES = Desc(
    _PREFIX + "protocol_active_count",
    "Number of active routes by protocol in table",
    _PROTOCOL_LABELS,
)


@dataclass(frozen=True)
class RouteTableProtocol:
    """Route counts of one protocol within a table."""

    name: str
    routes: int
    active_routes: int


@dataclass(frozen=True)
class RouteTable:
    """Route counts of one routing table."""

    name: str
    max_routes: int
    total_routes: int
    active_routes: int
    protocols: list[RouteTableProtocol] = field(default_factory=list)


def parse_route_summary(data: bytes | str) -> list[RouteTable]:
    """Read the tables of a route summary reply."""
    root = parse_xml(data)
    return [
        RouteTable(
            name=find_text(table, "table-name"),
            max_routes=find_int(table, "prefix-max"),
            total_routes=find_int(table, "total-route-count"),
            active_routes=find_int(table, "active-route-count"),
            protocols=[
                RouteTableProtocol(
                    name=find_text(proto, "protocol-name"),
                    routes=find_int(proto, "protocol-route-count"),
                    active_routes=find_int(proto, "active-route-count"),
                )
                for proto in table.findall("protocols")
            ],
        )
        for table in root.findall("route-summary-information/route-table")
    ]


class RouteCollector(RPCCollector):
    """Collects route counts per table and protocol."""

    name = "Routes"

    def describe(self) -> list[Desc]:
        return [TOTAL_ROUTES, ACTIVE_ROUTES, MAX_ROUTES, PROTOCOL_ROUTES, PROTOCOL_ACTIVE_ROUTES]

    def collect(self, client: Any, label_values: Sequence[str]) -> Iterator[Metric]:
        tables = client.run_command_and_parse("show route summary", parse_route_summary)
        for table in tables:
            labels = (*label_values, table.name)
            yield Metric(TOTAL_ROUTES, ValueType.GAUGE, table.total_routes, labels)
            yield Metric(ACTIVE_ROUTES, ValueType.GAUGE, table.active_routes, labels)
            yield Metric(MAX_ROUTES, ValueType.GAUGE, table.max_routes, labels)
            for proto in table.protocols:
                proto_labels = (*labels, proto.name)
                yield Metric(PROTOCOL_ROUTES, ValueType.GAUGE, proto.routes, proto_labels)
                yield Metric(
                    PROTOCOL_ACTIVE_ROUTES, ValueType.GAUGE, proto.active_routes, proto_labels
                )