"""Security monitoring metrics of the services processing units."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any

from ..metrics import Desc, Metric, RPCCollector, ValueType
from ..xmlutil import find_int, find_text, is_multi_routing_engine, parse_xml

_PREFIX = "junos_security_"
_LABELS = ("target", "re_name")

FPC_NUMBER = Desc(_PREFIX + "fpc_number", "FPC number", _LABELS)
PIC_NUMBER = Desc(_PREFIX + "pic_number", "PIC number", _LABELS)
CPU_UTILIZATION = Desc(_PREFIX + "cpu_utilization", "CPU utilization", _LABELS)
MEMORY_UTILIZATION = Desc(_PREFIX + "memory_utilization", "Memory utilization", _LABELS)
CURRENT_FLOW_SESSION = Desc(
    _PREFIX + "current_flow_session", "Current flow of session", _LABELS
)
MAX_FLOW_SESSION = Desc(_PREFIX + "maximum_flow_session", "Maximum flow of session", _LABELS)
CURRENT_CP_SESSION = Desc(
    _PREFIX + "current_cp_session", "Current central point session", _LABELS
)
MAX_CP_SESSION = Desc(_PREFIX + "max_cp_session", "Maximum central point session", _LABELS)


@dataclass(frozen=True)
class PerformanceStatistics:
    """Performance figures of one services processing unit."""

    fpc_number: int = 0
    pic_number: int = 0
    cpu_utilization: int = 0
    memory_utilization: int = 0
    current_flow_session: int = 0
    max_flow_session: int = 0
    current_cp_session: int = 0
    max_cp_session: int = 0


@dataclass(frozen=True)
class RoutingEngine:
    """The performance statistics reported by one routing engine."""

    name: str
    statistics: list[PerformanceStatistics] = field(default_factory=list)


def _expect_reply(root: ET.Element) -> None:
    if root.tag != "rpc-reply":
        raise ValueError(f"expected element <rpc-reply> but have <{root.tag}>")


def _parse_summary(element: ET.Element | None) -> list[PerformanceStatistics]:
    if element is None:
        return []
    return [
        PerformanceStatistics(
            fpc_number=find_int(el, "fpc-number"),
            pic_number=find_int(el, "pic-number"),
            cpu_utilization=find_int(el, "spu-cpu-utilization"),
            memory_utilization=find_int(el, "spu-memory-utilization"),
            current_flow_session=find_int(el, "spu-current-flow-session"),
            max_flow_session=find_int(el, "spu-max-flow-session"),
            current_cp_session=find_int(el, "spu-current-cp-session"),
            max_cp_session=find_int(el, "spu-max-cp-session"),
        )
        for el in element.findall("performance-summary-statistics")
    ]


def parse_security_monitoring(data: bytes | str) -> list[RoutingEngine]:
    """Read the routing engines of a security monitoring reply.

    A reply of a single routing engine yields one engine named "N/A".
    """
    root = parse_xml(data)
    _expect_reply(root)
    if is_multi_routing_engine(data):
        return [
            RoutingEngine(
                name=find_text(item, "re-name"),
                statistics=_parse_summary(item.find("performance-summary-information")),
            )
            for item in root.findall("multi-routing-engine-results/multi-routing-engine-item")
        ]
    return [RoutingEngine("N/A", _parse_summary(root.find("performance-summary-information")))]


class SecurityCollector(RPCCollector):
    """Collects CPU, memory and session figures of every processing unit."""

    name = "Security"

    def describe(self) -> list[Desc]:
        return [
            FPC_NUMBER,
            PIC_NUMBER,
            CPU_UTILIZATION,
            MEMORY_UTILIZATION,
            CURRENT_FLOW_SESSION,
            MAX_FLOW_SESSION,
            CURRENT_CP_SESSION,
            MAX_CP_SESSION,
        ]

    def collect(self, client: Any, label_values: Sequence[str]) -> Iterator[Metric]:
        engines = client.run_command_and_parse(
            "show security monitoring", parse_security_monitoring
        )
        for engine in engines:
            labels = (*label_values, engine.name)
            for stats in engine.statistics:
                for desc, value in (
                    (FPC_NUMBER, stats.fpc_number),
                    (PIC_NUMBER, stats.pic_number),
                    (CPU_UTILIZATION, stats.cpu_utilization),
                    (MEMORY_UTILIZATION, stats.memory_utilization),
                    (CURRENT_FLOW_SESSION, stats.current_flow_session),
                    (MAX_FLOW_SESSION, stats.max_flow_session),
                    (CURRENT_CP_SESSION, stats.current_cp_session),
                    (MAX_CP_SESSION, stats.max_cp_session),
                ):
                    yield Metric(desc, ValueType.GAUGE, value, labels)