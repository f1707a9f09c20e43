"""File system storage metrics."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any

from ..metrics import Desc, Metric, RPCCollector, ValueType
from ..xmlutil import find_int, find_text, is_multi_routing_engine, parse_xml

_PREFIX = "junos_storage_"
_LABELS = ("target", "device", "re_name", "mountpoint")

TOTAL_BLOCKS = Desc(_PREFIX + "total_blocks_count", "Total number of blocks", _LABELS)
USED_BLOCKS = Desc(_PREFIX + "used_blocks_count", "Number of used blocks", _LABELS)
AVAILABLE_BLOCKS = Desc(_PREFIX + "available_blocks_count", "Number of available blocks", _LABELS)
USED_PERCENT = Desc(_PREFIX + "used_percent", "Percent of used storage", _LABELS)


@dataclass(frozen=True)
class Filesystem:
    """Usage of one mounted file system."""

    filesystem_name: str = ""
    total_blocks: int = 0
    used_blocks: int = 0
    available_blocks: int = 0
    used_percent: str = ""
    mounted_on: str = ""


@dataclass(frozen=True)
class RoutingEngine:
    """File systems reported by one routing engine."""

    name: str
    filesystems: list[Filesystem] = field(default_factory=list)


def _expect_reply(root: ET.Element) -> None:
    if root.tag != "rpc-reply":
        raise ValueError(f"expected element <rpc-reply> but have <{root.tag}>")


def _parse_filesystems(element: ET.Element | None) -> list[Filesystem]:
    if element is None:
        return []
    return [
        Filesystem(
            filesystem_name=find_text(fs, "filesystem-name"),
            total_blocks=find_int(fs, "total-blocks"),
            used_blocks=find_int(fs, "used-blocks"),
            available_blocks=find_int(fs, "available-blocks"),
            used_percent=find_text(fs, "used-percent"),
            mounted_on=find_text(fs, "mounted-on"),
        )
        for fs in element.findall("filesystem")
    ]


def parse_storage(data: bytes | str) -> list[RoutingEngine]:
    """Read the routing engines of a system storage reply.

    A reply of a single routing engine yields one engine named "N/A".
    """
    root = parse_xml(data)
    _expect_reply(root)
    if is_multi_routing_engine(data):
        return [
            RoutingEngine(
                name=find_text(item, "re-name"),
                filesystems=_parse_filesystems(item.find("system-storage-information")),
            )
            for item in root.findall("multi-routing-engine-results/multi-routing-engine-item")
        ]
    return [RoutingEngine("N/A", _parse_filesystems(root.find("system-storage-information")))]


def _percent(text: str) -> float:
    try:
        return float(text.strip())
    except ValueError:
        return 0.0


class StorageCollector(RPCCollector):
    """Collects block usage of every file system."""

    name = "Storage"

    def describe(self) -> list[Desc]:
        return [TOTAL_BLOCKS, USED_BLOCKS, AVAILABLE_BLOCKS, USED_PERCENT]

    def collect(self, client: Any, label_values: Sequence[str]) -> Iterator[Metric]:
        engines = client.run_command_and_parse("show system storage", parse_storage)
        for engine in engines:
            for fs in engine.filesystems:
                labels = (*label_values, fs.filesystem_name, engine.name, fs.mounted_on)
                yield Metric(TOTAL_BLOCKS, ValueType.GAUGE, fs.total_blocks, labels)
                yield Metric(USED_BLOCKS, ValueType.GAUGE, fs.used_blocks, labels)
                yield Metric(AVAILABLE_BLOCKS, ValueType.GAUGE, fs.available_blocks, labels)
                yield Metric(USED_PERCENT, ValueType.GAUGE, _percent(fs.used_percent), labels)