"""Subscriber detail metrics."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from ..metrics import Desc, Metric, RPCCollector, ValueType
from ..xmlutil import find_text, parse_xml

log = logging.getLogger(__name__)

SUBSCRIBER_INFO = Desc(
    "junos_subscriber_info",
    "Subscriber Detail",
    ("target", "interface", "agent_circuit_id", "agent_remote_id", "underlying_ifd"),
)

DEFAULT_MAX_DEPTH = 2


@dataclass(frozen=True)
class Subscriber:
    """A subscriber session."""

    access_type: str = ""
    interface: str = ""
    agent_circuit_id: str = ""
    agent_remote_id: str = ""
    underlying_interface: str = ""


@dataclass(frozen=True)
class LogicalInterface:
    """A demux logical interface and the interface it runs over."""

    name: str = ""
    demux_underlying_if_name: str = ""


def parse_subscribers(data: bytes | str) -> list[Subscriber]:
    """Read the subscribers of a subscriber detail reply."""
    root = parse_xml(data)
    return [
        Subscriber(
            access_type=find_text(el, "access-type"),
            interface=find_text(el, "interface"),
            agent_circuit_id=find_text(el, "agent-circuit-id"),
            agent_remote_id=find_text(el, "agent-remote-id"),
            underlying_interface=find_text(el, "underlying-interface"),
        )
        for el in root.findall("subscribers-information/subscriber")
    ]


def parse_logical_interfaces(data: bytes | str) -> list[LogicalInterface]:
    """Read the logical interfaces of an interface reply."""
    root = parse_xml(data)
    return [
        LogicalInterface(
            name=find_text(el, "name"),
            demux_underlying_if_name=find_text(
                el, "demux-information/demux-interface/demux-underlying-interface-name"
            ),
        )
        for el in root.findall("interface-information/physical-interface/logical-interface")
    ]


def get_logical_interface_map(client: Any) -> dict[str, str]:
    """Map every demux logical interface to its underlying interface."""
    interfaces = client.run_command_and_parse(
        "show interfaces demux0 brief", parse_logical_interfaces
    )
    return {li.name: li.demux_underlying_if_name for li in interfaces}


def find_underlying_interface(
    if_name: str, logical_map: Mapping[str, str], max_depth: int = DEFAULT_MAX_DEPTH
) -> str:
    """Follow demux interfaces down to the physical interface.

    Raises LookupError when the chain breaks or is deeper than max_depth.
    """
    while if_name.startswith("demux"):
        if max_depth < 0:
            raise LookupError("no underlying interface found, max threshold reached")
        try:
            if_name = logical_map[if_name]
        except KeyError:
            raise LookupError("no underlying interface found") from None
        max_depth -= 1
    return if_name


class SubscriberCollector(RPCCollector):
    """Collects one info metric per DHCP subscriber."""

    name = "Subscriber Detail"

    def describe(self) -> list[Desc]:
        return [SUBSCRIBER_INFO]

    def collect(self, client: Any, label_values: Sequence[str]) -> Iterator[Metric]:
        subscribers = client.run_command_and_parse(
            "show subscribers client-type dhcp detail", parse_subscribers
        )
        logical_map = get_logical_interface_map(client)
        for sub in subscribers:
            try:
                underlying = find_underlying_interface(sub.underlying_interface, logical_map)
            except LookupError as exc:
                log.warning("%s", exc)
                underlying = ""
            labels = (
                *label_values,
                sub.interface,
                sub.agent_circuit_id,
                sub.agent_remote_id,
                underlying,
            )
            yield Metric(SUBSCRIBER_INFO, ValueType.COUNTER, 1, labels)