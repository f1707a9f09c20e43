"""VRRP state metrics."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Any

from ..metrics import Desc, Metric, RPCCollector, ValueType
from ..xmlutil import find_text, parse_xml

VRRP_STATE = Desc(
    "junos_vrrp_state",
    "VRRP state (1: init, 2: backup, 3: master)",
    ("target", "interface", "group", "local_interface_address", "virtual_ip_address"),
)

STATE_VALUES = {"init": 1, "backup": 2, "master": 3}


@dataclass(frozen=True)
class VrrpInterface:
    """One VRRP group on an interface."""

    interface: str
    interface_state: str
    group: str
    vrrp_state: str
    vrrp_mode: str
    local_interface_address: str
    virtual_ip_address: str


def parse_vrrp_summary(data: bytes | str) -> list[VrrpInterface]:
    """Read the interfaces of a VRRP summary reply."""
    root = parse_xml(data)
    return [
        VrrpInterface(
            interface=find_text(el, "interface"),
            interface_state=find_text(el, "interface-state"),
            group=find_text(el, "group"),
            vrrp_state=find_text(el, "vrrp-state"),
            vrrp_mode=find_text(el, "vrrp-mode"),
            local_interface_address=find_text(el, "local-interface-address"),
            virtual_ip_address=find_text(el, "virtual-ip-address"),
        )
        for el in root.findall("vrrp-information/vrrp-interface")
    ]


class VRRPCollector(RPCCollector):
    """Collects the VRRP state of every group."""

    name = "VRRP"

    def describe(self) -> list[Desc]:
        return [VRRP_STATE]

    def collect(self, client: Any, label_values: Sequence[str]) -> Iterator[Metric]:
        interfaces = client.run_command_and_parse("show vrrp summary", parse_vrrp_summary)
        for iface in interfaces:
            labels = (
                *label_values,
                iface.interface,
                iface.group,
                iface.local_interface_address,
                iface.virtual_ip_address,
            )
            yield Metric(
                VRRP_STATE, ValueType.GAUGE, STATE_VALUES.get(iface.vrrp_state, 0), labels
            )