"""EVPN VPWS instance metrics."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any

from ..metrics import Desc, Metric, RPCCollector, ValueType
from ..xmlutil import find_int, find_text, parse_xml

VPWS_STATUS = Desc(
    "junos_vpws_status",
    "vpws status (0: down, 1:up)",
    ("target", "vpwsinstance", "rd", "interface", "esi", "mode", "role"),
)
VPWS_SID = Desc(
    "junos_vpws_sid",
    "vpws sid (0: Unresolved, 1:Resolved)",
    ("target", "vpwsinstance", "rd", "interface", "sidorigin", "sid", "ip", "esi", "mode", "role"),
)

STATUS_VALUES = {"Down": 0, "Up": 1}
SID_VALUES = {"Unresolved": 0, "Resolved": 1}

_PE_INFO_PATH = "evpn-vpws-sid-pe-status-table/evpn-vpws-sid-pe-info"


@dataclass(frozen=True)
class SidPeInfo:
    """Status of a service identifier on one PE."""

    esi: str
    ip: str
    mode: str
    role: str
    status: str


@dataclass(frozen=True)
class VpwsInterface:
    """A VPWS interface with its local and remote service identifiers."""

    name: str
    esi: str
    mode: str
    role: str
    status: str
    local_sid: str = ""
    local_pe_info: list[SidPeInfo] = field(default_factory=list)
    remote_sid: str = ""
    remote_pe_info: list[SidPeInfo] = field(default_factory=list)


@dataclass(frozen=True)
class VpwsInstance:
    """A VPWS instance and its interfaces."""

    name: str
    rd: str
    local_interfaces: int
    local_interfaces_up: int
    interfaces: list[VpwsInterface] = field(default_factory=list)


def _parse_sid(element: ET.Element, path: str, value_tag: str) -> tuple[str, list[SidPeInfo]]:
    status = element.find(path)
    if status is None:
        return "", []
    pe_info = [
        SidPeInfo(
            esi=find_text(pe, "evpn-vpws-sid-interface-esi"),
            ip=find_text(pe, "evpn-vpws-sid-pe-ipaddr"),
            mode=find_text(pe, "evpn-vpws-sid-pe-mode"),
            role=find_text(pe, "evpn-vpws-sid-pe-role"),
            status=find_text(pe, "evpn-vpws-sid-pe-status"),
        )
        for pe in status.findall(_PE_INFO_PATH)
    ]
    return find_text(status, value_tag), pe_info


def _parse_interface(element: ET.Element) -> VpwsInterface:
    local_sid, local_pe = _parse_sid(
        element,
        "evpn-vpws-service-id-local-status-table/evpn-vpws-sid-local",
        "evpn-vpws-sid-local-value",
    )
    remote_sid, remote_pe = _parse_sid(
        element,
        "evpn-vpws-service-id-remote-status-table/evpn-vpws-sid-remote",
        "evpn-vpws-sid-remote-value",
    )
    return VpwsInterface(
        name=find_text(element, "evpn-vpws-interface-name"),
        esi=find_text(element, "evpn-vpws-interface-esi"),
        mode=find_text(element, "evpn-vpws-interface-mode"),
        role=find_text(element, "evpn-vpws-interface-role"),
        status=find_text(element, "evpn-vpws-interface-status"),
        local_sid=local_sid,
        local_pe_info=local_pe,
        remote_sid=remote_sid,
        remote_pe_info=remote_pe,
    )


def parse_vpws_instances(data: bytes | str) -> list[VpwsInstance]:
    """Read the instances of an EVPN VPWS reply."""
    root = parse_xml(data)
    return [
        VpwsInstance(
            name=find_text(inst, "evpn-vpws-instance-name"),
            rd=find_text(inst, "route-distinguisher"),
            local_interfaces=find_int(inst, "local-interfaces"),
            local_interfaces_up=find_int(inst, "local-interfaces-up"),
            interfaces=[
                _parse_interface(el)
                for el in inst.findall(
                    "evpn-vpws-interface-status-table/evpn-vpws-interface"
                )
            ],
        )
        for inst in root.findall("evpn-vpws-information/evpn-vpws-instance")
    ]


class VPWSCollector(RPCCollector):
    """Collects VPWS interface and service identifier status."""

    name = "vpws"

    def describe(self) -> list[Desc]:
        return [VPWS_STATUS, VPWS_SID]

    def collect(self, client: Any, label_values: Sequence[str]) -> Iterator[Metric]:
        instances = client.run_command_and_parse("show evpn vpws-instance", parse_vpws_instances)
        for inst in instances:
            for iface in inst.interfaces:
                labels = (
                    *label_values,
                    inst.name,
                    inst.rd,
                    iface.name,
                    iface.esi,
                    iface.mode,
                    iface.role,
                )
                yield Metric(
                    VPWS_STATUS, ValueType.GAUGE, STATUS_VALUES.get(iface.status, 0), labels
                )
                sides = (
                    ("local", iface.local_sid, iface.local_pe_info),
                    ("remote", iface.remote_sid, iface.remote_pe_info),
                )
                for origin, sid, pe_infos in sides:
                    for pe in pe_infos:
                        sid_labels = (
                            *label_values,
                            inst.name,
                            inst.rd,
                            iface.name,
                            origin,
                            sid,
                            pe.ip,
                            pe.esi,
                            pe.mode,
                            pe.role,
                        )
                        yield Metric(
                            VPWS_SID, ValueType.GAUGE, SID_VALUES.get(pe.status, 0), sid_labels
                        )