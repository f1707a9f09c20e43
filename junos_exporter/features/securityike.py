"""Security IKE active peer metrics."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections import Counter
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any

from ..metrics import Desc, Metric, RPCCollector, ValueType
from ..xmlutil import find_int, find_text, is_multi_routing_engine, parse_xml

CONNECTED_ACTIVE_USERS = Desc(
    "junos_security_ike_connected_active_users",
    "Number of connected active users",
    (
        "target",
        "re_name",
        "remote_address",
        "remote_port",
        "ike_id",
        "x_auth_username",
        "x_auth_user_assigned_ip",
    ),
)


@dataclass(frozen=True)
class IKEActivePeer:
    """An active IKE peer."""

    remote_address: str = ""
    remote_port: int = 0
    ike_id: str = ""
    xauth_username: str = ""
    xauth_user_assigned_ip: str = ""


@dataclass(frozen=True)
class RoutingEngine:
    """The active IKE peers reported by one routing engine."""

    name: str
    peers: list[IKEActivePeer] = field(default_factory=list)


def _expect_reply(root: ET.Element) -> None:
    if root.tag != "rpc-reply":
        raise ValueError(f"expected element <rpc-reply> but have <{root.tag}>")


def _parse_peers(element: ET.Element | None) -> list[IKEActivePeer]:
    if element is None:
        return []
    return [
        IKEActivePeer(
            remote_address=find_text(el, "ike-sa-remote-address"),
            remote_port=find_int(el, "ike-sa-remote-port"),
            ike_id=find_text(el, "ike-ike-id"),
            xauth_username=find_text(el, "ike-xauth-username"),
            xauth_user_assigned_ip=find_text(el, "ike-xauth-user-assigned-ip"),
        )
        for el in element.findall("ike-active-peers")
    ]


def parse_active_peers(data: bytes | str) -> list[RoutingEngine]:
    """Read the routing engines of an IKE active peer reply.

    A reply of a single routing engine yields one engine named "N/A".
    """
    root = parse_xml(data)
    _expect_reply(root)
    if is_multi_routing_engine(data):
        return [
            RoutingEngine(
                name=find_text(item, "re-name"),
                peers=_parse_peers(item.find("ike-active-peers-information")),
            )
            for item in root.findall("multi-routing-engine-results/multi-routing-engine-item")
        ]
    return [RoutingEngine("N/A", _parse_peers(root.find("ike-active-peers-information")))]


class SecurityIKECollector(RPCCollector):
    """Collects connected IKE users per routing engine."""

    name = "Security IKE"

    def describe(self) -> list[Desc]:
        return [CONNECTED_ACTIVE_USERS]

    def collect(self, client: Any, label_values: Sequence[str]) -> Iterator[Metric]:
        engines = client.run_command_and_parse(
            "show security ike active-peer", parse_active_peers
        )
        for engine in engines:
            counters: Counter[str] = Counter()
            for peer in engine.peers:
                port = str(peer.remote_port)
                key = (
                    peer.remote_address
                    + port
                    + peer.ike_id
                    + peer.xauth_username
                    + peer.xauth_user_assigned_ip
                )
                counters[key] += 1
                labels = (
                    *label_values,
                    engine.name,
                    peer.remote_address,
                    port,
                    peer.ike_id,
                    peer.xauth_username,
                    peer.xauth_user_assigned_ip,
                )
                yield Metric(CONNECTED_ACTIVE_USERS, ValueType.GAUGE, counters[key], labels)