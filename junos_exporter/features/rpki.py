"""RPKI validation session and statistics metrics."""

from __future__ import annotations

import enum
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Any

from ..metrics import Desc, Metric, RPCCollector, ValueType
from ..xmlutil import find_int, find_text, parse_xml

_PREFIX = "junos_rpki_"
_STATS_PREFIX = _PREFIX + "statistics_"
_SESSION_LABELS = ("target", "ip")
_STATS_LABELS = ("target",)

SESSION_STATE = Desc(
    _PREFIX + "session_state",
    "Session is (0 = Down, 1 = Up, 2 = Connect, 3 = Ex-Incr, 4 = Ex-Start, 5 = Ex-Full)",
    _SESSION_LABELS,
)
SESSION_FLAPS = Desc(_PREFIX + "session_flap_count", "Number of session flaps", _SESSION_LABELS)
IPV4_PREFIX_COUNT = Desc(
    _PREFIX + "session_ipv4_prefix_count",
    "Number of IPv4 route validation records",
    _SESSION_LABELS,
)
IPV6_PREFIX_COUNT = Desc(
    _PREFIX + "session_ipv6_prefix_count",
    "Number of IPv6 route validation records",
    _SESSION_LABELS,
)
MEMORY_UTILIZATION = Desc(
    _STATS_PREFIX + "memory", "Memory utilization of RV database (in bytes)", _STATS_LABELS
)
ORIGIN_RESULTS_VALID = Desc(
    _STATS_PREFIX + "origin_valid", "Origin validation result of valid", _STATS_LABELS
)
ORIGIN_RESULTS_INVALID = Desc(
    _STATS_PREFIX + "origin_invalid", "Origin validation result of invalid", _STATS_LABELS
)
ORIGIN_RESULTS_UNKNOWN = Desc(
    _STATS_PREFIX + "origin_unknown", "Origin validation result of unknown", _STATS_LABELS
)


class SessionState(enum.IntEnum):
    """State of a validation session as exported."""

    DOWN = 0
    UP = 1
    CONNECT = 2
    EX_START = 3
    EX_INCR = 4
    EX_FULL = 5


_STATE_BY_TEXT = {
    "Up": SessionState.UP,
    "Connect": SessionState.CONNECT,
    "Ex-Start": SessionState.EX_START,
    "Ex-Incr": SessionState.EX_INCR,
    "Ex-Full": SessionState.EX_FULL,
}


@dataclass(frozen=True)
class Session:
    """A session to an RPKI validation server."""

    ip_address: str = ""
    state: str = ""
    flaps: int = 0
    ipv4_prefix_count: int = 0
    ipv6_prefix_count: int = 0


@dataclass(frozen=True)
class Statistics:
    """Statistics of the route validation database."""

    record_count: int = 0
    replication_record_count: int = 0
    prefix_count: int = 0
    origin_as_count: int = 0
    memory_utilization: int = 0
    origin_results_valid: int = 0
    origin_results_invalid: int = 0
    origin_results_unknown: int = 0


def parse_sessions(data: bytes | str) -> list[Session]:
    """Read the sessions of a validation session reply."""
    root = parse_xml(data)
    return [
        Session(
            ip_address=find_text(el, "ip-address"),
            state=find_text(el, "session-state"),
            flaps=find_int(el, "session-flaps"),
            ipv4_prefix_count=find_int(el, "ip-prefix-count"),
            ipv6_prefix_count=find_int(el, "ip6-prefix-count"),
        )
        for el in root.findall("rv-session-information/rv-session")
    ]


def parse_statistics(data: bytes | str) -> Statistics:
    """Read the statistics of a validation statistics reply."""
    root = parse_xml(data)
    el = root.find("rv-statistics-information/rv-statistics")
    if el is None:
        return Statistics()
    return Statistics(
        record_count=find_int(el, "rv-record-count"),
        replication_record_count=find_int(el, "rv-replication-record-count"),
        prefix_count=find_int(el, "rv-prefix-count"),
        origin_as_count=find_int(el, "rv-origin-as-count"),
        memory_utilization=find_int(el, "rv-memory-utilization"),
        origin_results_valid=find_int(el, "rv-policy-origin-validation-results-valid"),
        origin_results_invalid=find_int(el, "rv-policy-origin-validation-results-invalid"),
        origin_results_unknown=find_int(el, "rv-policy-origin-validation-results-unknown"),
    )


class RPKICollector(RPCCollector):
    """Collects RPKI session and validation statistics metrics."""

    name = "RPKI"

    def describe(self) -> list[Desc]:
        return [
            SESSION_STATE,
            SESSION_FLAPS,
            IPV4_PREFIX_COUNT,
            IPV6_PREFIX_COUNT,
            MEMORY_UTILIZATION,
            ORIGIN_RESULTS_VALID,
            ORIGIN_RESULTS_INVALID,
            ORIGIN_RESULTS_UNKNOWN,
        ]

    def collect(self, client: Any, label_values: Sequence[str]) -> Iterator[Metric]:
        sessions = client.run_command_and_parse("show validation session", parse_sessions)
        for session in sessions:
            yield from self.collect_for_session(session, label_values)

        stats = client.run_command_and_parse("show validation statistics", parse_statistics)
        labels = tuple(label_values)
        yield Metric(MEMORY_UTILIZATION, ValueType.GAUGE, stats.memory_utilization, labels)
        yield Metric(ORIGIN_RESULTS_VALID, ValueType.GAUGE, stats.origin_results_valid, labels)
        yield Metric(
            ORIGIN_RESULTS_INVALID, ValueType.GAUGE, stats.origin_results_invalid, labels
        )
        yield Metric(
            ORIGIN_RESULTS_UNKNOWN, ValueType.GAUGE, stats.origin_results_unknown, labels
        )

    def collect_for_session(
        self, session: Session, label_values: Sequence[str]
    ) -> Iterator[Metric]:
        """Yield the metrics of one session, its state first."""
        labels = (*label_values, session.ip_address)
        state = _STATE_BY_TEXT.get(session.state, SessionState.DOWN)
        yield Metric(SESSION_STATE, ValueType.GAUGE, int(state), labels)
        yield Metric(SESSION_FLAPS, ValueType.GAUGE, session.flaps, labels)
        yield Metric(IPV4_PREFIX_COUNT, ValueType.GAUGE, session.ipv4_prefix_count, labels)
        yield Metric(IPV6_PREFIX_COUNT, ValueType.GAUGE, session.ipv6_prefix_count, labels)