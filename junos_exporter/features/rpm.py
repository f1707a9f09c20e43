"""RPM probe result metrics."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any

from ..metrics import Desc, Metric, RPCCollector, ValueType
from ..xmlutil import find_float, find_int, find_text, parse_xml

_PREFIX = "junos_rpm_probe_results_"
_LABELS = ("target", "owner", "name", "address", "type", "interface")

TOTAL_SENT = Desc(
    _PREFIX + "sent_total", "Number of probes sent within the current test", _LABELS
)
TOTAL_RECEIVED = Desc(
    _PREFIX + "received_total",
    "Number of probe responses received within the current test",
    _LABELS,
)
CURRENT_LOSS_PERCENT = Desc(
    _PREFIX + "loss_percent_current",
    "Percentage of probes lost during the most recently completed test",
    _LABELS,
)
CURRENT_RTT_MIN = Desc(
    _PREFIX + "rtt_min_current",
    "Minimum RTT for the most recently completed test, in microseconds",
    _LABELS,
)
CURRENT_RTT_MAX = Desc(
    _PREFIX + "rtt_max_current",
    "Maximum RTT for the most recently completed test, in microseconds",
    _LABELS,
)
CURRENT_RTT_AVG = Desc(
    _PREFIX + "rtt_avg_current",
    "Average RTT for the most recently completed test, in microseconds",
    _LABELS,
)
CURRENT_RTT_JITTER = Desc(
    _PREFIX + "rtt_jitter_current", "Peak-to-peak difference, in microseconds", _LABELS
)
CURRENT_RTT_STDDEV = Desc(
    _PREFIX + "rtt_stddev_current", "Standard deviation, in microseconds", _LABELS
)
CURRENT_RTT_SUM = Desc(_PREFIX + "rtt_sum_current", "Statistical sum", _LABELS)


@dataclass(frozen=True)
class RttSummary:
    """Round trip time summary of a test."""

    samples: int = 0
    min: int = 0
    max: int = 0
    avg: int = 0
    jitter: int = 0
    stddev: int = 0
    sum: int = 0


@dataclass(frozen=True)
class GenericResults:
    """Results of a test over some scope."""

    scope: str = ""
    sent: int = 0
    responses: int = 0
    loss_percent: float = 0.0
    rtt: RttSummary = field(default_factory=RttSummary)


@dataclass(frozen=True)
class Probe:
    """An RPM probe test and its latest and global results."""

    owner: str = ""
    name: str = ""
    address: str = ""
    probe_type: str = ""
    interface: str = ""
    size: int = 0
    last: GenericResults = field(default_factory=GenericResults)
    global_results: GenericResults = field(default_factory=GenericResults)


def _parse_rtt(element: ET.Element | None) -> RttSummary:
    if element is None:
        return RttSummary()
    return RttSummary(
        samples=find_int(element, "samples"),
        min=find_int(element, "min-delay"),
        max=find_int(element, "max-delay"),
        avg=find_int(element, "avg-delay"),
        jitter=find_int(element, "jitter-delay"),
        stddev=find_int(element, "stddev-delay"),
        sum=find_int(element, "sum-delay"),
    )


def _parse_results(element: ET.Element, path: str) -> GenericResults:
    found = element.find(f"{path}/probe-test-generic-results")
    if found is None:
        return GenericResults()
    return GenericResults(
        scope=find_text(found, "results-scope"),
        sent=find_int(found, "probes-sent"),
        responses=find_int(found, "probe-responses"),
        loss_percent=find_float(found, "loss-percentage"),
        rtt=_parse_rtt(found.find("probe-test-rtt/probe-summary-results")),
    )


def parse_probe_results(data: bytes | str) -> list[Probe]:
    """Read the probes of an RPM probe results reply."""
    root = parse_xml(data)
    return [
        Probe(
            owner=find_text(el, "owner"),
            name=find_text(el, "test-name"),
            address=find_text(el, "target-address"),
            probe_type=find_text(el, "probe-type"),
            interface=find_text(el, "destination-interface"),
            size=find_int(el, "test-size"),
            last=_parse_results(el, "probe-last-test-results"),
            global_results=_parse_results(el, "probe-test-global-results"),
        )
        for el in root.findall("probe-results/probe-test-results")
    ]


class RPMCollector(RPCCollector):
    """Collects the results of every RPM probe."""

    name = "RPM"

    def describe(self) -> list[Desc]:
        return [
            TOTAL_SENT,
            TOTAL_RECEIVED,
            CURRENT_LOSS_PERCENT,
            CURRENT_RTT_MIN,
            CURRENT_RTT_MAX,
            CURRENT_RTT_AVG,
            CURRENT_RTT_JITTER,
            CURRENT_RTT_STDDEV,
            CURRENT_RTT_SUM,
        ]

    def collect(self, client: Any, label_values: Sequence[str]) -> Iterator[Metric]:
        probes = client.run_command_and_parse(
            "show services rpm probe-results", parse_probe_results
        )
        for probe in probes:
            labels = (
                *label_values,
                probe.owner,
                probe.name,
                probe.address,
                probe.probe_type,
                probe.interface,
            )
            rtt = probe.last.rtt
            for desc, value in (
                (TOTAL_SENT, probe.global_results.sent),
                (TOTAL_RECEIVED, probe.global_results.responses),
                (CURRENT_LOSS_PERCENT, probe.last.loss_percent),
                (CURRENT_RTT_MIN, rtt.min),
                (CURRENT_RTT_MAX, rtt.max),
                (CURRENT_RTT_AVG, rtt.avg),
                (CURRENT_RTT_JITTER, rtt.jitter),
                (CURRENT_RTT_STDDEV, rtt.stddev),
                (CURRENT_RTT_SUM, rtt.sum),
            ):
                yield Metric(desc, ValueType.GAUGE, value, labels)