"""Memory buffer statistics of the system."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, fields, replace

from ..metrics import Desc, Metric, ValueType
from ..xmlutil import find_int, find_text, parse_xml

log = logging.getLogger(__name__)

_PREFIX = "junos_system_"
_LABELS = ("target",)
_PAGE_LABELS = ("target", "page_size")

UNSUPPORTED_REPLY = "\nerror: syntax error, expecting <command>: buffers\n"

MBUFS_CURRENT = Desc(_PREFIX + "mbufs_bytes_current", "Current number of bytes in mbufs", _LABELS)
MBUFS_CACHE = Desc(_PREFIX + "mbufs_bytes_cache", "Cached number of bytes in mbufs", _LABELS)
MBUFS_TOTAL = Desc(_PREFIX + "mbufs_bytes_total", "Total nuumber of bytes in mbufs", _LABELS)
MBUFS_DENIED = Desc(_PREFIX + "mbufs_denied_count", "Number of mbuf requests denied", _LABELS)

MBUF_CLUSTERS_CURRENT = Desc(
    _PREFIX + "mbuf_cluster_bytes_current", "Current number of bytes in mbuf clusters", _LABELS
)
MBUF_CLUSTERS_CACHE = Desc(
    _PREFIX + "mbuf_cluster_bytes_cache", "Cached number of bytes in mbuf clusters", _LABELS
)
MBUF_CLUSTERS_TOTAL = Desc(
    _PREFIX + "mbuf_cluster_bytes_total", "Total number of bytes in mbuf clusters", _LABELS
)
MBUF_CLUSTERS_MAX = Desc(
    _PREFIX + "mbuf_cluster_bytes_max", "Max number of bytes in mbuf clusters", _LABELS
)
MBUF_CLUSTERS_DENIED = Desc(_PREFIX + "mbufs_and_clusters_denied_count", "", _LABELS)

PACKET_ZONE_CURRENT = Desc(
    _PREFIX + "mbuf_and_clusters_from_packet_zone_bytes_current",
    "Current number of bytes used for mbuf+clusters in packet zone",
    _LABELS,
)
PACKET_ZONE_CACHE = Desc(
    _PREFIX + "mbuf_and_clusters_from_packet_zone_bytes_cache",
    "Cached number of bytes used for mbuf+clusters in packet zone",
    _LABELS,
)

JUMBO_CLUSTERS_CURRENT = Desc(
    _PREFIX + "jumbo_clusters_current", "Current jumbo clusters in use.", _PAGE_LABELS
)
JUMBO_CLUSTERS_CACHE = Desc(
    _PREFIX + "jumbo_clusters_cache", "Cached jumbo clusters in use", _PAGE_LABELS
)
JUMBO_CLUSTERS_TOTAL = Desc(
    _PREFIX + "jumbo_clusters_total", "Total jumbo clusters in use", _PAGE_LABELS
)
JUMBO_CLUSTERS_MAX = Desc(_PREFIX + "jumbo_clusters_max", "Max jumbo clusters in use", _PAGE_LABELS)
JUMBO_CLUSTERS_DENIED = Desc(
    _PREFIX + "jumbo_clusters_denied_count",
    "Number of jumbo cluster requests denied",
    _PAGE_LABELS,
)

NETWORK_ALLOC_CURRENT = Desc(
    _PREFIX + "network_allocated_bytes_current",
    "Current number of bytes allocated for network",
    _LABELS,
)
NETWORK_ALLOC_CACHE = Desc(
    _PREFIX + "network_allocated_bytes_cache",
    "Cached number of bytes allocated for network",
    _LABELS,
)
NETWORK_ALLOC_TOTAL = Desc(
    _PREFIX + "network_allocated_bytes_total",
    "Total number of bytes allocated for network",
    _LABELS,
)

SFBUFS_DENIED = Desc(_PREFIX + "sfbufs_denied_count", "Number of sfbuf requests denied", _LABELS)
SFBUFS_DELAYED = Desc(
    _PREFIX + "sfbufs_delayed_count", "Number of sfbuf requests delayed", _LABELS
)
IO_INIT = Desc(_PREFIX + "io_requests_count", "Number of I/O requests initiated", _LABELS)
MBUF_AND_CLUSTERS_DENIED = Desc(
    _PREFIX + "mbuf_and_clusters_denied_count",
    "Number of mbuf+cluster requests denied",
    _LABELS,
)

_REGEX_1 = re.compile(r"^(\d+).*", re.ASCII)
_REGEX_2 = re.compile(r"^(\d+)/(\d+).*", re.ASCII)
_REGEX_3 = re.compile(r"^(\d+)/(\d+)/(\d+).*", re.ASCII)
_REGEX_4 = re.compile(r"^(\d+)/(\d+)/(\d+)/(\d+).*", re.ASCII)
_REGEX_NETWORK_ALLOC = re.compile(r"^(\d+)K/(\d+)K/(\d+)K.*", re.ASCII)

_PAGE_SIZES = ("4k", "9k", "16k")


@dataclass(frozen=True)
class MemoryStatistics:
    """Buffer and cluster usage of the system."""

    mbufs_current: int = 0
    mbufs_cache: int = 0
    mbufs_total: int = 0
    mbufs_denied: int = 0
    mbuf_clusters_current: int = 0
    mbuf_clusters_cache: int = 0
    mbuf_clusters_total: int = 0
    mbuf_clusters_max: int = 0
    mbuf_clusters_denied: int = 0
    mbuf_clusters_from_packet_zone_current: int = 0
    mbuf_clusters_from_packet_zone_cache: int = 0
    jumbo_clusters_current_4k: int = 0
    jumbo_clusters_cache_4k: int = 0
    jumbo_clusters_total_4k: int = 0
    jumbo_clusters_max_4k: int = 0
    jumbo_clusters_denied_4k: int = 0
    jumbo_clusters_current_9k: int = 0
    jumbo_clusters_cache_9k: int = 0
    jumbo_clusters_total_9k: int = 0
    jumbo_clusters_max_9k: int = 0
    jumbo_clusters_denied_9k: int = 0
    jumbo_clusters_current_16k: int = 0
    jumbo_clusters_cache_16k: int = 0
    jumbo_clusters_total_16k: int = 0
    jumbo_clusters_max_16k: int = 0
    jumbo_clusters_denied_16k: int = 0
    network_alloc_current: int = 0
    network_alloc_cache: int = 0
    network_alloc_total: int = 0
    sfbufs_denied: int = 0
    sfbufs_delayed: int = 0
    mbuf_and_clusters_denied: int = 0
    io_init: int = 0


_XML_TAGS = {
    "mbufs_current": "current-mbufs",
    "mbufs_cache": "cached-mbufs",
    "mbufs_total": "total-mbufs",
    "mbufs_denied": "mbuf-failures",
    "mbuf_clusters_current": "current-mbuf-clusters",
    "mbuf_clusters_cache": "cached-mbuf-clusters",
    "mbuf_clusters_total": "total-mbuf-clusters",
    "mbuf_clusters_max": "max-mbuf-clusters",
    "mbuf_clusters_denied": "cluster-failures",
    "mbuf_clusters_from_packet_zone_current": "packet-count",
    "mbuf_clusters_from_packet_zone_cache": "packet-free",
    **{
        f"jumbo_clusters_{kind}_{size}": f"{tag}-jumbo-clusters-{size}"
        for size in _PAGE_SIZES
        for kind, tag in (
            ("current", "current"),
            ("cache", "cached"),
            ("total", "total"),
            ("max", "max"),
        )
    },
    **{f"jumbo_clusters_denied_{size}": f"jumbo-cluster-failures-{size}" for size in _PAGE_SIZES},
    "network_alloc_current": "current-bytes-in-use",
    "network_alloc_cache": "cached-bytes",
    "network_alloc_total": "total-bytes",
    "sfbufs_denied": "sfbuf-requests-denied",
    "sfbufs_delayed": "sfbuf-requests-delayed",
    "mbuf_and_clusters_denied": "packet-failures",
    "io_init": "io-initiated",
}

# Pattern for each line of the textual output and the fields its numbers go to.
_LINE_FIELDS: tuple[tuple[re.Pattern[str], tuple[str, ...]], ...] = (
    (_REGEX_3, ("mbufs_current", "mbufs_cache", "mbufs_total")),
    (
        _REGEX_4,
        ("mbuf_clusters_current", "mbuf_clusters_cache", "mbuf_clusters_total", "mbuf_clusters_max"),
    ),
    (
        _REGEX_2,
        ("mbuf_clusters_from_packet_zone_current", "mbuf_clusters_from_packet_zone_cache"),
    ),
    *(
        (
            _REGEX_4,
            tuple(f"jumbo_clusters_{kind}_{size}" for kind in ("current", "cache", "total", "max")),
        )
        for size in _PAGE_SIZES
    ),
    (
        _REGEX_NETWORK_ALLOC,
        ("network_alloc_current", "network_alloc_cache", "network_alloc_total"),
    ),
    (_REGEX_3, ("jumbo_clusters_denied_4k", "jumbo_clusters_denied_9k", "jumbo_clusters_denied_16k")),
    (_REGEX_1, ("sfbufs_denied",)),
    (_REGEX_1, ("sfbufs_delayed",)),
    (_REGEX_1, ("io_init",)),
)
_DENIED_LINE = 7
_LINE_COUNT = 12


def _apply_output(text: str, base: MemoryStatistics) -> MemoryStatistics:
    lines = [line.strip() for line in text.split("\n")][1:-1]
    if len(lines) < _LINE_COUNT:
        raise ValueError(
            f"unexpected buffer output: expected {_LINE_COUNT} lines, got {len(lines)}"
        )

    updates: dict[str, int] = {}
    numbered = [*_LINE_FIELDS[:_DENIED_LINE], None, *_LINE_FIELDS[_DENIED_LINE:]]
    for line, spec in zip(lines, numbered):
        if spec is None:
            # "mbufs/clusters/mbuf+clusters" denied; the combined count takes the second number
            match = _REGEX_3.match(line)
            if match:
                updates["mbufs_denied"] = int(match.group(1))
                updates["mbuf_clusters_denied"] = int(match.group(2))
                updates["mbuf_and_clusters_denied"] = int(match.group(2))
            continue
        pattern, names = spec
        match = pattern.match(line)
        if match:
            updates.update(zip(names, (int(g) for g in match.groups())))
    return replace(base, **updates)


def parse_buffer_output(text: str) -> MemoryStatistics:
    """Read the textual output of the buffers command.

    Lines that do not match their expected form leave their fields at 0.
    Raises ValueError when the output has too few lines.
    """
    return _apply_output(text, MemoryStatistics())


def parse_buffers(data: bytes | str) -> MemoryStatistics | None:
    """Read a system buffers reply.

    Returns None when the device does not support the command or the reply
    holds no textual output.
    """
    text = data.decode("utf-8", errors="replace") if isinstance(data, bytes) else data
    if text == UNSUPPORTED_REPLY:
        log.debug("system doesn't support system buffers command")
        return None

    root = parse_xml(data)
    output = find_text(root, "output")
    if output == "":
        return None

    element = root.find("memory-statistics")
    base = MemoryStatistics()
    if element is not None:
        base = MemoryStatistics(
            **{attr: find_int(element, tag) for attr, tag in _XML_TAGS.items()}
        )
    return _apply_output(output, base)


def buffer_descriptions() -> list[Desc]:
    """Return the descriptions the system collector announces for buffers."""
    return [
        MBUFS_CURRENT,
        MBUFS_CACHE,
        MBUFS_TOTAL,
        MBUFS_DENIED,
        MBUF_CLUSTERS_CURRENT,
        MBUF_CLUSTERS_CACHE,
        MBUF_CLUSTERS_TOTAL,
        MBUF_CLUSTERS_MAX,
        MBUF_CLUSTERS_DENIED,
        PACKET_ZONE_CURRENT,
        PACKET_ZONE_CACHE,
        JUMBO_CLUSTERS_CURRENT,
        JUMBO_CLUSTERS_CACHE,
        JUMBO_CLUSTERS_TOTAL,
        JUMBO_CLUSTERS_MAX,
        JUMBO_CLUSTERS_DENIED,
        NETWORK_ALLOC_CURRENT,
        NETWORK_ALLOC_CACHE,
        NETWORK_ALLOC_TOTAL,
        SFBUFS_DENIED,
        SFBUFS_DELAYED,
        IO_INIT,
    ]


def buffer_metrics(stats: MemoryStatistics, label_values: Sequence[str]) -> Iterator[Metric]:
    """Yield the buffer metrics of stats; network allocations in bytes."""
    labels = tuple(label_values)
    gauge = ValueType.GAUGE

    for desc, value in (
        (MBUFS_CURRENT, stats.mbufs_current),
        (MBUFS_CACHE, stats.mbufs_cache),
        (MBUFS_TOTAL, stats.mbufs_total),
        (MBUFS_DENIED, stats.mbufs_denied),
        (MBUF_CLUSTERS_CURRENT, stats.mbuf_clusters_current),
        (MBUF_CLUSTERS_CACHE, stats.mbuf_clusters_cache),
        (MBUF_CLUSTERS_TOTAL, stats.mbuf_clusters_total),
        (MBUF_CLUSTERS_MAX, stats.mbuf_clusters_max),
        (MBUF_CLUSTERS_DENIED, stats.mbuf_clusters_denied),
        (PACKET_ZONE_CURRENT, stats.mbuf_clusters_from_packet_zone_current),
        (PACKET_ZONE_CACHE, stats.mbuf_clusters_from_packet_zone_cache),
    ):
        yield Metric(desc, gauge, value, labels)

    for size in _PAGE_SIZES:
        page_labels = (*labels, size)
        for desc, kind in (
            (JUMBO_CLUSTERS_CURRENT, "current"),
            (JUMBO_CLUSTERS_CACHE, "cache"),
            (JUMBO_CLUSTERS_TOTAL, "total"),
            (JUMBO_CLUSTERS_MAX, "max"),
            (JUMBO_CLUSTERS_DENIED, "denied"),
        ):
            yield Metric(desc, gauge, getattr(stats, f"jumbo_clusters_{kind}_{size}"), page_labels)

    for desc, value in (
        (SFBUFS_DENIED, stats.sfbufs_denied),
        (SFBUFS_DELAYED, stats.sfbufs_delayed),
        (MBUF_AND_CLUSTERS_DENIED, stats.mbuf_and_clusters_denied),
        (IO_INIT, stats.io_init),
        (NETWORK_ALLOC_CURRENT, stats.network_alloc_current * 1024),
        (NETWORK_ALLOC_CACHE, stats.network_alloc_cache * 1024),
        (NETWORK_ALLOC_TOTAL, stats.network_alloc_total * 1024),
    ):
        yield Metric(desc, gauge, value, labels)


assert set(_XML_TAGS) == {f.name for f in fields(MemoryStatistics)}