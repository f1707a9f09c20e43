import pytest

from junos_exporter.features.system_buffers import (
    IO_INIT,
    JUMBO_CLUSTERS_CURRENT,
    MBUF_AND_CLUSTERS_DENIED,
    MBUFS_CURRENT,
    NETWORK_ALLOC_CURRENT,
    UNSUPPORTED_REPLY,
    MemoryStatistics,
    buffer_descriptions,
    buffer_metrics,
    parse_buffer_output,
    parse_buffers,
)

LINES = [
    "3216/15519/18735 mbufs in use (current/cache/total)",
    "3074/14458/17532/2039110 mbuf clusters in use (current/cache/total/max)",
    "3069/7557 mbuf+clusters out of packet secondary zone in use (current/cache)",
    "0/1101/1101/1019555 4k (page size) jumbo clusters in use (current/cache/total/max)",
    "5/6/7/8 9k (page size) jumbo clusters in use (current/cache/total/max)",
    "9/10/11/12 16k (page size) jumbo clusters in use (current/cache/total/max)",
    "6952K/37199K/44152K bytes allocated to network (current/cache/total)",
    "1/2/3 requests for mbufs denied (mbufs/clusters/mbuf+clusters)",
    "4/5/6 requests for jumbo clusters denied (4k/9k/16k)",
    "13 requests for sfbufs denied",
    "14 requests for sfbufs delayed",
    "15 requests for I/O initiated by sendfile",
]


def make_output(lines):
    return "\n" + "\n".join("    " + line for line in lines) + "\n"


OUTPUT = make_output(LINES)


def test_parse_buffer_output_reads_every_line():
    stats = parse_buffer_output(OUTPUT)
    assert (stats.mbufs_current, stats.mbufs_cache, stats.mbufs_total) == (3216, 15519, 18735)
    assert stats.mbuf_clusters_max == 2039110
    assert stats.mbuf_clusters_from_packet_zone_current == 3069
    assert stats.mbuf_clusters_from_packet_zone_cache == 7557
    assert stats.jumbo_clusters_cache_4k == 1101
    assert stats.jumbo_clusters_max_4k == 1019555
    assert (stats.jumbo_clusters_current_9k, stats.jumbo_clusters_max_9k) == (5, 8)
    assert (stats.jumbo_clusters_current_16k, stats.jumbo_clusters_max_16k) == (9, 12)
    assert stats.network_alloc_current == 6952
    assert stats.network_alloc_total == 44152
    assert (
        stats.jumbo_clusters_denied_4k,
        stats.jumbo_clusters_denied_9k,
        stats.jumbo_clusters_denied_16k,
    ) == (4, 5, 6)
    assert (stats.sfbufs_denied, stats.sfbufs_delayed, stats.io_init) == (13, 14, 15)


def test_denied_line_combined_count_takes_second_number():
    stats = parse_buffer_output(OUTPUT)
    assert stats.mbufs_denied == 1
    assert stats.mbuf_clusters_denied == 2
    assert stats.mbuf_and_clusters_denied == 2


def test_unmatched_line_keeps_default():
    lines = list(LINES)
    lines[0] = "no numbers here"
    stats = parse_buffer_output(make_output(lines))
    assert stats.mbufs_current == 0
    assert stats.mbuf_clusters_current == 3074


def test_too_short_output_raises():
    with pytest.raises(ValueError):
        parse_buffer_output(make_output(LINES[:5]))


def test_parse_buffers_unsupported_reply():
    assert parse_buffers(UNSUPPORTED_REPLY) is None
    assert parse_buffers(UNSUPPORTED_REPLY.encode()) is None


def test_parse_buffers_without_output_is_none():
    xml = "<rpc-reply><memory-statistics><current-mbufs>7</current-mbufs></memory-statistics></rpc-reply>"
    assert parse_buffers(xml) is None


def test_parse_buffers_from_reply_text():
    xml = f"<rpc-reply><output>{OUTPUT}</output></rpc-reply>"
    assert parse_buffers(xml.encode()) == parse_buffer_output(OUTPUT)


def test_parse_buffers_keeps_structured_value_for_unmatched_line():
    lines = list(LINES)
    lines[0] = "garbage"
    xml = (
        "<rpc-reply><output>"
        + make_output(lines)
        + "</output><memory-statistics><current-mbufs>7</current-mbufs>"
        "<io-initiated>99</io-initiated></memory-statistics></rpc-reply>"
    )
    stats = parse_buffers(xml)
    assert stats.mbufs_current == 7
    assert stats.io_init == 15


def test_parse_buffers_invalid_xml():
    with pytest.raises(ValueError):
        parse_buffers("<rpc-reply>")


def test_buffer_metrics_order_and_labels():
    stats = parse_buffer_output(OUTPUT)
    metrics = list(buffer_metrics(stats, ["router1"]))
    assert len(metrics) == 33
    assert metrics[0].desc is MBUFS_CURRENT
    assert metrics[0].value == 3216.0
    jumbo = [m for m in metrics if m.desc is JUMBO_CLUSTERS_CURRENT]
    assert [m.labels()["page_size"] for m in jumbo] == ["4k", "9k", "16k"]
    assert [m.value for m in jumbo] == [0.0, 5.0, 9.0]
    by_desc = {m.desc: m for m in metrics if m.desc.label_names == ("target",)}
    assert by_desc[MBUF_AND_CLUSTERS_DENIED].value == 2.0
    assert by_desc[IO_INIT].value == 15.0
    assert by_desc[NETWORK_ALLOC_CURRENT].value == 6952 * 1024
    assert by_desc[NETWORK_ALLOC_CURRENT].labels() == {"target": "router1"}


def test_buffer_metrics_of_empty_statistics_are_zero():
    metrics = list(buffer_metrics(MemoryStatistics(), ["t"]))
    assert all(m.value == 0.0 for m in metrics)


def test_descriptions_cover_emitted_metrics():
    described = set(buffer_descriptions())
    emitted = {m.desc for m in buffer_metrics(MemoryStatistics(), ["t"])}
    assert emitted - described == {MBUF_AND_CLUSTERS_DENIED}
    assert described <= emitted
    names = [d.name for d in buffer_descriptions()]
    assert len(names) == len(set(names))
    assert "junos_system_mbufs_and_clusters_denied_count" in names