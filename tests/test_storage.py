import pytest

from junos_exporter.features.storage import (
    TOTAL_BLOCKS,
    USED_PERCENT,
    StorageCollector,
    parse_storage,
)

JUNOS_NS = "http://xml.example.com/junos"


def _fs(name, total, used, available, percent, mount):
    return (
        "<filesystem>"
        f"<filesystem-name>{name}</filesystem-name>"
        f'<total-blocks junos:format="x">{total}</total-blocks>'
        f'<used-blocks junos:format="x">{used}</used-blocks>'
        f'<available-blocks junos:format="x">{available}</available-blocks>'
        f"<used-percent>{percent}</used-percent>"
        f"<mounted-on>{mount}</mounted-on>"
        "</filesystem>"
    )


def _information(filesystems):
    return (
        '<system-storage-information junos:style="brief">'
        + "".join(filesystems)
        + "</system-storage-information>"
    )


def _reply(body, banner):
    return (
        f'<rpc-reply xmlns:junos="{JUNOS_NS}">'
        + body
        + f"<cli><banner>{banner}</banner></cli>"
        + "</rpc-reply>"
    )


def _multi(engines):
    items = "".join(
        f"<multi-routing-engine-item><re-name>{name}</re-name>{info}</multi-routing-engine-item>"
        for name, info in engines
    )
    return f"<multi-routing-engine-results>{items}</multi-routing-engine-results>"


MULTI_RE = _reply(
    _multi(
        [
            (
                "fpc0",
                _information(
                    [
                        _fs("/dev/gpt/junos", 2796512, 1667792, 905000, " 65", "/.mount"),
                        _fs("/dev/sda", 2796512, 1667792, 905000, " 6r75", "/"),
                    ]
                ),
            ),
            (
                "fpc1",
                _information(
                    [_fs("/dev/gpt/junos1", 2796512, 1667792, 905000, " 65", "/.mount")]
                ),
            ),
        ]
    ),
    "{master:0}",
)

SINGLE_RE = _reply(
    _information(
        [
            _fs("/dev/md0.uzip", 43628, 43628, 0, "100", "/"),
            _fs(
                "/var/log",
                44306520,
                23882504,
                16879496,
                " 59",
                "/.mount/packages/mnt/jweb-xxx/jail/var/log",
            ),
        ]
    ),
    "{backup}",
)


class FakeClient:
    def __init__(self, outputs):
        self.outputs = outputs

    def run_command_and_parse(self, cmd, parser):
        return parser(self.outputs[cmd])


def test_parse_multi_re_output():
    engines = parse_storage(MULTI_RE.encode())

    assert engines[0].filesystems
    assert engines[0].name == "fpc0"

    f = engines[0].filesystems[1]
    assert f.filesystem_name == "/dev/sda"
    assert f.total_blocks == 2796512
    assert f.used_blocks == 1667792
    assert f.mounted_on == "/"

    assert engines[1].name == "fpc1"
    f = engines[1].filesystems[0]
    assert f.filesystem_name == "/dev/gpt/junos1"
    assert f.total_blocks == 2796512
    assert f.used_blocks == 1667792
    assert f.mounted_on == "/.mount"


def test_parse_no_multi_re_output():
    engines = parse_storage(SINGLE_RE.encode())

    assert engines[0].filesystems
    assert engines[0].name == "N/A"

    f = engines[0].filesystems[1]
    assert f.filesystem_name == "/var/log"
    assert f.total_blocks == 44306520
    assert f.used_blocks == 23882504
    assert f.used_percent == " 59"
    assert f.mounted_on == "/.mount/packages/mnt/jweb-xxx/jail/var/log"


def test_parse_rejects_other_root():
    with pytest.raises(ValueError):
        parse_storage(b"<reply><system-storage-information/></reply>")


def test_collect_parses_percent_and_falls_back_to_zero():
    client = FakeClient({"show system storage": MULTI_RE.encode()})
    metrics = list(StorageCollector().collect(client, ["switch"]))

    assert len(metrics) == 12
    percents = [m for m in metrics if m.desc is USED_PERCENT]
    assert [m.value for m in percents] == [65.0, 0.0, 65.0]
    assert percents[1].labels() == {
        "target": "switch",
        "device": "/dev/sda",
        "re_name": "fpc0",
        "mountpoint": "/",
    }


def test_collect_single_engine_labels():
    client = FakeClient({"show system storage": SINGLE_RE})
    totals = [m for m in StorageCollector().collect(client, ["r"]) if m.desc is TOTAL_BLOCKS]
    assert [m.value for m in totals] == [43628.0, 44306520.0]
    assert all(m.labels()["re_name"] == "N/A" for m in totals)