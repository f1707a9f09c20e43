import pytest

from junos_exporter.features.ospf import (
    OSPF3_UP,
    OSPF_NEIGHBORS,
    OSPF_UP,
    Area,
    OSPFCollector,
    parse_areas,
)

V2 = """<rpc-reply xmlns:junos="http://example.com/junos">
  <ospf-overview-information xmlns="http://example.com/junos-routing">
    <ospf-overview>
      <ospf-area-overview>
        <ospf-area>0.0.0.0</ospf-area>
        <ospf-nbr-overview><ospf-nbr-up-count>3</ospf-nbr-up-count></ospf-nbr-overview>
      </ospf-area-overview>
      <ospf-area-overview>
        <ospf-area>0.0.0.1</ospf-area>
        <ospf-nbr-overview><ospf-nbr-up-count>1</ospf-nbr-up-count></ospf-nbr-overview>
      </ospf-area-overview>
    </ospf-overview>
  </ospf-overview-information>
</rpc-reply>"""

V3_EMPTY = "<rpc-reply><ospf3-overview-information><ospf-overview/></ospf3-overview-information></rpc-reply>"


class FakeClient:
    def __init__(self, responses):
        self.responses = responses
        self.commands = []

    def run_command_and_parse(self, cmd, parser):
        self.commands.append(cmd)
        reply = self.responses[cmd]
        if isinstance(reply, Exception):
            raise reply
        return parser(reply.encode())


def test_parse_areas():
    assert parse_areas(V2, "ospf-overview-information") == [
        Area("0.0.0.0", 3),
        Area("0.0.0.1", 1),
    ]


def test_parse_areas_wrong_information_tag_is_empty():
    assert parse_areas(V2, "ospf3-overview-information") == []


def test_collect_reports_up_and_neighbors():
    client = FakeClient({"show ospf overview": V2, "show ospf3 overview": V3_EMPTY})
    metrics = list(OSPFCollector().collect(client, ["r1"]))
    assert client.commands == ["show ospf overview", "show ospf3 overview"]
    assert [m.desc for m in metrics] == [OSPF_UP, OSPF_NEIGHBORS, OSPF_NEIGHBORS, OSPF3_UP]
    assert metrics[0].value == 1.0
    assert metrics[1].labels() == {"target": "r1", "area": "0.0.0.0"}
    assert metrics[1].value == 3.0
    assert metrics[3].value == 0.0


def test_logical_system_is_added_to_commands():
    client = FakeClient(
        {
            "show ospf overview logical-system ls1": V3_EMPTY,
            "show ospf3 overview logical-system ls1": V3_EMPTY,
        }
    )
    metrics = list(OSPFCollector("ls1").collect(client, ["r1"]))
    assert client.commands[1] == "show ospf3 overview logical-system ls1"
    assert [m.value for m in metrics] == [0.0, 0.0]


def test_error_stops_collection_after_v2():
    client = FakeClient({"show ospf overview": V2, "show ospf3 overview": ConnectionError("lost")})
    seen = []
    with pytest.raises(ConnectionError):
        for metric in OSPFCollector().collect(client, ["r1"]):
            seen.append(metric)
    assert len(seen) == 3


def test_describe():
    names = {d.name for d in OSPFCollector().describe()}
    assert "junos_ospf3_neighbors_count" in names
    assert len(names) == 4