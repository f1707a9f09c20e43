import pytest

from junos_exporter.features.rpm import (
    CURRENT_LOSS_PERCENT,
    CURRENT_RTT_AVG,
    TOTAL_RECEIVED,
    TOTAL_SENT,
    GenericResults,
    RPMCollector,
    parse_probe_results,
)

PROBE_XML = """<rpc-reply xmlns:junos="urn:example:junos">
  <probe-results>
    <probe-test-results>
      <owner>owner1</owner>
      <test-name>test1</test-name>
      <target-address>192.0.2.10</target-address>
      <probe-type>icmp-ping</probe-type>
      <destination-interface>ge-0/0/1.0</destination-interface>
      <test-size>10</test-size>
      <probe-last-test-results>
        <probe-test-generic-results>
          <results-scope>last-test</results-scope>
          <probes-sent>10</probes-sent>
          <probe-responses>9</probe-responses>
          <loss-percentage>10.5</loss-percentage>
          <probe-test-rtt>
            <probe-summary-results>
              <samples>9</samples>
              <min-delay>501</min-delay>
              <max-delay>902</max-delay>
              <avg-delay>703</avg-delay>
              <jitter-delay>401</jitter-delay>
              <stddev-delay>121</stddev-delay>
              <sum-delay>6327</sum-delay>
            </probe-summary-results>
          </probe-test-rtt>
        </probe-test-generic-results>
      </probe-last-test-results>
      <probe-test-global-results>
        <probe-test-generic-results>
          <results-scope>all-tests</results-scope>
          <probes-sent>1500</probes-sent>
          <probe-responses>1480</probe-responses>
          <loss-percentage>1.3</loss-percentage>
        </probe-test-generic-results>
      </probe-test-global-results>
    </probe-test-results>
  </probe-results>
</rpc-reply>"""


class FakeClient:
    def __init__(self, responses):
        self.responses = responses
        self.commands = []

    def run_command_and_parse(self, cmd, parser):
        self.commands.append(cmd)
        return parser(self.responses[cmd])


def test_parse_probe_fields():
    (probe,) = parse_probe_results(PROBE_XML)
    assert probe.owner == "owner1"
    assert probe.name == "test1"
    assert probe.address == "192.0.2.10"
    assert probe.probe_type == "icmp-ping"
    assert probe.interface == "ge-0/0/1.0"
    assert probe.size == 10


def test_parse_last_and_global_results():
    (probe,) = parse_probe_results(PROBE_XML)
    assert probe.last.scope == "last-test"
    assert probe.last.loss_percent == 10.5
    assert probe.last.rtt.min == 501
    assert probe.last.rtt.max == 902
    assert probe.last.rtt.sum == 6327
    assert probe.global_results.sent == 1500
    assert probe.global_results.responses == 1480
    assert probe.global_results.rtt.avg == 0


def test_parse_missing_results_are_empty():
    (probe,) = parse_probe_results(
        "<rpc-reply><probe-results><probe-test-results><owner>o</owner>"
        "</probe-test-results></probe-results></rpc-reply>"
    )
    assert probe.last == GenericResults()
    assert probe.global_results == GenericResults()


def test_parse_no_probes():
    assert parse_probe_results("<rpc-reply/>") == []


def test_parse_invalid_number():
    with pytest.raises(ValueError):
        parse_probe_results(
            "<rpc-reply><probe-results><probe-test-results><test-size>big</test-size>"
            "</probe-test-results></probe-results></rpc-reply>"
        )


def test_collect():
    client = FakeClient({"show services rpm probe-results": PROBE_XML})
    collector = RPMCollector()
    metrics = list(collector.collect(client, ["router1"]))
    assert client.commands == ["show services rpm probe-results"]
    assert [m.desc for m in metrics] == collector.describe()
    by_desc = {m.desc: m for m in metrics}
    assert by_desc[TOTAL_SENT].value == 1500.0
    assert by_desc[TOTAL_RECEIVED].value == 1480.0
    assert by_desc[CURRENT_LOSS_PERCENT].value == 10.5
    assert by_desc[CURRENT_RTT_AVG].value == 703.0
    assert by_desc[TOTAL_SENT].labels() == {
        "target": "router1",
        "owner": "owner1",
        "name": "test1",
        "address": "192.0.2.10",
        "type": "icmp-ping",
        "interface": "ge-0/0/1.0",
    }