import pytest

from junos_exporter.features.vrrp import VRRP_STATE, VRRPCollector, parse_vrrp_summary

SUMMARY = """<rpc-reply xmlns:junos="http://example.com/junos">
  <vrrp-information xmlns="http://example.com/junos-vrrp">
    <vrrp-interface>
      <interface>ge-0/0/1.0</interface>
      <interface-state>up</interface-state>
      <group>10</group>
      <vrrp-state>master</vrrp-state>
      <vrrp-mode>Active</vrrp-mode>
      <local-interface-address>192.0.2.2</local-interface-address>
      <virtual-ip-address>192.0.2.1</virtual-ip-address>
    </vrrp-interface>
    <vrrp-interface>
      <interface>ge-0/0/2.0</interface>
      <group>20</group>
      <vrrp-state>backup</vrrp-state>
      <local-interface-address>198.51.100.2</local-interface-address>
      <virtual-ip-address>198.51.100.1</virtual-ip-address>
    </vrrp-interface>
    <vrrp-interface>
      <interface>ge-0/0/3.0</interface>
      <group>30</group>
      <vrrp-state>transition</vrrp-state>
    </vrrp-interface>
  </vrrp-information>
</rpc-reply>"""


class FakeClient:
    def __init__(self, reply):
        self.reply = reply
        self.commands = []

    def run_command_and_parse(self, cmd, parser):
        self.commands.append(cmd)
        if isinstance(self.reply, Exception):
            raise self.reply
        return parser(self.reply.encode())


def test_parse_vrrp_summary():
    interfaces = parse_vrrp_summary(SUMMARY)
    assert [i.interface for i in interfaces] == ["ge-0/0/1.0", "ge-0/0/2.0", "ge-0/0/3.0"]
    assert interfaces[0].vrrp_mode == "Active"
    assert interfaces[1].interface_state == ""


def test_collect_maps_states():
    client = FakeClient(SUMMARY)
    metrics = list(VRRPCollector().collect(client, ["r1"]))
    assert client.commands == ["show vrrp summary"]
    assert [m.value for m in metrics] == [3.0, 2.0, 0.0]
    assert all(m.desc is VRRP_STATE for m in metrics)
    assert metrics[0].labels() == {
        "target": "r1",
        "interface": "ge-0/0/1.0",
        "group": "10",
        "local_interface_address": "192.0.2.2",
        "virtual_ip_address": "192.0.2.1",
    }


def test_collect_propagates_errors():
    with pytest.raises(ValueError):
        list(VRRPCollector().collect(FakeClient("<rpc-reply>"), ["r1"]))


def test_describe():
    assert VRRPCollector().describe() == [VRRP_STATE]