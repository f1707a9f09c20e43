# junos_exporter

Collectors that run operational commands on Juniper Junos devices, parse the
XML replies and turn them into Prometheus-style metric samples.

The package uses only the Python standard library (Python 3.10 or later).

## Installation

```
pip install .
```

To run the tests, install the `test` extra and run pytest:

```
pip install .[test]
pytest
```

## Building blocks

### Metrics (`junos_exporter.metrics`)

- `Desc` holds a metric family's `name`, `help` text and `label_names`.
- `Metric` is one sample: `desc`, `value_type`, `value` (always a float) and
  `label_values`. Creating a `Metric` with the wrong number of label values
  raises `ValueError`. `Metric.labels()` returns the labels as a dict.
- `ValueType` is `GAUGE` or `COUNTER`.
- `RPCCollector` is the abstract base of every collector. It has a `name`, a
  `describe()` method that lists the `Desc` objects it may emit and a
  `collect(client, label_values)` method that yields `Metric` objects.

### Talking to a device (`junos_exporter.rpc`)

- `Connection` is a protocol for the transport you supply. It needs a `host`
  attribute (used in debug log messages), a `device` attribute and a
  `run_command(cmd)` method that returns the raw reply as bytes.
- `Client(connection, debug=False, satellite=False, license=False)` wraps a
  connection. `run_command_and_parse(cmd, parser)` appends `| display xml` to
  the command, runs it and returns what `parser` makes of the reply. By
  default, `parser` is `junos_exporter.xmlutil.parse_xml`. With `debug=True`
  the command and its output are logged. `device()` returns the connection's
  `device`. `is_satellite_enabled()` and `is_scraping_license_enabled()`
  report the `satellite` and `license` flags.

### XML helpers (`junos_exporter.xmlutil`)

`parse_xml` parses a reply and strips namespaces from tags and attributes. It
raises `ValueError` on malformed XML. `is_multi_routing_engine` tells whether
a reply holds results for several routing engines. `find_text`, `find_int`,
`find_float` and `find_attr` read values from elements. The number readers
return 0 when an element is missing or empty and raise `ValueError` when it
holds something that is not a number.

## Collectors

Each module in `junos_exporter.features` provides parsing functions and one
collector. Every collector expects the first label value to be the target.

| Module | Collector | Command | Parsers |
| --- | --- | --- | --- |
| `ospf` | `OSPFCollector(logical_system="")` | `show ospf overview`, `show ospf3 overview` | `parse_areas` |
| `route` | `RouteCollector` | `show route summary` | `parse_route_summary` |
| `vrrp` | `VRRPCollector` | `show vrrp summary` | `parse_vrrp_summary` |
| `vpws` | `VPWSCollector` | `show evpn vpws-instance` | `parse_vpws_instances` |
| `power` | `PowerCollector` | `show chassis power` | `parse_power` |
| `storage` | `StorageCollector` | `show system storage` | `parse_storage` |
| `subscriber` | `SubscriberCollector` | `show subscribers client-type dhcp detail`, `show interfaces demux0 brief` | `parse_subscribers`, `parse_logical_interfaces` |
| `rpki` | `RPKICollector` | `show validation session`, `show validation statistics` | `parse_sessions`, `parse_statistics` |
| `rpm` | `RPMCollector` | `show services rpm probe-results` | `parse_probe_results` |
| `securityike` | `SecurityIKECollector` | `show security ike active-peer` | `parse_active_peers` |
| `security` | `SecurityCollector` | `show security monitoring` | `parse_security_monitoring` |
| `system` | `SystemCollector` | `show system buffers`, `show system information`, plus optional satellite and license commands | `parse_system_information`, `parse_satellites`, `parse_licenses` |

Notes on specific collectors:

- `parse_power`, `parse_storage`, `parse_active_peers` and
  `parse_security_monitoring` accept replies from devices with several
  routing engines and from devices with one. A single routing engine is
  reported under the name `N/A`.
- `OSPFCollector` adds `logical-system <name>` to its commands when a logical
  system is given.
- `SubscriberCollector` maps demux interfaces to their physical interface
  with `find_underlying_interface`. That function raises `LookupError` when
  the chain breaks or is too deep. The collector logs a warning in that case
  and uses an empty label.
- `RPKICollector.collect_for_session` yields the metrics of one session. The
  state is yielded first, as a `SessionState` value.
- `SystemCollector` always queries buffers and system information. It raises
  `RuntimeError` if either fails. It queries satellites only when the client
  has `satellite=True`, and licenses only when it has `license=True`. Errors
  from those optional commands are ignored.
- `junos_exporter.features.system_buffers` parses the buffers reply.
  `parse_buffers` returns `None` when the device does not support the command
  or sends no text output. `parse_buffer_output` parses the text on its own.
  `buffer_metrics` yields the samples and reports network allocations in
  bytes.
- `license_expiry_days(validity_type, now=None)` returns the days left until
  a license expires. It returns -1 for `expired`, `+inf` for `permanent` and
  `-inf` for anything it cannot read.

## Example

```python
from junos_exporter.rpc import Client
from junos_exporter.features.route import RouteCollector


class MyConnection:
    host = "router1.example.com"
    device = "router1.example.com"

    def run_command(self, cmd):
        ...  # send cmd to the device and return the reply as bytes


client = Client(MyConnection())
for metric in RouteCollector().collect(client, ["router1"]):
    print(metric.desc.name, metric.labels(), metric.value)
```

The parsing functions can also be used on their own, with XML that was
captured earlier:

```python
from junos_exporter.features.storage import parse_storage

with open("storage.xml", "rb") as f:
    for engine in parse_storage(f.read()):
        for fs in engine.filesystems:
            print(engine.name, fs.mounted_on, fs.used_blocks)
```

## What the package does not do

- It opens no connections. There is no SSH transport, so you have to supply
  an object that satisfies `Connection`.
- It runs no HTTP server and has no command-line program. It also does not
  render metrics in the Prometheus text exposition format. Collectors return
  `Metric` objects, and serving them is left to the caller.
- It reads no configuration file and selects no collectors by device. You
  create the collectors you want and call them yourself.
- It has no collector for routing engine CPU, memory, temperature or uptime.