# ospfsim

`ospfsim` is a small discrete-event simulator for OSPF-style routing. Each
router computes its routes with Dijkstra's algorithm. The cost of a link
combines its distance or delay with the traffic counted on it, so links that
carry more traffic become less attractive.

The package has two models:

- **Static topology** (`ospfsim.staticrouter`). The routers are `r1` to `r4`,
  and each takes its numeric id from its name. Each router loads its own links
  from a fixed table. A link costs `a * distance + b * traffic`, with `a = 1.0`
  and `b = 2.0`. The routing table maps each destination id to an output gate
  index. At simulated time 3, `r1` sends a `DataPacket` with the payload
  `"Hello from r1 to r4"` to `r4`.
- **Traffic-aware topology** (`ospfsim.trafficrouter`). Routers learn their
  neighbours from the links connected to them. Every router in a network
  shares a `SharedState`, which holds the global graph and the traffic matrix.
  - Router 1 clears the shared state and preloads a traffic count of 20 on the
    links (1,3), (3,5), (5,7), (3,6) and (6,7).
  - Each router recomputes its routes first at time 0.5 and then every 3
    seconds. A link costs `1.0 * delay + 5.0 * traffic**2`, and the routing
    table maps each destination id to a next-hop router id.
  - From time 1.0, `r1` sends an `OSPFPacket` to router 7 every 0.2 seconds.
  - Every router sends packets to random destinations with ids 1 to 7, at
    intervals between 0.1 and 0.2 seconds.
  - Each packet records in its hop trace the names of the routers it passes
    through.
  - Each forwarding hop adds one to the traffic count of the link it uses.

## Installation

```
pip install .
```

To install with the test dependencies:

```
pip install .[test]
```

## Command line

Run the static four-router scenario:

```
ospfsim-static [--until SECONDS]
```

Run the traffic-aware scenario:

```
ospfsim-traffic [--until SECONDS] [--seed N] [--delay SECONDS] [--link A-B[=DELAY] ...]
```

Both commands default to `--until 10`. `ospfsim-traffic` also takes these
options:

- `--seed`: the random seed. The default is 0.
- `--delay`: the default link delay. The default is 0.01.
- `--link`: a link between two router ids, such as `--link 1-2` or
  `--link 1-2=0.05`. You can give it more than once.

Without `--link`, the traffic scenario uses seven routers joined as 1-2, 1-3,
2-4, 3-5, 3-6, 4-7, 5-7 and 6-7.

Both commands print the simulation log. The log shows the routing tables,
forwarded and delivered packets, hop traces and traffic-matrix reports.

## Library use

### Packets

`ospfsim.datapacket.DataPacket` has the fields `name`, `kind`, `src_id`,
`dest_id` and `payload`. `ospfsim.tracepacket.OSPFPacket` has the same fields
and adds a `hop_trace` list. Both classes provide:

- `dup()`, which returns an independent copy.
- `to_bytes()` and `from_bytes()`, which convert to and from a compact binary
  form.

```python
from ospfsim.tracepacket import OSPFPacket

pkt = OSPFPacket(name="data", src_id=1, dest_id=7, payload="hello")
pkt.append_hop_trace("r1")
pkt.append_hop_trace("r3")
copy = OSPFPacket.from_bytes(pkt.to_bytes())
assert copy.get_hop_trace(1) == "r3"
```

`OSPFPacket` edits its hop trace with these methods:

- `get_hop_trace`
- `set_hop_trace`
- `insert_hop_trace`
- `append_hop_trace`
- `erase_hop_trace`
- `resize_hop_trace`

An index outside the trace raises `IndexError`.

`ospfsim.descriptor.OSPFPacketDescriptor` reads and writes the fields of an
`OSPFPacket` by index or by name (`srcId`, `destId`, `payload`, `hopTrace`),
with all values in string form. `DataPacket` offers the same access for its
own fields through `field_value_as_string` and `set_field_value_as_string`.

### Networks

```python
from ospfsim.trafficrouter import TrafficNetwork

net = TrafficNetwork(seed=1)
for i in range(1, 4):
    net.add_router(f"r{i}", i)
net.connect("r1", "r2", 0.01)
net.connect("r2", "r3", 0.01)
net.run(5.0)
print(net.log[:5], len(net.delivered), net.state.traffic_report())
```

`StaticNetwork` works in a similar way:

- `add_router(name)` creates a router. The name, such as `"r2"`, gives the
  router its id.
- `connect(src_name, gate_index, dst_name)` joins one output gate of a router
  to another router.

Routers take their links from the fixed four-router table. You must connect
the gates that their routes use.

For both network types:

- `run(until)` returns the number of events handled.
- `log` holds the emitted lines.
- `delivered` lists `(router name, packet)` pairs.

## What it does not do

The routers do not exchange hello packets or link-state advertisements.
Instead, topology and traffic counts are shared directly in memory. The
package does not send anything over a real network. It does not read topology
files, and it does not save results beyond the in-memory log.

## Tests

```
pytest
```