"""Router on a fixed four-node topology that routes by distance and traffic."""

from __future__ import annotations

import argparse
import heapq
import itertools
import math
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ospfsim.datapacket import DataPacket

__all__ = ["Link", "StaticRouter", "StaticNetwork", "main"]

DATA_TIMER = "dataTimer"
DEFAULT_GATE_COUNT = 5
DATA_DELAY = 3.0


@dataclass(frozen=True)
class Link:
    """An outgoing link of a router."""

    neighbor_id: int
    distance: float
    traffic: float
    gate_index: int


_TOPOLOGY: Dict[int, Tuple[Link, ...]] = {
    1: (Link(2, 1.0, 0.0, 0), Link(3, 2.0, 0.0, 1)),
    2: (Link(1, 1.0, 0.0, 0), Link(3, 1.0, 0.0, 1), Link(4, 1.0, 0.0, 2)),
    3: (Link(1, 2.0, 0.0, 0), Link(2, 1.0, 0.0, 1), Link(4, 1.0, 0.0, 2)),
    4: (Link(2, 1.0, 0.0, 0), Link(3, 1.0, 0.0, 1)),
}

_ID_PATTERN = re.compile(r"\s*([+-]?\d+)")


@dataclass
class _Timer:
    name: str


def _parse_router_id(name: str) -> int:
    match = _ID_PATTERN.match(name[1:])
    if match is None:
        raise ValueError(f"router name {name!r} does not carry a numeric id")
    return int(match.group(1))


class StaticRouter:
    """A router that knows its own links and routes with a distance/traffic cost."""

    def __init__(self, name: str, network: "StaticNetwork") -> None:
        self.name = name
        self.network = network
        self.router_id: Optional[int] = None
        self.network_graph: Dict[int, List[Link]] = {}
        self.routing_table: Dict[int, int] = {}
        self.traffic_map: Dict[Tuple[int, int], float] = {}
        self.a = 1.0
        self.b = 2.0
        self.out_gates = 0

    @property
    def full_path(self) -> str:
        return f"{self.network.name}.{self.name}"

    def initialize(self) -> None:
        """Derive the router id, load the topology, compute routes, start timers."""
        self.router_id = _parse_router_id(self.name)
        if self.out_gates == 0:
            self.out_gates = DEFAULT_GATE_COUNT
        self.initialize_graph()
        self.run_dijkstra()
        if self.router_id == 1:
            self.network._schedule(self, self.network.now + DATA_DELAY, _Timer(DATA_TIMER))

    def initialize_graph(self) -> None:
        """Load this router's own links from the static topology."""
        links = _TOPOLOGY.get(self.router_id)
        if links is not None:
            self.network_graph[self.router_id] = list(links)

    def run_dijkstra(self) -> None:
        """Recompute the routing table: destination router id to output gate index."""
        origin = self.router_id
        cost: Dict[int, float] = {origin: 0.0}
        previous: Dict[int, int] = {}
        visited = set()
        heap = [(0.0, origin)]
        while heap:
            current_cost, current = heapq.heappop(heap)
            if current in visited:
                continue
            visited.add(current)
            for link in self.network_graph.get(current, ()):
                traffic = self.traffic_map.get((current, link.neighbor_id), 0.0)
                new_cost = current_cost + self.a * link.distance + self.b * traffic
                if new_cost < cost.get(link.neighbor_id, math.inf):
                    cost[link.neighbor_id] = new_cost
                    previous[link.neighbor_id] = current
                    heapq.heappush(heap, (new_cost, link.neighbor_id))

        gate_of: Dict[int, int] = {}
        for link in self.network_graph.get(origin, ()):
            gate_of.setdefault(link.neighbor_id, link.gate_index)

        table: Dict[int, int] = {}
        for dest in sorted(cost):
            if dest == origin:
                continue
            hop = dest
            while previous[hop] != origin:
                hop = previous[hop]
            if hop in gate_of:
                table[dest] = gate_of[hop]
        self.routing_table = table

    def handle_message(self, msg: Any) -> None:
        """React to a timer or an arriving packet."""
        if getattr(msg, "name", None) == DATA_TIMER:
            self.send_data_packet(4, "Hello from r1 to r4")
        elif isinstance(msg, DataPacket):
            if msg.dest_id == self.router_id:
                self.network._emit(f"{self.full_path} received DataPacket: {msg.payload}")
                self.network.delivered.append((self.name, msg))
            else:
                gate = self.routing_table.get(msg.dest_id, 0)
                self._count_traffic(msg.dest_id)
                self.network._emit(
                    f"{self.full_path} forwarding packet to dest {msg.dest_id}"
                )
                self.network._send(self, msg, gate)
        else:
            self.network._emit("Unknown message, deleted")

    def send_data_packet(self, dest_id: int, payload: str) -> DataPacket:
        """Create a packet for ``dest_id`` and send it along the routing table."""
        pkt = DataPacket(
            name="DataPacket", src_id=self.router_id, dest_id=dest_id, payload=payload
        )
        gate = self.routing_table.get(dest_id, 0)
        self._count_traffic(dest_id)
        self.network._send(self, pkt, gate)
        return pkt

    def _count_traffic(self, dest_id: int) -> None:
        key = (self.router_id, dest_id)
        self.traffic_map[key] = self.traffic_map.get(key, 0.0) + 1


class StaticNetwork:
    """A discrete-event network of :class:`StaticRouter` objects."""

    def __init__(self, name: str = "network") -> None:
        self.name = name
        self.routers: Dict[str, StaticRouter] = {}
        self.now = 0.0
        self.log: List[str] = []
        self.delivered: List[Tuple[str, DataPacket]] = []
        self._connections: Dict[Tuple[str, int], str] = {}
        self._queue: List[Tuple[float, int, str, Any]] = []
        self._sequence = itertools.count()
        self._initialized = False

    def add_router(self, name: str) -> StaticRouter:
        """Create a router named e.g. ``"r3"`` and return it."""
        if name in self.routers:
            raise ValueError(f"router {name!r} already exists")
        if self._initialized:
            raise RuntimeError("cannot add routers after the simulation has started")
        router = StaticRouter(name, self)
        self.routers[name] = router
        return router

    def connect(self, src_name: str, gate_index: int, dst_name: str) -> None:
        """Connect output gate ``gate_index`` of one router to another router."""
        if src_name not in self.routers:
            raise KeyError(src_name)
        if dst_name not in self.routers:
            raise KeyError(dst_name)
        if gate_index < 0:
            raise ValueError(f"gate index must not be negative, got {gate_index}")
        key = (src_name, gate_index)
        if key in self._connections:
            raise ValueError(f"{src_name}.out[{gate_index}] is already connected")
        self._connections[key] = dst_name
        source = self.routers[src_name]
        source.out_gates = max(source.out_gates, gate_index + 1)

    def run(self, until: float) -> int:
        """Run the simulation up to time ``until``; return the number of events handled."""
        if not self._initialized:
            self._initialized = True
            for router in self.routers.values():
                router.initialize()
        handled = 0
        while self._queue and self._queue[0][0] <= until:
            time, _, name, msg = heapq.heappop(self._queue)
            self.now = time
            self.routers[name].handle_message(msg)
            handled += 1
        self.now = max(self.now, until)
        return handled

    def _schedule(self, router: StaticRouter, time: float, msg: Any) -> None:
        heapq.heappush(self._queue, (time, next(self._sequence), router.name, msg))

    def _send(self, router: StaticRouter, msg: Any, gate_index: int) -> None:
        if not 0 <= gate_index < router.out_gates:
            raise IndexError(
                f"gate index {gate_index} out of range for {router.full_path}.out"
                f" of size {router.out_gates}"
            )
        target = self._connections.get((router.name, gate_index))
        if target is None:
            raise RuntimeError(f"{router.full_path}.out[{gate_index}] is not connected")
        self._schedule(self.routers[target], self.now, msg)

    def _emit(self, text: str) -> None:
        self.log.append(text)


def _default_network() -> StaticNetwork:
    network = StaticNetwork()
    for router_id in _TOPOLOGY:
        network.add_router(f"r{router_id}")
    for router_id, links in _TOPOLOGY.items():
        for link in links:
            network.connect(f"r{router_id}", link.gate_index, f"r{link.neighbor_id}")
    return network


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the four-router demo and print its event log."""
    parser = argparse.ArgumentParser(
        prog="ospfsim-static", description="Static-topology routing demo."
    )
    parser.add_argument("--until", type=float, default=10.0, help="simulation time limit")
    args = parser.parse_args(argv)
    network = _default_network()
    network.run(args.until)
    for line in network.log:
        print(line)
    return 0