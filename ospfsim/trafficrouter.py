"""Routers that choose paths by link delay and by the traffic they observe."""

from __future__ import annotations

import argparse
import heapq
import itertools
import random
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ospfsim.datapacket import _check_int32
from ospfsim.tracepacket import OSPFPacket

__all__ = [
    "LinkInfo",
    "SharedState",
    "TrafficRouter",
    "TrafficNetwork",
    "PRELOADED_TRAFFIC",
    "main",
]

COMPUTE_ROUTES = "computeRoutes"
SEND_PACKET = "sendPacket"
SEND_RANDOM_PACKET = "sendRandomPacket"

ROUTE_INTERVAL = 3.0
SEND_INTERVAL = 0.2
FIRST_ROUTE_DELAY = 0.5
FIRST_SEND_DELAY = 1.0
RANDOM_MIN_DELAY = 0.1
RANDOM_MAX_DELAY = 0.2

DEMO_DESTINATION = 7
DEMO_PAYLOAD = "Hello from r1 to r7"
RANDOM_PAYLOAD = "Random traffic"
MAX_ROUTER_ID = 7

DIJKSTRA_DELAY_WEIGHT = 1.0
DIJKSTRA_TRAFFIC_WEIGHT = 5.0
FORWARD_DELAY_WEIGHT = 1.0
FORWARD_TRAFFIC_WEIGHT = 100.0

PRELOADED_TRAFFIC: Dict[Tuple[int, int], int] = {
    (1, 3): 20,
    (3, 5): 20,
    (5, 7): 20,
    (3, 6): 20,
    (6, 7): 20,
}


@dataclass
class LinkInfo:
    """A directed link of the shared topology."""

    neighbor_id: int
    delay: float
    traffic: int = 0


@dataclass
class SharedState:
    """Topology and traffic counts shared by every router of one network."""

    global_graph: Dict[int, List[LinkInfo]] = field(default_factory=dict)
    traffic_matrix: Dict[Tuple[int, int], int] = field(default_factory=dict)

    def reset(self) -> None:
        """Forget the whole topology and all traffic counts."""
        self.global_graph.clear()
        self.traffic_matrix.clear()

    def traffic_report(self) -> List[str]:
        """Return one line per traffic-matrix entry, ordered by (from, to)."""
        return [
            f"Traffic from r{src} to r{dst} = {count}"
            for (src, dst), count in sorted(self.traffic_matrix.items())
        ]


@dataclass
class _Gate:
    target: str
    delay: float


@dataclass(eq=False)
class _Timer:
    name: str


def _format_time(value: float) -> str:
    text = f"{value:.12f}".rstrip("0").rstrip(".")
    return text or "0"


class TrafficRouter:
    """A router that periodically recomputes routes from delay and squared traffic."""

    def __init__(self, name: str, router_id: int, network: "TrafficNetwork") -> None:
        self.name = name
        self.router_id = router_id
        self.network = network
        self.out_gates: List[_Gate] = []
        self.neighbor_gates: Dict[int, int] = {}
        self.routing_table: Dict[int, int] = {}
        self.route_interval = ROUTE_INTERVAL
        self.send_interval = SEND_INTERVAL
        self._random_event: Optional[_Timer] = None

    @property
    def state(self) -> SharedState:
        return self.network.state

    def initialize(self) -> None:
        """Preload traffic (router 1 only), learn links and start the timers."""
        net = self.network
        net._emit(f"{self.name} has routerId = {self.router_id}")
        if self.router_id == 1:
            self.state.reset()
            self.state.traffic_matrix.update(PRELOADED_TRAFFIC)

        self.build_graph()

        net._schedule(self, net.now + FIRST_ROUTE_DELAY, _Timer(COMPUTE_ROUTES))
        if self.router_id == 1:
            net._schedule(self, net.now + FIRST_SEND_DELAY, _Timer(SEND_PACKET))
        self._random_event = _Timer(SEND_RANDOM_PACKET)
        net._schedule(
            self,
            net.now + net.rng.uniform(RANDOM_MIN_DELAY, RANDOM_MAX_DELAY),
            self._random_event,
        )

    def build_graph(self) -> None:
        """Add this router's outgoing links to the shared graph and map neighbours to gates."""
        self.neighbor_gates.clear()
        for index, gate in enumerate(self.out_gates):
            neighbor = self.network.routers[gate.target]
            self.state.global_graph.setdefault(self.router_id, []).append(
                LinkInfo(neighbor.router_id, gate.delay, 0)
            )
            self.neighbor_gates[neighbor.router_id] = index
            self.network._emit(
                f"[Routing] {self.name} -> {neighbor.name} via gate index: {index}"
                f" neighborId: {neighbor.router_id}"
            )

    def run_dijkstra(self, a: float, b: float) -> None:
        """Update the routing table (destination id to next-hop id).

        A link costs ``a * delay + b * traffic ** 2``. Entries for destinations
        that are no longer reachable are kept.
        """
        origin = self.router_id
        graph = self.state.global_graph
        matrix = self.state.traffic_matrix
        dist: Dict[int, float] = {origin: 0.0}
        prev: Dict[int, int] = {}
        visited = set()
        heap: List[Tuple[float, int]] = [(0.0, origin)]

        while heap:
            _, node = heapq.heappop(heap)
            if node in visited:
                continue
            visited.add(node)
            for edge in graph.get(node, ()):
                # An unseen link is recorded with zero traffic and shows up in reports.
                traffic = matrix.setdefault((node, edge.neighbor_id), 0)
                candidate = dist[node] + a * edge.delay + b * traffic**2
                if edge.neighbor_id not in dist or candidate < dist[edge.neighbor_id]:
                    dist[edge.neighbor_id] = candidate
                    prev[edge.neighbor_id] = node
                    heapq.heappush(heap, (candidate, edge.neighbor_id))

        for dest in sorted(dist):
            hop = dest
            while hop in prev and prev[hop] != origin:
                hop = prev[hop]
            if hop in prev:
                self.routing_table[dest] = hop

    def handle_message(self, msg: Any) -> None:
        """React to a timer or to an arriving packet."""
        net = self.network
        name = getattr(msg, "name", None)

        if name == COMPUTE_ROUTES:
            self.run_dijkstra(DIJKSTRA_DELAY_WEIGHT, DIJKSTRA_TRAFFIC_WEIGHT)
            for dest, hop in sorted(self.routing_table.items()):
                net._emit(
                    f"[Routing] r{self.router_id} -> r{dest} via next hop router: r{hop}"
                )
            self._log_traffic_matrix()
            net._schedule(self, net.now + self.route_interval, msg)

        elif name == SEND_PACKET:
            pkt = OSPFPacket(
                name="data",
                src_id=self.router_id,
                dest_id=DEMO_DESTINATION,
                payload=DEMO_PAYLOAD,
            )
            pkt.append_hop_trace(self.name)
            next_hop = self.routing_table.get(pkt.dest_id)
            if next_hop is not None:
                self.send_packet_to(pkt, next_hop)
            else:
                net._emit(f"No route to destination r{pkt.dest_id}. Dropping packet.")
            net._schedule(self, net.now + self.send_interval, msg)

        elif msg is self._random_event:
            while True:
                dest_id = net.rng.randint(1, MAX_ROUTER_ID)
                if dest_id != self.router_id:
                    break
            pkt = OSPFPacket(
                name="randomData",
                src_id=self.router_id,
                dest_id=dest_id,
                payload=RANDOM_PAYLOAD,
            )
            pkt.append_hop_trace(self.name)
            next_hop = self.routing_table.get(dest_id)
            if next_hop is not None:
                self.send_packet_to(pkt, next_hop)
            net._schedule(
                self,
                net.now + net.rng.uniform(RANDOM_MIN_DELAY, RANDOM_MAX_DELAY),
                msg,
            )

        elif isinstance(msg, OSPFPacket):
            self._receive(msg)

    def _receive(self, pkt: OSPFPacket) -> None:
        net = self.network
        net._emit(f"{self.name} received packet from {pkt.src_id} to {pkt.dest_id}")
        pkt.append_hop_trace(self.name)

        if pkt.dest_id == self.router_id:
            net._emit(f"{self.name} is destination. Payload: {pkt.payload}")
            net._emit("Hop Trace: " + " -> ".join(pkt.hop_trace))
            net.delivered.append((self.name, pkt))
            return

        next_hop = self.routing_table.get(pkt.dest_id)
        if next_hop is None:
            net._emit(f"No route to destination r{pkt.dest_id}. Dropping packet.")
            return

        matrix = self.state.traffic_matrix
        key = (self.router_id, next_hop)
        matrix[key] = matrix.get(key, 0) + 1
        delay = next(
            (
                link.delay
                for link in self.state.global_graph.get(self.router_id, ())
                if link.neighbor_id == next_hop
            ),
            0.0,
        )
        cost = FORWARD_DELAY_WEIGHT * delay + FORWARD_TRAFFIC_WEIGHT * matrix[key]
        net._emit(
            f"[TrafficMatrix] Cost from r{self.router_id} to r{next_hop}"
            f" = delay: {delay:g}, traffic: {matrix[key]}, total cost: {cost:g}"
        )
        self.send_packet_to(pkt, next_hop)

    def send_packet_to(self, pkt: OSPFPacket, next_hop: int) -> None:
        """Send ``pkt`` through the gate that leads to router ``next_hop``."""
        gate_index = self.neighbor_gates.get(next_hop)
        if gate_index is None:
            self.network._emit(f"No valid gate to nextHop router ID={next_hop}")
            return
        self.network._send(self, pkt, gate_index)

    def gate_index_for_router(self, next_hop: int) -> int:
        """Return the index of the output gate leading to ``next_hop``, or -1."""
        for index, gate in enumerate(self.out_gates):
            if self.network.routers[gate.target].router_id == next_hop:
                return index
        return -1

    def _log_traffic_matrix(self) -> None:
        net = self.network
        net._emit(f"=== Traffic Matrix at time {_format_time(net.now)} ===")
        for line in self.state.traffic_report():
            net._emit(line)
        net._emit("===============================")


class TrafficNetwork:
    """A discrete-event network of :class:`TrafficRouter` objects joined by delay links."""

    def __init__(self, name: str = "network", seed: Optional[int] = None) -> None:
        self.name = name
        self.routers: Dict[str, TrafficRouter] = {}
        self.state = SharedState()
        self.rng = random.Random(seed)
        self.now = 0.0
        self.log: List[str] = []
        self.delivered: List[Tuple[str, OSPFPacket]] = []
        self._queue: List[Tuple[float, int, str, Any]] = []
        self._sequence = itertools.count()
        self._initialized = False

    def add_router(self, name: str, router_id: int) -> TrafficRouter:
        """Create a router with the given name and numeric id and return it."""
        if name in self.routers:
            raise ValueError(f"router {name!r} already exists")
        if self._initialized:
            raise RuntimeError("cannot add routers after the simulation has started")
        router = TrafficRouter(name, _check_int32(router_id, "routerId"), self)
        self.routers[name] = router
        return router

    def connect(self, first: str, second: str, delay: float = 0.0) -> None:
        """Join two routers in both directions with a link of the given delay."""
        for name in (first, second):
            if name not in self.routers:
                raise KeyError(name)
        if delay < 0:
            raise ValueError(f"delay must not be negative, got {delay}")
        if self._initialized:
            raise RuntimeError("cannot connect routers after the simulation has started")
        self.routers[first].out_gates.append(_Gate(second, float(delay)))
        self.routers[second].out_gates.append(_Gate(first, float(delay)))

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

    def _schedule(self, router: TrafficRouter, time: float, msg: Any) -> None:
        heapq.heappush(self._queue, (round(time, 12), next(self._sequence), router.name, msg))

    def _send(self, router: TrafficRouter, msg: Any, gate_index: int) -> None:
        if not 0 <= gate_index < len(router.out_gates):
            raise IndexError(
                f"gate index {gate_index} out of range for {router.name}.out"
                f" of size {len(router.out_gates)}"
            )
        gate = router.out_gates[gate_index]
        self._schedule(self.routers[gate.target], self.now + gate.delay, msg)

    def _emit(self, text: str) -> None:
        self.log.append(text)


_DEFAULT_LINKS = ((1, 2), (1, 3), (2, 4), (3, 5), (3, 6), (4, 7), (5, 7), (6, 7))
_DEFAULT_DELAY = 0.01
_LINK_PATTERN = re.compile(r"(\d+)-(\d+)(?:=(.+))?")


def _parse_link(text: str) -> Tuple[int, int, Optional[float]]:
    match = _LINK_PATTERN.fullmatch(text.strip())
    if match is None:
        raise argparse.ArgumentTypeError(f"link must look like A-B or A-B=DELAY, got {text!r}")
    delay: Optional[float] = None
    if match.group(3) is not None:
        try:
            delay = float(match.group(3))
        except ValueError as exc:
            raise argparse.ArgumentTypeError(f"bad delay in link {text!r}") from exc
    return int(match.group(1)), int(match.group(2)), delay


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the traffic-aware routing demo and print its event log."""
    parser = argparse.ArgumentParser(
        prog="ospfsim-traffic", description="Traffic-aware routing demo."
    )
    parser.add_argument("--until", type=float, default=10.0, help="simulation time limit")
    parser.add_argument("--seed", type=int, default=0, help="random seed")
    parser.add_argument(
        "--delay", type=float, default=_DEFAULT_DELAY, help="default link delay"
    )
    parser.add_argument(
        "--link",
        type=_parse_link,
        action="append",
        default=None,
        help="link between router ids, A-B or A-B=DELAY; may be repeated",
    )
    args = parser.parse_args(argv)

    links = args.link or [(a, b, None) for a, b in _DEFAULT_LINKS]
    network = TrafficNetwork(seed=args.seed)
    for router_id in sorted({rid for a, b, _ in links for rid in (a, b)}):
        network.add_router(f"r{router_id}", router_id)
    for a, b, delay in links:
        network.connect(f"r{a}", f"r{b}", args.delay if delay is None else delay)
    network.run(args.until)
    for line in network.log:
        print(line)
    return 0