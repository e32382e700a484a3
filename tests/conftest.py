import matplotlib

matplotlib.use("Agg")

import pytest

from errors import TransportError
from graph_mirror import GraphMirror, GraphSnapshot, Node
from highlight_overlay import HighlightOverlay
from interaction_controller import InteractionController
from remote_gateway import RemoteGateway, RouteResult


class FakeGateway(RemoteGateway):
    """In-memory stand-in for the topology service.

    Records every call, can be told to fail the next call(s), and answers
    route requests from ``routes`` ({(start, target): RouteResult or None}).
    ``on_call`` runs before each command returns so tests can inspect the
    mirror while a call is in flight.
    """

    def __init__(self, snapshot=None):
        self.snapshot = snapshot or GraphSnapshot()
        self.calls = []
        self.fail_with = None
        self.routes = {}
        self.on_call = None

    def _record(self, command, *args):
        self.calls.append((command,) + args)
        if self.on_call is not None:
            self.on_call(command, args)
        if self.fail_with is not None:
            raise TransportError(command, self.fail_with)

    def fetch_graph(self):
        self._record("get_graph")
        return self.snapshot

    def set_availability(self, node_id, available):
        self._record("set_node_availability", node_id, available)

    def add_node(self, node_id):
        self._record("add_node", node_id)

    def remove_node(self, node_id):
        self._record("remove_node", node_id)

    def add_edge(self, source, target, cost):
        self._record("add_edge", source, target, cost)

    def remove_edge(self, source, target):
        self._record("remove_edge", source, target)

    def route_packet(self, start, target):
        self._record("route_packet", start, target)
        return self.routes.get((start, target))

    def shortest_path(self, start, target):
        self._record("get_shortest_path", start, target)
        return self.routes.get((start, target))


def abc_snapshot():
    """Nodes A, B, C with links A-B (5) and B-C (3), both directions listed."""
    return GraphSnapshot(
        nodes=(Node("A"), Node("B"), Node("C")),
        edges=(("A", "B", 5), ("B", "A", 5), ("B", "C", 3), ("C", "B", 3)),
    )


@pytest.fixture
def mirror():
    m = GraphMirror()
    m.load_snapshot(abc_snapshot())
    return m


@pytest.fixture
def overlay(mirror):
    return HighlightOverlay(mirror)


@pytest.fixture
def gateway():
    gw = FakeGateway(abc_snapshot())
    gw.routes[("A", "C")] = RouteResult(path=("A", "B", "C"), cost=8)
    return gw


@pytest.fixture
def controller(gateway):
    m = GraphMirror()
    ctl = InteractionController(m, gateway, HighlightOverlay(m))
    ctl.load()
    gateway.calls.clear()
    return ctl
