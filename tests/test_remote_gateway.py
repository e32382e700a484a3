"""
Remote Gateway Tests
====================

HTTP transport is patched out; these tests check the wire shape and how
failures and "no route" answers come back.
"""

import json
from unittest.mock import MagicMock

import pytest
import requests

from errors import LoadError, TransportError
from graph_mirror import Node
from remote_gateway import HttpGateway, RouteResult, parse_route


def make_response(status=200, payload=None, text=None):
    resp = MagicMock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    if payload is not None:
        resp.text = json.dumps(payload)
    else:
        resp.text = text or ""
    resp.content = resp.text.encode("utf-8")
    resp.json.side_effect = lambda: json.loads(resp.text)
    return resp


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def gw(session):
    return HttpGateway("http://svc:8765/", timeout=3.0, session=session)


class TestCommands:

    def test_fetch_graph(self, gw, session):
        session.post.return_value = make_response(payload={
            "nodes": [{"id": "A", "availability": True}, {"id": "B", "availability": False}],
            "edges": [{"source": "A", "target": "B", "cost": 5}],
        })
        snap = gw.fetch_graph()
        session.post.assert_called_once_with("http://svc:8765/invoke/get_graph", json={}, timeout=3.0)
        assert snap.nodes == (Node("A", True), Node("B", False))
        assert snap.edges == (("A", "B", 5),)

    def test_malformed_graph(self, gw, session):
        session.post.return_value = make_response(payload={"nodes": [{}]})
        with pytest.raises(LoadError):
            gw.fetch_graph()

    @pytest.mark.parametrize("method,args,command,body", [
        ("set_availability", ("A", False), "set_node_availability", {"id": "A", "available": False}),
        ("add_node", ("A",), "add_node", {"id": "A"}),
        ("remove_node", ("A",), "remove_node", {"id": "A"}),
        ("add_edge", ("A", "B", 3), "add_edge", {"source": "A", "target": "B", "cost": 3}),
        ("remove_edge", ("A", "B"), "remove_edge", {"source": "A", "target": "B"}),
    ])
    def test_mutations(self, gw, session, method, args, command, body):
        session.post.return_value = make_response(text="")
        assert getattr(gw, method)(*args) is None
        session.post.assert_called_once_with(f"http://svc:8765/invoke/{command}", json=body, timeout=3.0)

    def test_route_packet(self, gw, session):
        session.post.return_value = make_response(payload={"path": ["A", "B", "C"], "cost": 8})
        assert gw.route_packet("A", "C") == RouteResult(path=("A", "B", "C"), cost=8)
        session.post.assert_called_once_with(
            "http://svc:8765/invoke/route_packet", json={"start": "A", "target": "C"}, timeout=3.0,
        )

    def test_shortest_path_command(self, gw, session):
        session.post.return_value = make_response(payload={"path": [], "cost": 0})
        assert gw.shortest_path("A", "C") is None
        assert session.post.call_args[0][0].endswith("/invoke/get_shortest_path")


class TestFailures:

    def test_http_error_text_is_verbatim(self, gw, session):
        session.post.return_value = make_response(status=500, text="Node does not exist")
        with pytest.raises(TransportError) as exc:
            gw.remove_node("Z")
        assert str(exc.value) == "Node does not exist"
        assert exc.value.command == "remove_node"
        assert exc.value.status_code == 500

    def test_connection_error(self, gw, session):
        session.post.side_effect = requests.ConnectionError("refused")
        with pytest.raises(TransportError) as exc:
            gw.add_node("A")
        assert "refused" in str(exc.value)

    def test_invalid_json(self, gw, session):
        session.post.return_value = make_response(text="<html>")
        with pytest.raises(TransportError):
            gw.fetch_graph()

    def test_single_attempt(self, gw, session):
        session.post.side_effect = requests.Timeout("slow")
        with pytest.raises(TransportError):
            gw.route_packet("A", "B")
        assert session.post.call_count == 1


class TestParseRoute:

    @pytest.mark.parametrize("payload", [None, {}, {"path": []}, {"path": None, "cost": 0}])
    def test_no_route(self, payload):
        assert parse_route(payload) is None

    def test_numeric_ids(self):
        assert parse_route({"path": [1, 2], "cost": 4}) == RouteResult(path=("1", "2"), cost=4)

    def test_unexpected_shape(self):
        with pytest.raises(TransportError):
            parse_route(["A", "B"])
