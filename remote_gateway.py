"""remote_gateway.py

Request/response access to the topology service.

One method per remote command, one round trip per call. Failures are raised
as TransportError carrying the service text verbatim; nothing is retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import requests

from errors import TransportError
from graph_mirror import GraphSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteResult:
    path: Tuple[str, ...]
    cost: float


def parse_route(payload: Any) -> Optional[RouteResult]:
    """Turn a route response into a RouteResult, or None when there is no route.

    The service answers an unreachable target with either ``null`` or an
    empty path.
    """
    if not payload:
        return None
    if not isinstance(payload, dict):
        raise TransportError("route", f"Unexpected route payload: {payload!r}")

    path = tuple(str(n) for n in payload.get("path") or [])
    if not path:
        return None
    return RouteResult(path=path, cost=payload.get("cost", 0) or 0)


class RemoteGateway:
    """Operations the client needs from the topology service."""

    def fetch_graph(self) -> GraphSnapshot:
        raise NotImplementedError

    def set_availability(self, node_id: str, available: bool) -> None:
        raise NotImplementedError

    def add_node(self, node_id: str) -> None:
        raise NotImplementedError

    def remove_node(self, node_id: str) -> None:
        raise NotImplementedError

    def add_edge(self, source: str, target: str, cost: int) -> None:
        raise NotImplementedError

    def remove_edge(self, source: str, target: str) -> None:
        raise NotImplementedError

    def route_packet(self, start: str, target: str) -> Optional[RouteResult]:
        raise NotImplementedError

    def shortest_path(self, start: str, target: str) -> Optional[RouteResult]:
        raise NotImplementedError


class HttpGateway(RemoteGateway):
    """JSON-over-HTTP gateway: ``POST {base_url}/invoke/{command}`` with named args."""

    def __init__(self, base_url: str, timeout: Optional[float] = None, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    # ------------------------------ Transport ------------------------------
    def invoke(self, command: str, **args) -> Any:
        url = f"{self.base_url}/invoke/{command}"
        logger.debug("-> %s %s", command, args)
        try:
            resp = self.session.post(url, json=args, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("%s failed: %s", command, e)
            raise TransportError(command, str(e)) from e

        if not resp.ok:
            message = (resp.text or "").strip() or f"HTTP {resp.status_code}"
            logger.error("%s rejected (%s): %s", command, resp.status_code, message)
            raise TransportError(command, message, status_code=resp.status_code)

        if not resp.content:
            return None
        try:
            data = resp.json()
        except ValueError as e:
            raise TransportError(command, f"Invalid JSON response: {e}", status_code=resp.status_code) from e
        logger.debug("<- %s %s", command, data)
        return data

    # ------------------------------ Commands ------------------------------
    def fetch_graph(self) -> GraphSnapshot:
        return GraphSnapshot.from_payload(self.invoke("get_graph"))

    def set_availability(self, node_id: str, available: bool) -> None:
        self.invoke("set_node_availability", id=node_id, available=bool(available))

    def add_node(self, node_id: str) -> None:
        self.invoke("add_node", id=node_id)

    def remove_node(self, node_id: str) -> None:
        self.invoke("remove_node", id=node_id)

    def add_edge(self, source: str, target: str, cost: int) -> None:
        self.invoke("add_edge", source=source, target=target, cost=int(cost))

    def remove_edge(self, source: str, target: str) -> None:
        self.invoke("remove_edge", source=source, target=target)

    def route_packet(self, start: str, target: str) -> Optional[RouteResult]:
        return parse_route(self.invoke("route_packet", start=start, target=target))

    def shortest_path(self, start: str, target: str) -> Optional[RouteResult]:
        return parse_route(self.invoke("get_shortest_path", start=start, target=target))
