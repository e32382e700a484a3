"""
graph_mirror.py
---------------
Client-side cache of the confirmed remote topology.

Every mutating method is meant to be called only after the matching remote
call has been acknowledged; the mirror never holds optimistic state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

import networkx as nx
import pandas as pd

from edge_key import canonicalize, endpoints_of
from errors import LoadError, SelfLoopError, UnknownEndpoint

logger = logging.getLogger(__name__)


def _snapshot_cost(raw) -> int:
    """Edge costs are non-negative integers; integral floats such as 5.0 are accepted."""
    if isinstance(raw, bool):
        raise ValueError(f"invalid edge cost {raw!r}")
    if isinstance(raw, float) and not raw.is_integer():
        raise ValueError(f"invalid edge cost {raw!r}")
    cost = int(raw)
    if cost < 0:
        raise ValueError(f"negative edge cost {raw!r}")
    return cost


# ----------------- Data model -----------------
@dataclass(frozen=True)
class Node:
    id: str
    available: bool = True


@dataclass(frozen=True)
class Edge:
    key: str
    endpoints: Tuple[str, str]
    cost: int


@dataclass(frozen=True)
class GraphSnapshot:
    """Topology payload exchanged with the service."""
    nodes: Tuple[Node, ...] = ()
    edges: Tuple[Tuple[str, str, int], ...] = ()

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "GraphSnapshot":
        """Parse ``{"nodes": [{id, availability}], "edges": [{source, target, cost}]}``.

        Raises LoadError when the payload does not have that shape.
        """
        if not isinstance(payload, dict):
            raise LoadError(f"Graph payload must be an object, got {type(payload).__name__}")

        try:
            nodes = tuple(
                Node(id=str(item["id"]), available=bool(item.get("availability", True)))
                for item in payload.get("nodes") or []
            )
            edges = tuple(
                (str(item["source"]), str(item["target"]), _snapshot_cost(item["cost"]))
                for item in payload.get("edges") or []
            )
        except (KeyError, TypeError, ValueError) as e:
            raise LoadError(f"Malformed graph payload: {e}") from e

        return cls(nodes=nodes, edges=edges)


class MirrorOutcome(Enum):
    APPLIED = "applied"
    DUPLICATE = "duplicate_edge"
    NOT_FOUND = "not_found"


# ----------------- Mirror -----------------
class GraphMirror:
    def __init__(self):
        self.G = nx.Graph()
        # endpoints are recovered from the key itself
        self._edge_keys: Set[str] = set()
        self.loaded = False

    # ----- Full replace -----
    def load_snapshot(self, snapshot: Optional[GraphSnapshot]) -> Dict[str, int]:
        """Replace the whole node/edge state with ``snapshot``.

        The new graph is built aside and swapped in only when complete, so a
        failure leaves the previous state untouched. The service keeps each
        undirected link in both directions; the first occurrence per EdgeKey
        wins and the rest are dropped.
        """
        if snapshot is None:
            raise LoadError("No graph snapshot received")

        G = nx.Graph()
        keys: Set[str] = set()
        stats = {"nodes": 0, "edges": 0, "duplicates": 0, "skipped": 0}

        for node in snapshot.nodes:
            G.add_node(node.id, available=bool(node.available))
        stats["nodes"] = G.number_of_nodes()

        for source, target, cost in snapshot.edges:
            try:
                key = canonicalize(source, target)
            except SelfLoopError:
                logger.warning("Skipping self-loop edge on %s in snapshot", source)
                stats["skipped"] += 1
                continue

            if source not in G or target not in G:
                logger.warning("Skipping edge %s: endpoint missing from snapshot", key)
                stats["skipped"] += 1
                continue

            if key in keys:
                kept = G.edges[endpoints_of(key)]["cost"]
                if kept != cost:
                    logger.warning(
                        "Edge %s listed twice with different costs (%s, %s); keeping %s",
                        key, kept, cost, kept,
                    )
                stats["duplicates"] += 1
                continue

            G.add_edge(*endpoints_of(key), key=key, cost=int(cost))
            keys.add(key)

        stats["edges"] = len(keys)

        self.G = G
        self._edge_keys = keys
        self.loaded = True
        logger.info(
            "Loaded snapshot: %d nodes, %d edges (%d duplicates, %d skipped)",
            stats["nodes"], stats["edges"], stats["duplicates"], stats["skipped"],
        )
        return stats

    # ----- Nodes -----
    def upsert_node(self, node: Node) -> MirrorOutcome:
        if node.id in self.G:
            self.G.nodes[node.id]["available"] = bool(node.available)
        else:
            self.G.add_node(node.id, available=bool(node.available))
        return MirrorOutcome.APPLIED

    def remove_node(self, node_id: str) -> Tuple[MirrorOutcome, List[str]]:
        """Remove ``node_id`` and every edge touching it.

        Returns the outcome and the EdgeKeys removed by the cascade.
        """
        node_id = str(node_id)
        if node_id not in self.G:
            return MirrorOutcome.NOT_FOUND, []

        removed = sorted(self.edges_incident(node_id))
        self._edge_keys.difference_update(removed)
        # networkx drops incident edges together with the node
        self.G.remove_node(node_id)
        return MirrorOutcome.APPLIED, removed

    def get_node(self, node_id: str) -> Optional[Node]:
        node_id = str(node_id)
        if node_id not in self.G:
            return None
        return Node(id=node_id, available=bool(self.G.nodes[node_id].get("available", True)))

    def has_node(self, node_id: str) -> bool:
        return str(node_id) in self.G

    def nodes(self) -> List[Node]:
        return [self.get_node(n) for n in sorted(self.G.nodes())]

    # ----- Edges -----
    def upsert_edge(self, a: str, b: str, cost: int) -> MirrorOutcome:
        """Insert the link {a, b}.

        An existing link is left as is (its cost is never overwritten) and
        DUPLICATE is returned. Raises UnknownEndpoint if either node is absent.
        """
        a, b = str(a), str(b)
        key = canonicalize(a, b)
        for endpoint in (a, b):
            if endpoint not in self.G:
                raise UnknownEndpoint(endpoint)

        if key in self._edge_keys:
            return MirrorOutcome.DUPLICATE

        self.G.add_edge(*endpoints_of(key), key=key, cost=int(cost))
        self._edge_keys.add(key)
        return MirrorOutcome.APPLIED

    def remove_edge(self, a: str, b: str) -> MirrorOutcome:
        key = canonicalize(a, b)
        if key not in self._edge_keys:
            return MirrorOutcome.NOT_FOUND
        self._edge_keys.discard(key)
        self.G.remove_edge(*endpoints_of(key))
        return MirrorOutcome.APPLIED

    def get_edge(self, key: str) -> Optional[Edge]:
        if key not in self._edge_keys:
            return None
        pair = endpoints_of(key)
        return Edge(key=key, endpoints=pair, cost=int(self.G.edges[pair]["cost"]))

    def has_edge(self, key: str) -> bool:
        return key in self._edge_keys

    def edges(self) -> List[Edge]:
        return [self.get_edge(k) for k in sorted(self._edge_keys)]

    def edge_keys(self) -> Set[str]:
        return set(self._edge_keys)

    def edges_incident(self, node_id: str) -> Set[str]:
        node_id = str(node_id)
        if node_id not in self.G:
            return set()
        return {d["key"] for _, _, d in self.G.edges(node_id, data=True)}

    # ----- Tables / summary -----
    def nodes_frame(self) -> pd.DataFrame:
        rows = [
            {"Node": n.id, "Available": n.available, "Degree": self.G.degree(n.id)}
            for n in self.nodes()
        ]
        return pd.DataFrame(rows, columns=["Node", "Available", "Degree"])

    def edges_frame(self, highlighted: Iterable[str] = ()) -> pd.DataFrame:
        highlighted = set(highlighted)
        rows = [
            {
                "Link": e.key,
                "Node A": e.endpoints[0],
                "Node B": e.endpoints[1],
                "Cost": e.cost,
                "Highlighted": e.key in highlighted,
            }
            for e in self.edges()
        ]
        return pd.DataFrame(rows, columns=["Link", "Node A", "Node B", "Cost", "Highlighted"])

    def summary(self) -> Dict[str, int]:
        return {
            "total_nodes": self.G.number_of_nodes(),
            "available_nodes": sum(1 for n in self.nodes() if n.available),
            "total_edges": len(self._edge_keys),
        }
