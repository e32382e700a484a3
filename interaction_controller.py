"""interaction_controller.py

Operator actions against the topology service.

Each action validates its raw input, makes exactly one remote call, and only
after the call returns touches the mirror and the highlight overlay. Every
action returns an ActionResult; failures never leave the session unusable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from edge_key import canonicalize
from errors import LoadError, TransportError, UnknownEndpoint, ValidationError
from graph_mirror import GraphMirror, MirrorOutcome, Node
from highlight_overlay import HighlightCategory, HighlightOverlay
from remote_gateway import RemoteGateway, RouteResult

logger = logging.getLogger(__name__)


# ------------------------------ Results ------------------------------
class ActionStatus(Enum):
    APPLIED = "applied"
    WARNING = "warning"
    INVALID = "invalid"
    FAILED = "failed"
    NO_ROUTE = "no_route"


class ActionState(Enum):
    IDLE = "idle"
    AWAITING_REMOTE_CONFIRM = "awaiting_remote_confirm"
    APPLIED = "applied"
    FAILED = "failed"


@dataclass(frozen=True)
class ActionRequest:
    """What a UI layer hands over: an action kind plus raw text fields."""
    kind: str
    fields: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ActionResult:
    kind: str
    status: ActionStatus
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status in (ActionStatus.APPLIED, ActionStatus.NO_ROUTE)


# ------------------------------ Input parsing ------------------------------
def parse_node_id(raw: Optional[str], field_name: str = "id") -> str:
    node_id = str(raw).strip() if raw is not None else ""
    if not node_id:
        raise ValidationError(f"Node ID '{field_name}' cannot be empty.", field=field_name)
    return node_id


def parse_cost(raw) -> int:
    """Parse an edge cost: a non-negative integer given as text or int."""
    if isinstance(raw, bool):
        raise ValidationError(f"Invalid edge cost: {raw!r}", field="cost")
    if isinstance(raw, int):
        cost = raw
    else:
        text = str(raw).strip() if raw is not None else ""
        try:
            cost = int(text, 10)
        except ValueError:
            raise ValidationError(f"Invalid edge cost: {raw!r}", field="cost")
    if cost < 0:
        raise ValidationError(f"Edge cost must be non-negative, got {cost}", field="cost")
    return cost


# ------------------------------ Controller ------------------------------
class InteractionController:
    def __init__(self, mirror: GraphMirror, gateway: RemoteGateway, overlay: HighlightOverlay):
        self.mirror = mirror
        self.gateway = gateway
        self.overlay = overlay
        self.state = ActionState.IDLE
        self.history: List[ActionResult] = []
        self.last_state: Optional[ActionState] = None   # APPLIED or FAILED of the last action

    # ----- bookkeeping -----
    def _finish(self, result: ActionResult) -> ActionResult:
        if result.status in (ActionStatus.FAILED, ActionStatus.INVALID):
            self.state = ActionState.FAILED
            logger.warning("%s: %s", result.kind, result.message)
        else:
            self.state = ActionState.APPLIED
            logger.info("%s: %s", result.kind, result.message)
        self.history.append(result)
        self.last_state = self.state
        self.state = ActionState.IDLE
        return result

    def _call_remote(self, kind: str, call: Callable[[], Any]):
        """Run one gateway call. Returns (value, None) or (None, failed ActionResult)."""
        self.state = ActionState.AWAITING_REMOTE_CONFIRM
        try:
            return call(), None
        except TransportError as e:
            return None, ActionResult(
                kind, ActionStatus.FAILED, f"Failed to {kind.replace('_', ' ')}: {e}",
                {"command": e.command, "status_code": e.status_code},
            )

    @staticmethod
    def _invalid(kind: str, e: ValidationError) -> ActionResult:
        return ActionResult(kind, ActionStatus.INVALID, f"Invalid input! {e}", {"field": e.field})

    # ----- session start -----
    def load(self) -> ActionResult:
        """Fetch the full topology and install it in the mirror."""
        kind = "load"
        self.state = ActionState.AWAITING_REMOTE_CONFIRM
        try:
            snapshot = self.gateway.fetch_graph()
            stats = self.mirror.load_snapshot(snapshot)
        except (TransportError, LoadError) as e:
            return self._finish(ActionResult(kind, ActionStatus.FAILED, f"Failed to fetch graph: {e}"))

        self.overlay.reset()
        return self._finish(ActionResult(
            kind, ActionStatus.APPLIED,
            f"Loaded {stats['nodes']} nodes and {stats['edges']} links.", stats,
        ))

    # ----- availability -----
    def on_node_activated(self, node_id) -> ActionResult:
        """Toggle availability of a clicked node once the service confirms it."""
        kind = "toggle_availability"
        try:
            node_id = parse_node_id(node_id)
        except ValidationError as e:
            return self._finish(self._invalid(kind, e))

        node = self.mirror.get_node(node_id)
        if node is None:
            return self._finish(ActionResult(kind, ActionStatus.WARNING, f"Node '{node_id}' not found."))

        new_status = not node.available
        _, failure = self._call_remote(kind, lambda: self.gateway.set_availability(node_id, new_status))
        if failure:
            return self._finish(failure)

        self.mirror.upsert_node(Node(id=node_id, available=new_status))
        # route highlights are only meaningful for a fixed set of available nodes
        self.overlay.reset()
        label = "available" if new_status else "unavailable"
        return self._finish(ActionResult(
            kind, ActionStatus.APPLIED, f"Node '{node_id}' is now {label}.",
            {"id": node_id, "available": new_status},
        ))

    # ----- nodes -----
    def add_node(self, raw_id) -> ActionResult:
        kind = "add_node"
        try:
            node_id = parse_node_id(raw_id)
        except ValidationError as e:
            return self._finish(self._invalid(kind, e))

        _, failure = self._call_remote(kind, lambda: self.gateway.add_node(node_id))
        if failure:
            return self._finish(failure)

        self.mirror.upsert_node(Node(id=node_id, available=True))
        return self._finish(ActionResult(kind, ActionStatus.APPLIED, f"Node '{node_id}' added.", {"id": node_id}))

    def remove_node(self, raw_id) -> ActionResult:
        kind = "remove_node"
        try:
            node_id = parse_node_id(raw_id)
        except ValidationError as e:
            return self._finish(self._invalid(kind, e))

        _, failure = self._call_remote(kind, lambda: self.gateway.remove_node(node_id))
        if failure:
            return self._finish(failure)

        outcome, removed = self.mirror.remove_node(node_id)
        if outcome is MirrorOutcome.NOT_FOUND:
            return self._finish(ActionResult(
                kind, ActionStatus.WARNING, f"Node '{node_id}' was not in the visualization.", {"id": node_id},
            ))

        self.overlay.forget(removed)
        return self._finish(ActionResult(
            kind, ActionStatus.APPLIED,
            f"Node '{node_id}' removed with {len(removed)} link(s).",
            {"id": node_id, "removed_edges": removed},
        ))

    # ----- edges -----
    def add_edge(self, raw_source, raw_target, raw_cost) -> ActionResult:
        kind = "add_edge"
        try:
            source = parse_node_id(raw_source, "source")
            target = parse_node_id(raw_target, "target")
            key = canonicalize(source, target)
            cost = parse_cost(raw_cost)
        except ValidationError as e:
            return self._finish(self._invalid(kind, e))

        # Checked before the remote call so an existing link's cost is never
        # changed through the add path.
        if self.mirror.has_edge(key):
            return self._finish(self._duplicate(kind, key))
        for endpoint in (source, target):
            if not self.mirror.has_node(endpoint):
                return self._finish(self._unknown_endpoint(kind, endpoint))

        _, failure = self._call_remote(kind, lambda: self.gateway.add_edge(source, target, cost))
        if failure:
            return self._finish(failure)

        try:
            outcome = self.mirror.upsert_edge(source, target, cost)
        except UnknownEndpoint as e:
            # the node went away while the call was in flight
            return self._finish(self._unknown_endpoint(kind, e.node_id))
        if outcome is MirrorOutcome.DUPLICATE:
            return self._finish(self._duplicate(kind, key))

        return self._finish(ActionResult(
            kind, ActionStatus.APPLIED, f"Link {key} added with cost {cost}.",
            {"key": key, "cost": cost},
        ))

    def remove_edge(self, raw_source, raw_target) -> ActionResult:
        kind = "remove_edge"
        try:
            source = parse_node_id(raw_source, "source")
            target = parse_node_id(raw_target, "target")
            key = canonicalize(source, target)
        except ValidationError as e:
            return self._finish(self._invalid(kind, e))

        _, failure = self._call_remote(kind, lambda: self.gateway.remove_edge(source, target))
        if failure:
            return self._finish(failure)

        if self.mirror.remove_edge(source, target) is MirrorOutcome.NOT_FOUND:
            return self._finish(ActionResult(
                kind, ActionStatus.WARNING, f"Link {key} was not in the visualization.", {"key": key},
            ))

        self.overlay.forget([key])
        return self._finish(ActionResult(kind, ActionStatus.APPLIED, f"Link {key} removed.", {"key": key}))

    @staticmethod
    def _duplicate(kind: str, key: str) -> ActionResult:
        return ActionResult(kind, ActionStatus.WARNING, f"Link {key} already exists in the visualization.",
                            {"key": key, "outcome": MirrorOutcome.DUPLICATE.value})

    @staticmethod
    def _unknown_endpoint(kind: str, node_id: str) -> ActionResult:
        return ActionResult(kind, ActionStatus.WARNING, f"Node '{node_id}' does not exist.",
                            {"id": node_id, "outcome": "unknown_endpoint"})

    # ----- routes -----
    def route_packet(self, raw_start, raw_target) -> ActionResult:
        return self._request_route("route_packet", raw_start, raw_target,
                                   self.gateway.route_packet, HighlightCategory.ROUTE)

    def find_shortest_path(self, raw_start, raw_target) -> ActionResult:
        return self._request_route("find_shortest_path", raw_start, raw_target,
                                   self.gateway.shortest_path, HighlightCategory.SHORTEST_PATH)

    def _request_route(self, kind, raw_start, raw_target,
                       call: Callable[[str, str], Optional[RouteResult]],
                       category: HighlightCategory) -> ActionResult:
        try:
            start = parse_node_id(raw_start, "start")
            target = parse_node_id(raw_target, "target")
        except ValidationError as e:
            return self._finish(self._invalid(kind, e))

        route, failure = self._call_remote(kind, lambda: call(start, target))
        if failure:
            return self._finish(failure)

        if route is None:
            # leave whatever is highlighted in place
            return self._finish(ActionResult(
                kind, ActionStatus.NO_ROUTE, f"No available path found from '{start}' to '{target}'.",
                {"start": start, "target": target},
            ))

        marked = self.overlay.apply_route(route.path, category)
        expected = max(len(route.path) - 1, 0)
        message = f"Path: {' → '.join(route.path)} | Cost: {route.cost}"
        status = ActionStatus.APPLIED
        if len(marked) < expected:
            status = ActionStatus.WARNING
            message += f" ({expected - len(marked)} hop(s) not shown: link unknown to the visualization)"

        return self._finish(ActionResult(kind, status, message, {
            "path": list(route.path),
            "cost": route.cost,
            "highlighted": marked,
            "category": category.value,
        }))

    def reset_graph(self) -> ActionResult:
        self.overlay.reset()
        return self._finish(ActionResult("reset_graph", ActionStatus.APPLIED, "Highlights cleared."))

    # ----- UI entry point -----
    def dispatch(self, request: ActionRequest) -> ActionResult:
        """Route an ActionRequest from any UI layer to the matching action."""
        f = request.fields
        handlers = {
            "load": lambda: self.load(),
            "toggle_availability": lambda: self.on_node_activated(f.get("id")),
            "add_node": lambda: self.add_node(f.get("id")),
            "remove_node": lambda: self.remove_node(f.get("id")),
            "add_edge": lambda: self.add_edge(f.get("source"), f.get("target"), f.get("cost")),
            "remove_edge": lambda: self.remove_edge(f.get("source"), f.get("target")),
            "route_packet": lambda: self.route_packet(f.get("start"), f.get("target")),
            "find_shortest_path": lambda: self.find_shortest_path(f.get("start"), f.get("target")),
            "reset_graph": lambda: self.reset_graph(),
        }
        handler = handlers.get(request.kind)
        if handler is None:
            return self._finish(ActionResult(request.kind, ActionStatus.INVALID, f"Unknown action '{request.kind}'."))
        return handler()
