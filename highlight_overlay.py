"""highlight_overlay.py

Transient route highlighting layered over a GraphMirror.

The overlay only stores which EdgeKeys are marked and in which category; it
never touches the mirror. Node colors are derived from availability alone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Set

from edge_key import path_edge_keys
from graph_mirror import GraphMirror, Node

logger = logging.getLogger(__name__)

# ---------------------- Visual constants ----------------------
NODE_COLORS = {
    True: {"background": "#5D8FDE", "border": "#0E65ED"},    # available
    False: {"background": "#CCCCCC", "border": "#666666"},   # unavailable
}

DEFAULT_EDGE_STYLE = {"color": "#848484", "width": 2}
HIGHLIGHT_WIDTH = 4


class HighlightCategory(Enum):
    ROUTE = "last-requested-route"
    SHORTEST_PATH = "shortest-path"


CATEGORY_COLORS = {
    HighlightCategory.ROUTE: "green",
    HighlightCategory.SHORTEST_PATH: "red",
}


@dataclass(frozen=True)
class EdgeStyle:
    color: str
    width: int
    highlighted: bool = False


class HighlightOverlay:
    def __init__(self, mirror: GraphMirror):
        self.mirror = mirror
        self._marks: Dict[str, HighlightCategory] = {}

    @property
    def highlighted_keys(self) -> Set[str]:
        """Marked keys whose edge is still in the mirror."""
        return {k for k in self._marks if self.mirror.has_edge(k)}

    @property
    def active_category(self) -> Optional[HighlightCategory]:
        categories = {self._marks[k] for k in self.highlighted_keys}
        return categories.pop() if len(categories) == 1 else None

    def apply_route(self, path: Iterable[str], category: HighlightCategory = HighlightCategory.ROUTE) -> List[str]:
        """Mark every hop of ``path`` that the mirror knows about.

        Replaces any previous marks. Hops with no matching edge in the mirror
        are skipped with a warning. Returns the keys that were marked.
        """
        self._marks = {}
        marked = []
        for key in path_edge_keys(path):
            if not self.mirror.has_edge(key):
                logger.warning("Edge with key %s not found, skipping highlight", key)
                continue
            self._marks[key] = category
            marked.append(key)
        logger.info("Highlighted %d edge(s) as %s", len(marked), category.value)
        return marked

    def reset(self) -> None:
        self._marks = {}

    def forget(self, keys: Iterable[str]) -> None:
        for key in keys:
            self._marks.pop(key, None)

    # ---------------------- Derived styles ----------------------
    def edge_style(self, key: str) -> EdgeStyle:
        category = self._marks.get(key)
        if category is None or not self.mirror.has_edge(key):
            return EdgeStyle(**DEFAULT_EDGE_STYLE)
        return EdgeStyle(color=CATEGORY_COLORS[category], width=HIGHLIGHT_WIDTH, highlighted=True)

    @staticmethod
    def node_style(node: Node) -> Dict[str, str]:
        return dict(NODE_COLORS[bool(node.available)])
