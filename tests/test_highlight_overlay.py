"""
Highlight Overlay Tests
=======================

Highlights are transient: they must never alter topology and must always be
clearable.
"""

import logging

from graph_mirror import Node
from highlight_overlay import (
    CATEGORY_COLORS,
    DEFAULT_EDGE_STYLE,
    HIGHLIGHT_WIDTH,
    EdgeStyle,
    HighlightCategory,
    HighlightOverlay,
)

DEFAULT = EdgeStyle(**DEFAULT_EDGE_STYLE)


def all_styles(overlay, mirror):
    return {k: overlay.edge_style(k) for k in mirror.edge_keys()}


class TestApplyRoute:

    def test_route_marks_path_edges(self, mirror, overlay):
        marked = overlay.apply_route(["A", "B", "C"])
        assert marked == ["A-B", "B-C"]
        assert overlay.highlighted_keys == {"A-B", "B-C"}
        style = overlay.edge_style("A-B")
        assert style.color == CATEGORY_COLORS[HighlightCategory.ROUTE]
        assert style.width == HIGHLIGHT_WIDTH
        assert style.highlighted

    def test_unknown_hops_are_skipped_and_logged(self, mirror, overlay, caplog):
        with caplog.at_level(logging.WARNING, logger="highlight_overlay"):
            marked = overlay.apply_route(["A", "C", "B"])
        assert marked == ["B-C"]
        assert "A-C" in caplog.text

    def test_new_route_replaces_previous(self, mirror, overlay):
        mirror.upsert_node(Node("D"))
        mirror.upsert_edge("C", "D", 1)
        overlay.apply_route(["A", "B"])
        overlay.apply_route(["C", "D"], HighlightCategory.SHORTEST_PATH)
        assert overlay.highlighted_keys == {"C-D"}
        assert overlay.edge_style("A-B") == DEFAULT
        assert overlay.edge_style("C-D").color == "red"
        assert overlay.active_category is HighlightCategory.SHORTEST_PATH

    def test_topology_untouched(self, mirror, overlay):
        before = (mirror.nodes(), mirror.edges())
        overlay.apply_route(["A", "B", "C"])
        overlay.reset()
        assert (mirror.nodes(), mirror.edges()) == before

    def test_marks_of_removed_edges_disappear(self, mirror, overlay):
        overlay.apply_route(["A", "B", "C"])
        mirror.remove_edge("A", "B")
        assert overlay.highlighted_keys == {"B-C"}
        assert overlay.edge_style("A-B") == DEFAULT

    def test_forget(self, mirror, overlay):
        overlay.apply_route(["A", "B", "C"])
        overlay.forget(["B-C", "X-Y"])
        assert overlay.highlighted_keys == {"A-B"}


class TestReset:

    def test_reset_restores_defaults(self, mirror, overlay):
        overlay.apply_route(["A", "B", "C"])
        overlay.apply_route(["C", "B"], HighlightCategory.SHORTEST_PATH)
        overlay.reset()
        assert overlay.highlighted_keys == set()
        assert all(s == DEFAULT for s in all_styles(overlay, mirror).values())
        assert overlay.active_category is None

    def test_reset_twice_same_as_once(self, mirror, overlay):
        overlay.apply_route(["A", "B", "C"])
        overlay.reset()
        once = all_styles(overlay, mirror)
        overlay.reset()
        assert all_styles(overlay, mirror) == once

    def test_reset_without_route(self, mirror, overlay):
        overlay.reset()
        assert overlay.highlighted_keys == set()


class TestNodeStyle:

    def test_color_follows_availability(self, overlay):
        assert overlay.node_style(Node("A", True))["background"] == "#5D8FDE"
        assert overlay.node_style(Node("A", False)) == {"background": "#CCCCCC", "border": "#666666"}

    def test_independent_of_highlight(self, mirror, overlay):
        before = overlay.node_style(mirror.get_node("B"))
        overlay.apply_route(["A", "B", "C"])
        assert overlay.node_style(mirror.get_node("B")) == before
