# ----------------- Imports -----------------
import logging
from functools import wraps

import matplotlib.pyplot as plt
import networkx as nx

from highlight_overlay import HighlightOverlay

logger = logging.getLogger(__name__)


# ----------------- Interactive Plot Decorator -----------------
def interactive_plot(func):
    """
    Decorator for visualization functions.
    The wrapped function returns (info, fig); info is never None.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        info, fig = func(*args, **kwargs)
        return info or {}, fig
    return wrapper


# ----------------- Layout -----------------
def update_layout(G, pos=None, seed=42):
    """
    Positions for every node of G.
    Nodes that already have a position keep it; only new nodes are placed.
    """
    pos = {n: p for n, p in (pos or {}).items() if n in G}
    if G.number_of_nodes() == 0:
        return {}
    if len(pos) == G.number_of_nodes():
        return pos
    if not pos:
        return nx.spring_layout(G, seed=seed)
    return nx.spring_layout(G, pos=pos, fixed=list(pos), seed=seed)


# ----------------- Topology Rendering -----------------
@interactive_plot
def draw_topology(mirror, overlay: HighlightOverlay, pos=None, title="Network Topology",
                  seed=42, figsize=(12, 8)):
    """
    Draw the mirrored topology with the current highlight overlay.

    Node colors come from availability, edge color/width from the overlay,
    edge labels show the link cost.

    Returns:
        (info, fig); info["pos"] holds the layout to reuse on the next draw.
    """
    G = mirror.G
    pos = update_layout(G, pos, seed=seed)

    fig, ax = plt.subplots(figsize=figsize)
    ax.set_title(title)
    ax.axis("off")

    nodes = mirror.nodes()
    if nodes:
        styles = [overlay.node_style(n) for n in nodes]
        nx.draw_networkx_nodes(
            G, pos,
            nodelist=[n.id for n in nodes],
            node_color=[s["background"] for s in styles],
            edgecolors=[s["border"] for s in styles],
            node_size=600,
            ax=ax,
        )
        nx.draw_networkx_labels(G, pos, font_size=9, font_color="#343434", ax=ax)

    edges = mirror.edges()
    if edges:
        edge_styles = [overlay.edge_style(e.key) for e in edges]
        nx.draw_networkx_edges(
            G, pos,
            edgelist=[e.endpoints for e in edges],
            edge_color=[s.color for s in edge_styles],
            width=[s.width for s in edge_styles],
            ax=ax,
        )
        edge_labels = {e.endpoints: str(e.cost) for e in edges}
        nx.draw_networkx_edge_labels(G, pos, edge_labels=edge_labels, font_size=8, ax=ax)

    highlighted = overlay.highlighted_keys
    category = overlay.active_category
    info = {
        "title": title,
        "total_nodes": G.number_of_nodes(),
        "total_edges": len(edges),
        "highlighted_edges_count": len(highlighted),
        "highlight_category": category.value if category else None,
        "pos": pos,
    }
    logger.debug("Rendered %s", {k: v for k, v in info.items() if k != "pos"})

    return info, fig
