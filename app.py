"""app.py

Streamlit UI for the topology client.

The page owns one session (mirror, overlay, gateway, controller) kept in
``st.session_state``; every toolbar form turns raw text into an ActionRequest
for the controller and re-renders from the mirror.
"""

from __future__ import annotations

import matplotlib.pyplot as plt
import streamlit as st

from config import configure_logging, load_config
from graph_mirror import GraphMirror
from graph_utils import draw_topology
from highlight_overlay import HighlightOverlay
from interaction_controller import ActionRequest, InteractionController
from remote_gateway import HttpGateway
from ui_utils import show_result, timed


def _new_session(config) -> dict:
    mirror = GraphMirror()
    overlay = HighlightOverlay(mirror)
    gateway = HttpGateway(config.service_url, timeout=config.timeout_s)
    controller = InteractionController(mirror, gateway, overlay)
    return {"config": config, "mirror": mirror, "overlay": overlay, "controller": controller, "pos": None}


@timed("Service round trip")
def _run(request: ActionRequest):
    session = st.session_state["session"]
    result = session["controller"].dispatch(request)
    st.session_state["last_result"] = result
    return result


st.set_page_config(page_title="Most Secure Path", page_icon="🛜", layout="wide")
st.title("🛜 Most Secure Path")

if "session" not in st.session_state:
    cfg = load_config()
    configure_logging(cfg)
    st.session_state["session"] = _new_session(cfg)
    _run(ActionRequest("load"))

session = st.session_state["session"]
mirror: GraphMirror = session["mirror"]
overlay: HighlightOverlay = session["overlay"]

st.caption(f"Service: {session['config'].service_url}")

# --------------------------- Sidebar toolbar ---------------------------
with st.sidebar:
    st.header("🧰 Toolbar")

    with st.form("add_node", clear_on_submit=True):
        st.subheader("Add Node")
        node_id = st.text_input("Node ID", key="add_node_id")
        if st.form_submit_button("Add Node"):
            _run(ActionRequest("add_node", {"id": node_id}))

    with st.form("remove_node", clear_on_submit=True):
        st.subheader("Remove Node")
        node_id = st.text_input("Node ID to remove", key="remove_node_id")
        if st.form_submit_button("Remove Node"):
            _run(ActionRequest("remove_node", {"id": node_id}))

    with st.form("add_edge", clear_on_submit=True):
        st.subheader("Add Edge")
        source = st.text_input("Source node ID", key="add_edge_source")
        target = st.text_input("Target node ID", key="add_edge_target")
        cost = st.text_input("Edge cost")
        if st.form_submit_button("Add Edge"):
            _run(ActionRequest("add_edge", {"source": source, "target": target, "cost": cost}))

    with st.form("remove_edge", clear_on_submit=True):
        st.subheader("Remove Edge")
        source = st.text_input("Source node ID", key="remove_edge_source")
        target = st.text_input("Target node ID", key="remove_edge_target")
        if st.form_submit_button("Remove Edge"):
            _run(ActionRequest("remove_edge", {"source": source, "target": target}))

    st.markdown("---")
    if st.button("Reload topology"):
        _run(ActionRequest("load"))

# --------------------------- Route panel ---------------------------
st.subheader("📦 Route")
with st.form("route", clear_on_submit=False):
    col1, col2 = st.columns(2)
    with col1:
        start = st.text_input("Start node ID", key="route_start")
    with col2:
        target = st.text_input("Target node ID", key="route_target")
    b1, b2, b3 = st.columns(3)
    with b1:
        do_route = st.form_submit_button("Route Packet")
    with b2:
        do_shortest = st.form_submit_button("Find Shortest Path")
    with b3:
        do_reset = st.form_submit_button("Reset Graph")

if do_route:
    _run(ActionRequest("route_packet", {"start": start, "target": target}))
elif do_shortest:
    _run(ActionRequest("find_shortest_path", {"start": start, "target": target}))
elif do_reset:
    _run(ActionRequest("reset_graph"))

# --------------------------- Availability ---------------------------
node_ids = [n.id for n in mirror.nodes()]
col1, col2 = st.columns([3, 1])
with col1:
    clicked = st.selectbox("Node", node_ids, index=None, placeholder="Select a node to toggle availability")
with col2:
    if st.button("Toggle availability", disabled=clicked is None):
        _run(ActionRequest("toggle_availability", {"id": clicked}))

if st.session_state.get("last_result") is not None:
    show_result(st.session_state["last_result"])

# --------------------------- Plot & tables ---------------------------
cfg = session["config"]
info, fig = draw_topology(mirror, overlay, pos=session["pos"], seed=cfg.layout_seed, figsize=cfg.figure_size)
session["pos"] = info.get("pos")
st.pyplot(fig, clear_figure=True)
plt.close(fig)

summary = mirror.summary()
st.caption(
    f"Nodes: {summary['total_nodes']} ({summary['available_nodes']} available) | "
    f"Links: {summary['total_edges']} | Highlighted: {info.get('highlighted_edges_count', 0)}"
)

tab_nodes, tab_links = st.tabs(["Nodes", "Links"])
with tab_nodes:
    st.dataframe(mirror.nodes_frame(), use_container_width=True)
with tab_links:
    st.dataframe(mirror.edges_frame(overlay.highlighted_keys), use_container_width=True)
