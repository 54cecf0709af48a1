"""gxplorer Streamlit UI — separate from src, uses backend APIs."""

from __future__ import annotations

import json
import sys
from pathlib import Path

# Allow importing ui.lib when running as: streamlit run ui/app.py
if str(Path(__file__).resolve().parent) not in sys.path:
    sys.path.insert(0, str(Path(__file__).resolve().parent))

import streamlit as st

from lib.api import (
    click_node,
    clear_history,
    create_connection,
    create_label,
    delete_connection,
    export_graph,
    get_activity,
    get_base_url,
    get_graph,
    get_session,
    health,
    hover_node,
    list_connections,
    ready,
    refresh_schema,
    select_connection,
    start_session,
    submit_query,
    update_connection,
)

DEFAULT_QUERY = "g.V().limit(10)"
DEFAULT_SERVER_URL = "ws://localhost:8182/gremlin"
CONNECTION_TYPES = ["local", "cosmos"]


# Page config
st.set_page_config(
    page_title="gxplorer",
    page_icon="🕸️",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Sidebar navigation
st.sidebar.title("gxplorer")
st.sidebar.caption("Gremlin graph explorer")
nav = st.sidebar.radio(
    "Section",
    ["Explorer", "Connections", "Console", "Health"],
    label_visibility="collapsed",
)

# API base URL (optional)
api_url = st.sidebar.text_input(
    "API base URL",
    value=get_base_url(),
    help="Backend API root, e.g. http://localhost:8000",
)
if api_url:
    import os
    os.environ["GXPLORER_API_URL"] = api_url.rstrip("/")


def _session_id() -> str | None:
    """Current backend session id, started on first use."""
    if "session_id" not in st.session_state:
        try:
            st.session_state["session_id"] = start_session()["session_id"]
        except Exception as e:
            st.sidebar.error(f"Could not start session: {e}")
            return None
    return st.session_state["session_id"]


def _connection_details(prefix: str, type_: str, current: dict | None = None) -> dict:
    current = current or {}
    details = {
        "url": st.text_input(
            "Gremlin Server URL",
            value=current.get("url", DEFAULT_SERVER_URL if type_ == "local" else ""),
            key=f"{prefix}_url",
        )
    }
    if type_ == "cosmos":
        details["accessKey"] = st.text_input(
            "Access key", value=current.get("accessKey", ""), type="password", key=f"{prefix}_key"
        )
        details["dbName"] = st.text_input("Database name", value=current.get("dbName", ""), key=f"{prefix}_db")
        details["graphName"] = st.text_input(
            "Graph name", value=current.get("graphName", ""), key=f"{prefix}_graph"
        )
    return details


session_id = _session_id()

# ----- Explorer tab -----
if nav == "Explorer":
    st.header("Explorer")
    if not session_id:
        st.stop()

    try:
        connections = list_connections()
    except Exception as e:
        st.error(f"Failed to load connections: {e}")
        connections = []

    try:
        state = get_session(session_id)
    except Exception:
        # Backend restarted: start over with a new session.
        st.session_state.pop("session_id", None)
        session_id = _session_id()
        state = get_session(session_id) if session_id else {}

    if not connections:
        st.info("No connections yet. Add one under **Connections**.")
    else:
        names = {c["id"]: f"{c['name']} ({c['type']})" for c in connections}
        ids = list(names)
        current = state.get("connection_id")
        col1, col2 = st.columns([4, 1])
        with col1:
            chosen = st.selectbox(
                "Connection",
                options=ids,
                index=ids.index(current) if current in ids else 0,
                format_func=lambda cid: names[cid],
            )
        with col2:
            st.write("")
            if st.button("Connect", use_container_width=True):
                with st.spinner("Fetching schema…"):
                    try:
                        state = select_connection(session_id, chosen)
                    except Exception as e:
                        st.error(f"Failed to select connection: {e}")

    conn_state = state.get("connection_state", "idle")
    if conn_state == "connected":
        st.success(f"Connected to **{state.get('connection_name')}**")
    elif conn_state == "error":
        st.error(state.get("connection_error") or "Connection failed")

    if state.get("connection_id"):
        # Query
        history = state.get("history") or []
        picked = st.selectbox("History", options=[""] + history, index=0, help="Recent queries, newest first")
        with st.form("query_form"):
            query = st.text_area("Gremlin query", value=picked or DEFAULT_QUERY, height=120)
            run = st.form_submit_button("Run query")
        if run:
            with st.spinner("Running query…"):
                try:
                    state = submit_query(session_id, query)
                except Exception as e:
                    st.error(f"Query request failed: {e}")
        if history and st.button("Clear history"):
            clear_history(session_id)
            st.rerun()

        tab_result, tab_graph, tab_schema, tab_node = st.tabs(["Query Result", "Graph", "Schema", "Node Data"])

        with tab_result:
            if state.get("query_error"):
                st.error(state["query_error"])
            elif state.get("query_succeeded"):
                st.caption(f"Completed in {state.get('query_elapsed_ms')} ms")
                st.json(state.get("query_result"))
            else:
                st.info("Run a query to see results.")

        with tab_graph:
            try:
                graph = get_graph(session_id)
            except Exception as e:
                st.error(f"Failed to load graph: {e}")
                graph = {}
            node_count = graph.get("node_count", 0)
            edge_count = graph.get("edge_count", 0)
            if node_count == 0:
                st.warning("No graph elements in the current result.")
            else:
                with st.spinner("Rendering graph…"):
                    image_bytes = export_graph(session_id, format="png")
                st.caption(f"Nodes: **{node_count}** · Edges: **{edge_count}**")
                st.image(image_bytes, use_container_width=True)

                nodes = [el for el in graph.get("elements", []) if el.get("group") == "nodes"]
                labels = {n["id"]: f"{n.get('label') or '?'} · {n['id']}" for n in nodes}
                inspect = st.selectbox(
                    "Inspect node",
                    options=[""] + list(labels),
                    format_func=lambda nid: labels.get(nid, "—"),
                )
                if inspect:
                    if inspect != state.get("hovered_node_id"):
                        hover_node(session_id, inspect)
                        graph = get_graph(session_id)
                    if graph.get("hovered_node"):
                        st.json(graph["hovered_node"])
                    if st.button("Load node data"):
                        with st.spinner("Fetching node…"):
                            click_node(session_id, inspect)
                        st.info("Loaded, see the **Node Data** tab.")

                col1, col2 = st.columns(2)
                col1.download_button(
                    "Download JSON", export_graph(session_id, "json"), file_name="graph.json"
                )
                col2.download_button(
                    "Download GraphML", export_graph(session_id, "graphml"), file_name="graph.graphml"
                )

        with tab_schema:
            schema = state.get("schema") or {}
            col1, col2 = st.columns(2)
            with col1:
                st.subheader("Vertex labels")
                for label in schema.get("vertex_labels", []):
                    st.markdown(f"- `{label}`")
            with col2:
                st.subheader("Edge labels")
                for label in schema.get("edge_labels", []):
                    st.markdown(f"- `{label}`")
            if st.button("Refresh schema"):
                refresh_schema(session_id)
                st.rerun()

            with st.form("label_form"):
                new_label = st.text_input("Label name")
                kind = st.selectbox("Type", ["vertex", "edge"])
                add = st.form_submit_button("Create label")
            if add:
                if not new_label.strip():
                    st.error("Label name is required.")
                else:
                    result = create_label(session_id, new_label.strip(), kind)
                    if result.get("query_error"):
                        st.error(result["query_error"])
                    else:
                        st.rerun()

        with tab_node:
            latest = get_session(session_id)
            if latest.get("node_detail_loading"):
                st.info("Loading…")
            data = latest.get("selected_node_data")
            if data is None:
                st.info("Pick a node in the Graph tab to see its data.")
            elif isinstance(data, dict) and data.get("error"):
                st.error(data["error"])
            else:
                items = data.get("result") if isinstance(data, dict) else data
                if isinstance(items, list) and items:
                    st.json(items[0])
                else:
                    st.json(data)

# ----- Connections tab -----
elif nav == "Connections":
    st.header("Connections")

    type_ = st.selectbox("Type", CONNECTION_TYPES, key="new_type")
    with st.form("connection_form"):
        name = st.text_input("Name", placeholder="e.g. Local Gremlin Server")
        details = _connection_details("new", type_)
        submitted = st.form_submit_button("Save connection")
    if submitted:
        try:
            created = create_connection(name.strip(), type_, details)
        except Exception as e:
            st.error(f"Failed to save connection: {e}")
        else:
            st.success(f"Saved `{created['name']}`")

    try:
        connections = list_connections()
    except Exception as e:
        st.error(str(e))
        connections = []

    for conn in connections:
        with st.expander(f"{conn['name']} ({conn['type']})"):
            with st.form(f"edit_{conn['id']}"):
                new_name = st.text_input("Name", value=conn["name"], key=f"name_{conn['id']}")
                new_details = _connection_details(conn["id"], conn["type"], conn.get("details"))
                save = st.form_submit_button("Update")
            if save:
                try:
                    update_connection(conn["id"], name=new_name.strip(), details=new_details)
                    st.rerun()
                except Exception as e:
                    st.error(f"Update failed: {e}")
            if st.button("Delete", key=f"delete_{conn['id']}"):
                delete_connection(conn["id"])
                st.rerun()

# ----- Console tab -----
elif nav == "Console":
    st.header("Console")
    if session_id:
        try:
            entries = get_activity(session_id)
        except Exception as e:
            st.error(str(e))
            entries = []
        if not entries:
            st.info("No activity yet.")
        for entry in entries:
            icon = {"query": "▶", "connection": "🔌", "error": "❌", "info": "ℹ"}.get(entry["type"], "·")
            st.markdown(f"{icon} `{entry['time']}` **{entry['message']}**")
            extra = {k: entry.get(k) for k in ("endpoint", "query", "success", "details") if entry.get(k) is not None}
            if extra:
                st.caption(json.dumps(extra, default=str))

# ----- Health tab -----
elif nav == "Health":
    st.header("Health")
    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Health")
        try:
            st.json(health())
        except Exception as e:
            st.error(str(e))
    with col2:
        st.subheader("Ready")
        try:
            st.json(ready())
        except Exception as e:
            st.error(str(e))
