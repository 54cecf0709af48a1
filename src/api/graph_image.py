"""Render projected graph elements to PNG/JPEG image bytes."""

from __future__ import annotations

import io
from typing import Literal, Sequence, Union

from src.graph.export import split_elements
from src.models.graph import RenderEdge, RenderNode


def render_graph_image(
    elements: Sequence[Union[RenderNode, RenderEdge]],
    format: Literal["png", "jpeg", "jpg"] = "png",
    dpi: int = 100,
    figsize: tuple[float, float] = (12, 8),
) -> bytes:
    """Render the graph to image bytes using NetworkX + Matplotlib.

    Args:
        elements: Output of the element projector (nodes first, then edges).
        format: Output format: "png", "jpeg", or "jpg".
        dpi: Dots per inch for the image.
        figsize: Figure size (width, height) in inches.

    Returns:
        Image bytes (PNG or JPEG).
    """
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
    import networkx as nx

    nodes, edges = split_elements(elements)
    if not nodes:
        return _empty_image_bytes(format, dpi)

    G = nx.DiGraph()
    for node in nodes:
        G.add_node(node.id, label=node.label)
    for edge in edges:
        G.add_edge(edge.source, edge.target, label=edge.label)

    try:
        pos = nx.spring_layout(G, k=1.5, iterations=50, seed=42)
    except Exception:
        pos = nx.shell_layout(G)

    fig, ax = plt.subplots(figsize=figsize, dpi=dpi)
    fig.patch.set_facecolor("white")
    ax.set_facecolor("white")

    # Node captions: vertex label, with the name property when present
    labels = {}
    for node in nodes:
        caption = node.label or node.id
        name = node.properties.get("name")
        if isinstance(name, str) and name:
            caption = f"{caption}\n{name[:17] + '...' if len(name) > 20 else name}"
        labels[node.id] = caption

    nx.draw_networkx_nodes(
        G,
        pos,
        nodelist=[n.id for n in nodes],
        node_color=[n.color for n in nodes],
        node_size=800,
        alpha=0.9,
        ax=ax,
    )
    nx.draw_networkx_edges(
        G,
        pos,
        edge_color="#43a047",
        arrows=True,
        arrowsize=12,
        ax=ax,
    )
    nx.draw_networkx_labels(
        G,
        pos,
        labels=labels,
        font_size=8,
        font_color="black",
        ax=ax,
    )
    edge_labels = {(e.source, e.target): e.label for e in edges if e.label}
    if edge_labels:
        nx.draw_networkx_edge_labels(G, pos, edge_labels=edge_labels, font_size=6, ax=ax)

    ax.axis("off")
    plt.tight_layout(pad=0.5)

    buf = io.BytesIO()
    save_fmt = "jpg" if format in ("jpeg", "jpg") else "png"
    plt.savefig(buf, format=save_fmt, bbox_inches="tight", facecolor="white", dpi=dpi)
    plt.close(fig)
    buf.seek(0)
    return buf.read()


def _empty_image_bytes(format: Literal["png", "jpeg", "jpg"], dpi: int) -> bytes:
    """Return a small placeholder image when the graph has no nodes."""
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(figsize=(4, 2), dpi=dpi)
    fig.patch.set_facecolor("white")
    ax.set_facecolor("white")
    ax.text(0.5, 0.5, "No graph data to display", ha="center", va="center", fontsize=12)
    ax.axis("off")
    buf = io.BytesIO()
    save_fmt = "jpg" if format in ("jpeg", "jpg") else "png"
    plt.savefig(buf, format=save_fmt, bbox_inches="tight", facecolor="white", dpi=dpi)
    plt.close(fig)
    buf.seek(0)
    return buf.read()
