"""Run a Gremlin query and export the resulting graph to JSON or GraphML.

Usage: python -m scripts.export_graph "g.V().limit(50)" [graph.json|graph.graphml] [server_url]
"""

from __future__ import annotations

import asyncio
import sys

from src.config import get_settings
from src.graph.export import split_elements, to_graphml, to_json
from src.graph.projector import project_raw
from src.services.gremlin_service import GremlinService
from src.utils.logging import setup_logging


async def main() -> None:
    setup_logging(log_level="INFO", log_format="console")
    settings = get_settings()

    query = sys.argv[1] if len(sys.argv) > 1 else settings.DEFAULT_QUERY
    filename = sys.argv[2] if len(sys.argv) > 2 else "graph_export.json"
    url = sys.argv[3] if len(sys.argv) > 3 else settings.DEFAULT_SERVER_URL

    service = GremlinService(pool_size=settings.GREMLIN_POOL_SIZE)
    envelope = await service.execute("local", {"url": url}, query)
    if not envelope["success"]:
        print(f"Query failed: {envelope['error']}")
        sys.exit(1)

    elements = project_raw(envelope["result"])
    nodes, edges = split_elements(elements)
    if not nodes:
        print("No graph data found.")
        sys.exit(0)

    content = to_graphml(elements) if filename.endswith(".graphml") else to_json(elements)
    with open(filename, "w") as f:
        f.write(content)
    print(f"Graph exported to {filename}")
    print(f"  Nodes: {len(nodes)}")
    print(f"  Edges: {len(edges)}")


if __name__ == "__main__":
    asyncio.run(main())
