"""Sample graph loading for a local Gremlin Server."""

from __future__ import annotations

import asyncio

from src.config import get_settings
from src.gremlin_db.connection import GremlinConnection
from src.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

# The TinkerPop "modern" graph.
SAMPLE_GRAPH = [
    "g.V().drop()",
    (
        "g.addV('person').property('name','marko').property('age',29).as('marko')"
        ".addV('person').property('name','vadas').property('age',27).as('vadas')"
        ".addV('software').property('name','lop').property('lang','java').as('lop')"
        ".addV('person').property('name','josh').property('age',32).as('josh')"
        ".addV('software').property('name','ripple').property('lang','java').as('ripple')"
        ".addV('person').property('name','peter').property('age',35).as('peter')"
        ".addE('knows').from('marko').to('vadas').property('weight',0.5)"
        ".addE('knows').from('marko').to('josh').property('weight',1.0)"
        ".addE('created').from('marko').to('lop').property('weight',0.4)"
        ".addE('created').from('josh').to('ripple').property('weight',1.0)"
        ".addE('created').from('josh').to('lop').property('weight',0.4)"
        ".addE('created').from('peter').to('lop').property('weight',0.2)"
    ),
]


async def seed(url: str | None = None) -> int:
    """Replace the graph at ``url`` with the sample graph. Returns the vertex count."""
    settings = get_settings()
    conn = GremlinConnection("local", {"url": url or settings.DEFAULT_SERVER_URL})
    try:
        for statement in SAMPLE_GRAPH:
            await conn.submit(statement)
        count = (await conn.submit("g.V().count()"))[0]
        logger.info("seed_complete", vertices=count)
        return count
    finally:
        await conn.close()


if __name__ == "__main__":
    setup_logging(log_level="INFO", log_format="console")
    asyncio.run(seed())
