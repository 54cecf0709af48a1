"""Load the sample graph into the local Gremlin Server (DEFAULT_SERVER_URL or argv[1])."""

from __future__ import annotations

import asyncio
import sys

from src.gremlin_db.seed import seed
from src.utils.logging import setup_logging

if __name__ == "__main__":
    setup_logging(log_level="INFO", log_format="console")
    asyncio.run(seed(sys.argv[1] if len(sys.argv) > 1 else None))
