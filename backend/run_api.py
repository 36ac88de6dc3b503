"""Run the RecordForge API from a source checkout, reloading on code changes.

Reads the same settings as ``recordforge serve``: RECORDFORGE_PORT,
RECORDFORGE_LOG_LEVEL and the database/metadata variables resolved at
application startup.
"""

from __future__ import annotations

import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parent / "src"


if __name__ == "__main__":
    if str(SRC_DIR) not in sys.path:
        sys.path.insert(0, str(SRC_DIR))

    import uvicorn

    from recordforge.core.settings import configure_logging, log_level, server_port

    configure_logging()
    uvicorn.run(
        "recordforge.api.app:app",
        host="127.0.0.1",
        port=server_port(),
        reload=True,
        reload_dirs=[str(SRC_DIR)],
        log_level=log_level(),
    )
