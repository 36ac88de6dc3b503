"""Process-level settings shared by the API and CLI entrypoints."""

import logging
import os
from pathlib import Path

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def resolve_base_path(cwd: Path | None = None) -> Path:
    """Repository root, found from the working directory.

    Running from ``backend/`` maps to its parent.
    """
    cwd = cwd or Path.cwd()
    if cwd.name == "backend":
        return cwd.parent
    return cwd


def resolve_metadata_path(base_path: Path) -> Path:
    """RECORDFORGE_METADATA_PATH, else ``{base}/metadata``."""
    override = os.environ.get("RECORDFORGE_METADATA_PATH")
    if override:
        return Path(override)
    return base_path / "metadata"


def server_port() -> int:
    """RECORDFORGE_PORT, default 8000."""
    return int(os.environ.get("RECORDFORGE_PORT", "8000"))


def log_level() -> str:
    return os.environ.get("RECORDFORGE_LOG_LEVEL", "info").lower()


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger once, from RECORDFORGE_LOG_LEVEL by default."""
    logging.basicConfig(
        level=(level or log_level()).upper(),
        format=DEFAULT_LOG_FORMAT,
    )


def init_tables_enabled(is_sqlite: bool) -> bool:
    """RECORDFORGE_INIT_TABLES, defaulting to on for SQLite only."""
    value = os.environ.get("RECORDFORGE_INIT_TABLES")
    if value is None:
        return is_sqlite
    return value.lower() in ("1", "true", "yes")
