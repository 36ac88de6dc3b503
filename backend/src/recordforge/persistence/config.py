"""Database configuration and repository factory."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from recordforge.persistence.sql import SQLRepository


@dataclass
class DatabaseConfig:
    """Database connection configuration.

    Supports sqlite://, postgresql:// and mysql:// URL schemes.
    """

    url: str

    @classmethod
    def from_env(cls, base_path: Path | None = None) -> DatabaseConfig:
        """Create config from environment variables.

        Resolution order:
        1. DATABASE_URL env var (standard)
        2. RECORDFORGE_DB_PATH env var (converted to sqlite:/// URL)
        3. Default: sqlite:///{base_path}/data/recordforge.db
        """
        url = os.environ.get("DATABASE_URL")
        if url:
            return cls(url=url)

        db_path = os.environ.get("RECORDFORGE_DB_PATH")
        if db_path:
            return cls(url=f"sqlite:///{db_path}")

        if base_path:
            return cls(url=f"sqlite:///{base_path / 'data' / 'recordforge.db'}")

        return cls(url="sqlite:///recordforge.db")

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def is_postgresql(self) -> bool:
        return self.url.startswith("postgresql")

    @property
    def sqlalchemy_url(self) -> str:
        """URL suitable for SQLAlchemy engine creation.

        Ensures postgresql:// URLs use the psycopg (v3) driver since
        the project depends on psycopg[binary], not psycopg2.
        """
        if self.url.startswith("postgresql://"):
            return self.url.replace("postgresql://", "postgresql+psycopg://", 1)
        return self.url


def create_repository(config: DatabaseConfig) -> SQLRepository:
    """Create a repository for the configured database.

    Raises:
        ValueError: For URLs that are not SQLAlchemy database URLs.
    """
    from recordforge.persistence.sql import SQLRepository

    if "://" not in config.url:
        raise ValueError(f"Unsupported database URL: {config.url}")

    if config.is_sqlite:
        db_path = config.url.replace("sqlite:///", "", 1)
        if db_path and db_path != ":memory:" and db_path != config.url:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    return SQLRepository(config.sqlalchemy_url)
