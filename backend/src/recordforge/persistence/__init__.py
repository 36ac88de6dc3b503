"""Persistence layer - repository, error translation and key generation."""

from recordforge.persistence.adapter import EntityRepository
from recordforge.persistence.config import DatabaseConfig, create_repository
from recordforge.persistence.errors import DataAccessError, ErrorKind, translate_error
from recordforge.persistence.keys import generate_primary_key

__all__ = [
    "EntityRepository",
    "DatabaseConfig",
    "create_repository",
    "DataAccessError",
    "ErrorKind",
    "translate_error",
    "generate_primary_key",
]
