"""Database layer for Stratibreak."""

from stratibreak.db.repository import GapRepository
from stratibreak.db.schema import create_schema

__all__ = ["GapRepository", "create_schema"]
