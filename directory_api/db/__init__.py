"""
Database package for Directory API.
"""

from .base import create_engine, get_database_url
from .catalog import CatalogIntrospector, ColumnInfo
from .escape import escape_identifier, escape_literal
from .services import DirectoryService, ObjectService

__all__ = [
    "create_engine",
    "get_database_url",
    "CatalogIntrospector",
    "ColumnInfo",
    "escape_identifier",
    "escape_literal",
    "DirectoryService",
    "ObjectService",
]
