"""
Directory API

A schema-agnostic CRUD service over the tables of a PostgreSQL database.
"""

import importlib.metadata

try:
    __version__ = importlib.metadata.version("directory-api")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.0.0"

from .errors import DatabaseError, DirectoryAPIError, NoPrimaryKeyError, SerializationError

__all__ = [
    "DatabaseError",
    "DirectoryAPIError",
    "NoPrimaryKeyError",
    "SerializationError",
]
