"""
Live catalog introspection.

No schema is known ahead of time, so every request reads table names,
column types and primary keys straight from the PostgreSQL catalog.
Nothing is cached: a directory created or dropped a moment ago is
reflected by the next call.
"""

from typing import List, NamedTuple, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection

SCHEMA = "public"

JSON_TYPES = frozenset({"json", "jsonb"})

LIST_TABLES = text(
    "SELECT table_name FROM information_schema.tables "
    "WHERE table_schema = :schema "
    "ORDER BY table_name"
)

LIST_COLUMNS = text(
    "SELECT column_name, data_type FROM information_schema.columns "
    "WHERE table_schema = :schema AND table_name = :directory "
    "ORDER BY ordinal_position"
)

# Only the first key column is used; composite keys are not supported.
PRIMARY_KEY = text(
    "SELECT pg_attribute.attname "
    "FROM pg_index, pg_class, pg_attribute, pg_namespace "
    "WHERE pg_index.indrelid = pg_class.oid "
    "AND pg_class.relnamespace = pg_namespace.oid "
    "AND pg_namespace.nspname = :schema "
    "AND pg_attribute.attrelid = pg_class.oid "
    "AND pg_attribute.attnum = any(pg_index.indkey) "
    "AND pg_index.indisprimary "
    "AND pg_class.relname = :directory "
    "ORDER BY pg_attribute.attnum "
    "LIMIT 1"
)


class ColumnInfo(NamedTuple):
    """A column name and its ``information_schema`` data type."""

    name: str
    data_type: str

    @property
    def is_json(self) -> bool:
        return self.data_type in JSON_TYPES


class CatalogIntrospector:
    """Reads directory metadata over an open connection."""

    def __init__(self, connection: AsyncConnection):
        self.connection = connection

    async def list_directories(self) -> List[str]:
        """Return every table name in the public schema."""
        result = await self.connection.execute(LIST_TABLES, {"schema": SCHEMA})
        return list(result.scalars().all())

    async def get_columns(self, directory: str) -> List[ColumnInfo]:
        """Return the columns of ``directory`` in declaration order.

        An unknown directory yields an empty list rather than an error.
        """
        result = await self.connection.execute(
            LIST_COLUMNS, {"schema": SCHEMA, "directory": directory}
        )
        return [ColumnInfo(name, data_type) for name, data_type in result.all()]

    async def get_primary_key(self, directory: str) -> Optional[str]:
        """Return the primary key column of ``directory``, if it has one."""
        result = await self.connection.execute(
            PRIMARY_KEY, {"schema": SCHEMA, "directory": directory}
        )
        return result.scalar_one_or_none()
