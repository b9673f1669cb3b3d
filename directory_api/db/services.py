"""
Database services for Directory API.

Directories are plain tables in the public schema and objects are their
rows. Table and column names are chosen by the caller at request time, so
every statement is assembled from escaped identifiers (see ``escape``)
while values are bound as parameters.
"""

import json
import re
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Iterable, List, Mapping, Optional, Sequence

import structlog
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine
from sqlalchemy.sql.elements import TextClause

from ..errors import DatabaseError, NoPrimaryKeyError, SerializationError
from ..schemas.directory_v1 import ObjectPage, PropertySpec
from .catalog import CatalogIntrospector
from .dummy import DUMMY_STATEMENTS
from .escape import escape_identifier, escape_literal

logger = structlog.get_logger()

PAGE_SIZE = 10

VALID_CONSTRAINTS = ("PRIMARY KEY", "NOT NULL", "UNIQUE")

# Type names that can be emitted without quoting: a word (optionally
# schema-qualified) or a known multi-word type, an optional (n[, m])
# modifier, an optional time zone clause and optional array suffixes.
_TYPE_NAME = re.compile(
    r"""
    ^(?:double\s+precision|character\s+varying|bit\s+varying
       |[a-z_][a-z0-9_]*(?:\.[a-z_][a-z0-9_]*)?)
    (?:\s*\(\s*\d+\s*(?:,\s*\d+\s*)?\))?
    (?:\s+with(?:out)?\s+time\s+zone)?
    (?:\s*\[\s*\d*\s*\])*$
    """,
    re.IGNORECASE | re.VERBOSE,
)


def _statement(template: str, **fragments: str) -> TextClause:
    """Fill ``template`` with escaped SQL fragments and wrap it in ``text()``.

    Colons inside the fragments are escaped so that an identifier such as
    ``"a:b"`` is never read as a bind parameter.
    """
    escaped = {key: value.replace(":", "\\:") for key, value in fragments.items()}
    return text(template.format(**escaped))


def render_type(type_name: str) -> str:
    """Render a caller-supplied column type."""
    type_name = type_name.strip()
    if _TYPE_NAME.match(type_name):
        return " ".join(type_name.split())
    # Anything else is quoted; an unknown type then fails in the database.
    return escape_identifier(type_name)


def render_constraint(constraint: Optional[str]) -> Optional[str]:
    """Return the canonical constraint keyword, or None if it is not allowed."""
    if constraint is None:
        return None
    normalized = " ".join(constraint.upper().split())
    if normalized in VALID_CONSTRAINTS:
        return normalized
    logger.warning("Ignoring unsupported constraint", constraint=constraint)
    return None


def render_property(prop: PropertySpec) -> str:
    """Render one column definition of a CREATE TABLE statement."""
    column = f"{escape_identifier(prop.name)} {render_type(prop.type)}"
    if prop.default is not None:
        column = f"{column} DEFAULT {escape_literal(prop.default)}"

    constraint = render_constraint(prop.constraint)
    if constraint:
        column = f"{column} {constraint}"

    return column


def normalize_row(row: Any, json_columns: Iterable[str]) -> Optional[Dict[str, Any]]:
    """Re-encode JSON and JSONB values of a ``row_to_json`` row as strings.

    Clients get an opaque string for those columns regardless of the
    structure stored in them. Other values pass through unchanged.
    """
    if row is None:
        return None

    try:
        if isinstance(row, (str, bytes)):
            row = json.loads(row)
        for name in json_columns:
            if name in row:
                row[name] = json.dumps(
                    row[name], separators=(",", ":"), ensure_ascii=False
                )
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Failed to serialize row: {e}") from e

    return row


class _Service:
    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    @asynccontextmanager
    async def _connect(self, transaction: bool = False) -> AsyncIterator[AsyncConnection]:
        """Check out a pooled connection, optionally inside a transaction.

        Driver and pool failures are raised as ``DatabaseError``.
        """
        try:
            if transaction:
                async with self.engine.begin() as conn:
                    yield conn
            else:
                async with self.engine.connect() as conn:
                    yield conn
        except SQLAlchemyError as e:
            raise DatabaseError(str(e)) from e

    async def _execute(
        self,
        conn: AsyncConnection,
        statement: TextClause,
        params: Optional[Mapping[str, Any]] = None,
    ):
        logger.debug("Executing statement", sql=statement.text)
        return await conn.execute(statement, dict(params or {}))


class DirectoryService(_Service):
    """Service for creating, listing and dropping directories."""

    async def list_directories(self) -> List[str]:
        """List every directory in the public schema."""
        async with self._connect() as conn:
            return await CatalogIntrospector(conn).list_directories()

    async def create_directory(
        self, directory: str, properties: Sequence[PropertySpec]
    ) -> None:
        """Create a directory from its property definitions."""
        statement = _statement(
            "CREATE TABLE {directory} ({columns})",
            directory=escape_identifier(directory),
            columns=", ".join(render_property(p) for p in properties),
        )

        async with self._connect(transaction=True) as conn:
            await self._execute(conn, statement)

        logger.info(
            "Directory created",
            directory=directory,
            properties=[p.name for p in properties],
        )

    async def delete_directory(self, directory: str) -> None:
        """Drop a directory. Dropping a missing directory is a DatabaseError."""
        statement = _statement(
            "DROP TABLE {directory}", directory=escape_identifier(directory)
        )

        async with self._connect(transaction=True) as conn:
            await self._execute(conn, statement)

        logger.info("Directory deleted", directory=directory)

    async def generate_dummy(self) -> None:
        """Create and fill the sample ``authors`` and ``jokes`` directories."""
        async with self._connect(transaction=True) as conn:
            for sql in DUMMY_STATEMENTS:
                await self._execute(conn, text(sql))

        logger.info("Dummy directories generated")


class ObjectService(_Service):
    """Service for reading and writing the objects of a directory."""

    async def list_objects(self, directory: str, cursor: Optional[int] = None) -> ObjectPage:
        """Return one page of objects starting at row offset ``cursor``.

        Rows come back in the database's default order, which is not
        stable across writes.
        """
        table = escape_identifier(directory)

        async with self._connect() as conn:
            catalog = CatalogIntrospector(conn)
            columns = await catalog.get_columns(directory)

            result = await self._execute(
                conn,
                _statement(
                    "SELECT row_to_json({table}.*) FROM {table} LIMIT :limit OFFSET :offset",
                    table=table,
                ),
                {"limit": PAGE_SIZE, "offset": cursor or 0},
            )
            rows = result.scalars().all()

            result = await self._execute(
                conn, _statement("SELECT COUNT(*) FROM {table}", table=table)
            )
            count = result.scalar_one_or_none() or 0

            primary_key = await catalog.get_primary_key(directory)

        json_columns = [c.name for c in columns if c.is_json]
        return ObjectPage(
            objects=[normalize_row(row, json_columns) for row in rows],
            property_names=[c.name for c in columns],
            primary_key=primary_key,
            count=count,
        )

    async def create_object(self, directory: str, properties: Mapping[str, str]) -> None:
        """Insert one object. The created row is not returned."""
        table = escape_identifier(directory)

        if properties:
            params = {f"v{i}": value for i, value in enumerate(properties.values())}
            placeholders = ", ".join(f":{key}" for key in params)
            statement = _statement(
                "INSERT INTO {table} ({names}) VALUES (" + placeholders + ")",
                table=table,
                names=", ".join(escape_identifier(name) for name in properties),
            )
        else:
            params = {}
            statement = _statement("INSERT INTO {table} DEFAULT VALUES", table=table)

        async with self._connect(transaction=True) as conn:
            await self._execute(conn, statement, params)

        logger.info("Object created", directory=directory)

    async def update_object(
        self, directory: str, id: str, properties: Mapping[str, str]
    ) -> None:
        """Update the object whose primary key equals ``id``."""
        async with self._connect(transaction=True) as conn:
            primary_key = await self._require_primary_key(conn, directory)
            if not properties:
                return

            fragments = {
                "table": escape_identifier(directory),
                "primary_key": escape_identifier(primary_key),
            }
            params: Dict[str, Any] = {"id": id}
            assignments = []
            for i, (name, value) in enumerate(properties.items()):
                fragments[f"c{i}"] = escape_identifier(name)
                params[f"v{i}"] = value
                assignments.append(f"{{c{i}}} = :v{i}")

            statement = _statement(
                "UPDATE {table} SET "
                + ", ".join(assignments)
                + " WHERE {primary_key} = :id",
                **fragments,
            )
            await self._execute(conn, statement, params)

        logger.info("Object updated", directory=directory, id=id)

    async def delete_object(self, directory: str, id: str) -> None:
        """Delete the object whose primary key equals ``id``."""
        async with self._connect(transaction=True) as conn:
            primary_key = await self._require_primary_key(conn, directory)
            statement = _statement(
                "DELETE FROM {table} WHERE {primary_key} = :id",
                table=escape_identifier(directory),
                primary_key=escape_identifier(primary_key),
            )
            await self._execute(conn, statement, {"id": id})

        logger.info("Object deleted", directory=directory, id=id)

    async def _require_primary_key(self, conn: AsyncConnection, directory: str) -> str:
        primary_key = await CatalogIntrospector(conn).get_primary_key(directory)
        if primary_key is None:
            raise NoPrimaryKeyError(directory)
        return primary_key
