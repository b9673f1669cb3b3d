"""Test configuration and fixtures."""

import copy
import re
from contextlib import asynccontextmanager
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

_TABLE_RE = re.compile(r'FROM ("(?:[^"]|"")*")')


class FakeResult:
    """The subset of SQLAlchemy's ``Result`` used by the services."""

    def __init__(self, rows: List[Tuple[Any, ...]]):
        self._rows = rows

    def all(self) -> List[Tuple[Any, ...]]:
        return list(self._rows)

    def scalars(self) -> "FakeScalars":
        return FakeScalars([row[0] for row in self._rows])

    def scalar_one_or_none(self) -> Any:
        if not self._rows:
            return None
        assert len(self._rows) == 1, "expected at most one row"
        return self._rows[0][0]


class FakeScalars:
    def __init__(self, values: List[Any]):
        self._values = values

    def all(self) -> List[Any]:
        return list(self._values)


class FakeDatabase:
    """
    In-memory stand-in for the PostgreSQL catalog and table contents.

    ``tables`` maps a directory name to its columns, primary key and rows.
    Catalog and read queries are answered from it; every statement is
    recorded in ``executed`` as ``(sql, params)``.
    """

    def __init__(self):
        self.tables: Dict[str, Dict[str, Any]] = {}
        self.executed: List[Tuple[str, Dict[str, Any]]] = []
        self.transactions = 0
        self.fail_with: Optional[Exception] = None

    def add_table(
        self,
        name: str,
        columns: List[Tuple[str, str]],
        primary_key: Optional[str] = None,
        rows: Optional[List[Any]] = None,
    ) -> None:
        self.tables[name] = {
            "columns": columns,
            "primary_key": primary_key,
            "rows": rows or [],
        }

    @property
    def statements(self) -> List[str]:
        return [sql for sql, _ in self.executed]

    def _table_from_sql(self, sql: str) -> Optional[Dict[str, Any]]:
        match = _TABLE_RE.search(sql)
        if not match:
            return None
        name = match.group(1)[1:-1].replace('""', '"')
        return self.tables.get(name)

    def respond(self, sql: str, params: Dict[str, Any]) -> List[Tuple[Any, ...]]:
        self.executed.append((sql, params))
        if self.fail_with is not None:
            raise self.fail_with

        if "information_schema.tables" in sql:
            return [(name,) for name in sorted(self.tables)]
        if "information_schema.columns" in sql:
            table = self.tables.get(params["directory"])
            return list(table["columns"]) if table else []
        if "pg_index" in sql:
            table = self.tables.get(params["directory"])
            if table and table["primary_key"]:
                return [(table["primary_key"],)]
            return []
        if "row_to_json" in sql:
            rows = self._table_from_sql(sql)["rows"]
            start = params["offset"]
            return [(copy.deepcopy(row),) for row in rows[start:start + params["limit"]]]
        if sql.startswith("SELECT COUNT(*)"):
            return [(len(self._table_from_sql(sql)["rows"]),)]
        return []


class FakeConnection:
    def __init__(self, database: FakeDatabase):
        self.database = database

    async def execute(self, statement, params: Optional[Dict[str, Any]] = None) -> FakeResult:
        # str() compiles the text clause, turning escaped colons back into ':'
        return FakeResult(self.database.respond(str(statement), dict(params or {})))


class FakeEngine:
    """Async engine double exposing ``connect()`` and ``begin()``."""

    def __init__(self, database: Optional[FakeDatabase] = None):
        self.database = database or FakeDatabase()
        self.disposed = False

    @asynccontextmanager
    async def connect(self):
        yield FakeConnection(self.database)

    @asynccontextmanager
    async def begin(self):
        self.database.transactions += 1
        yield FakeConnection(self.database)

    async def dispose(self) -> None:
        self.disposed = True


@pytest.fixture
def fake_db() -> FakeDatabase:
    """Create an empty fake database."""
    return FakeDatabase()


@pytest.fixture
def fake_engine(fake_db: FakeDatabase) -> FakeEngine:
    """Create a fake engine over ``fake_db``."""
    return FakeEngine(fake_db)


@pytest.fixture
def make_rows() -> Callable[[int], List[Dict[str, Any]]]:
    """Build ``n`` rows for a directory with ``id`` and ``label`` columns."""

    def _make(n: int) -> List[Dict[str, Any]]:
        return [{"id": i, "label": f"row {i}"} for i in range(1, n + 1)]

    return _make
