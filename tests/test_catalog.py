"""Tests for live catalog introspection."""

import pytest

from directory_api.db.catalog import CatalogIntrospector, ColumnInfo


@pytest.fixture
def catalog(fake_engine):
    """Create an introspector on a fake connection."""

    async def _open():
        async with fake_engine.connect() as conn:
            return CatalogIntrospector(conn)

    return _open


class TestListDirectories:
    @pytest.mark.asyncio
    async def test_returns_public_tables(self, fake_db, catalog):
        fake_db.add_table("jokes", [("id", "integer")])
        fake_db.add_table("authors", [("id", "integer")])

        introspector = await catalog()
        assert await introspector.list_directories() == ["authors", "jokes"]

        sql, params = fake_db.executed[-1]
        assert "information_schema.tables" in sql
        assert params == {"schema": "public"}

    @pytest.mark.asyncio
    async def test_empty_schema(self, catalog):
        introspector = await catalog()
        assert await introspector.list_directories() == []


class TestGetColumns:
    @pytest.mark.asyncio
    async def test_columns_in_declaration_order(self, fake_db, catalog):
        fake_db.add_table(
            "t", [("id", "integer"), ("label", "text"), ("meta", "jsonb")]
        )

        introspector = await catalog()
        columns = await introspector.get_columns("t")

        assert columns == [
            ColumnInfo("id", "integer"),
            ColumnInfo("label", "text"),
            ColumnInfo("meta", "jsonb"),
        ]
        assert [c.is_json for c in columns] == [False, False, True]

    @pytest.mark.asyncio
    async def test_directory_name_is_bound_not_inlined(self, fake_db, catalog):
        name = "x'; DROP TABLE t; --"
        introspector = await catalog()
        await introspector.get_columns(name)

        sql, params = fake_db.executed[-1]
        assert name not in sql
        assert params["directory"] == name
        assert "ORDER BY ordinal_position" in sql

    @pytest.mark.asyncio
    async def test_unknown_directory_has_no_columns(self, catalog):
        introspector = await catalog()
        assert await introspector.get_columns("missing") == []


class TestGetPrimaryKey:
    @pytest.mark.asyncio
    async def test_single_column_key(self, fake_db, catalog):
        fake_db.add_table("t", [("id", "integer")], primary_key="id")

        introspector = await catalog()
        assert await introspector.get_primary_key("t") == "id"

        sql, params = fake_db.executed[-1]
        assert "indisprimary" in sql
        assert params == {"schema": "public", "directory": "t"}

    @pytest.mark.asyncio
    async def test_no_key(self, fake_db, catalog):
        fake_db.add_table("t", [("label", "text")])

        introspector = await catalog()
        assert await introspector.get_primary_key("t") is None

    @pytest.mark.asyncio
    async def test_every_call_queries_the_catalog(self, fake_db, catalog):
        fake_db.add_table("t", [("id", "integer")], primary_key="id")

        introspector = await catalog()
        await introspector.get_primary_key("t")
        await introspector.get_primary_key("t")

        assert sum("pg_index" in sql for sql in fake_db.statements) == 2


def test_column_info_json_types():
    assert ColumnInfo("a", "json").is_json
    assert ColumnInfo("b", "jsonb").is_json
    assert not ColumnInfo("c", "text").is_json
