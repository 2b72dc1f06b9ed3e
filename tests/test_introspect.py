from types import SimpleNamespace

import pytest

from conftest import make_result
from sqlbridge.core.nl2sql.introspect import (
    DEFAULT_SCHEMA,
    describe_schema,
    load_schema,
    render_schema,
)


def column(name, data_type):
    return SimpleNamespace(column_name=name, data_type=data_type)


@pytest.mark.asyncio
async def test_describe_schema_renders_tables_in_order(db_session):
    db_session.execute.side_effect = [
        make_result(scalars=["orders", "users"]),
        make_result(rows=[column("id", "integer"), column("total", "numeric")]),
        make_result(rows=[column("id", "integer"), column("email", "character varying")]),
    ]

    text = await describe_schema(db_session)

    assert text == (
        "Table 'orders' with columns: \n"
        "- id (integer)\n"
        "- total (numeric)\n"
        "\n"
        "Table 'users' with columns: \n"
        "- id (integer)\n"
        "- email (character varying)\n"
        "\n"
    )


@pytest.mark.asyncio
async def test_load_schema_queries_columns_per_table(db_session):
    db_session.execute.side_effect = [
        make_result(scalars=["orders"]),
        make_result(rows=[column("id", "integer")]),
    ]

    description = await load_schema(db_session)

    assert [t.name for t in description.tables] == ["orders"]
    assert description.tables[0].columns[0].data_type == "integer"
    params = db_session.execute.await_args_list[1].args[1]
    assert params == {"table_name": "orders"}


@pytest.mark.asyncio
async def test_empty_catalog_uses_default(db_session):
    """No tables gives the fallback description, never an empty string"""
    db_session.execute.return_value = make_result(scalars=[])

    text = await describe_schema(db_session)

    assert text
    assert text == render_schema(DEFAULT_SCHEMA)
    assert "Table 'users' with columns" in text
    assert "- email (VARCHAR)" in text


@pytest.mark.asyncio
async def test_catalog_error_uses_default(db_session):
    """Introspection errors are masked and the session is rolled back"""
    db_session.execute.side_effect = Exception("permission denied for schema public")

    text = await describe_schema(db_session)

    assert text == render_schema(DEFAULT_SCHEMA)
    db_session.rollback.assert_awaited_once()


def test_render_empty_description():
    assert render_schema(DEFAULT_SCHEMA.model_copy(update={"tables": []})) == ""


@pytest.mark.asyncio
async def test_failed_rollback_still_uses_default(db_session):
    """A rollback that fails on a dropped connection does not escape"""
    db_session.execute.side_effect = Exception("connection was closed")
    db_session.rollback.side_effect = Exception("connection was closed")

    text = await describe_schema(db_session)

    assert text == render_schema(DEFAULT_SCHEMA)
