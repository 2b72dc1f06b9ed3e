"""
INTROSPECT MODULE - Describe the live schema for the translation prompt

Purpose:
    1. Read tables and columns of the public schema from information_schema
    2. Render them as plain text the model can read
    3. Fall back to a known sample table when the catalog is empty or unreadable

Data Flow:
    information_schema → load_schema() → SchemaDescription → render_schema() → prompt text
"""

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from sqlbridge.core.database import rollback_quietly
from sqlbridge.core.schemas import ColumnDescriptor, SchemaDescription, TableDescriptor

logger = logging.getLogger(__name__)


TABLES_QUERY = text(
    """
    SELECT table_name
    FROM information_schema.tables
    WHERE table_schema = 'public'
    ORDER BY table_name
    """
)

COLUMNS_QUERY = text(
    """
    SELECT column_name, data_type
    FROM information_schema.columns
    WHERE table_schema = 'public' AND table_name = :table_name
    ORDER BY ordinal_position
    """
)

# Used whenever introspection gives us nothing to work with
DEFAULT_SCHEMA = SchemaDescription(
    tables=[
        TableDescriptor(
            name="users",
            columns=[
                ColumnDescriptor(name="id", data_type="SERIAL PRIMARY KEY"),
                ColumnDescriptor(name="name", data_type="VARCHAR"),
                ColumnDescriptor(name="email", data_type="VARCHAR"),
                ColumnDescriptor(name="age", data_type="INTEGER"),
            ],
        )
    ]
)


async def load_schema(db: AsyncSession) -> SchemaDescription:
    """Read every public table with its columns, in catalog order. Raises on database errors."""
    result = await db.execute(TABLES_QUERY)
    table_names = result.scalars().all()

    tables = []
    for table_name in table_names:
        columns_result = await db.execute(COLUMNS_QUERY, {"table_name": table_name})
        columns = [
            ColumnDescriptor(name=row.column_name, data_type=row.data_type)
            for row in columns_result.all()
        ]
        tables.append(TableDescriptor(name=table_name, columns=columns))

    return SchemaDescription(tables=tables)


def render_schema(description: SchemaDescription) -> str:
    """
    Render a schema as prompt text.

    Example:
        Table 'users' with columns:
        - id (integer)
        - name (character varying)
    """
    lines = []
    for table in description.tables:
        lines.append(f"Table '{table.name}' with columns: ")
        for column in table.columns:
            lines.append(f"- {column.name} ({column.data_type})")
        lines.append("")
    return "\n".join(lines) + "\n" if lines else ""


async def describe_schema(db: AsyncSession) -> str:
    """
    Schema text for the translation prompt. Always returns something usable.

    Any catalog error or an empty public schema is replaced by DEFAULT_SCHEMA.
    """
    try:
        description = await load_schema(db)
    except Exception as error:
        # A failed statement leaves the transaction aborted in Postgres
        await rollback_quietly(db)
        logger.warning(f"Schema introspection failed, using default schema: {error}")
        return render_schema(DEFAULT_SCHEMA)

    if not description.tables:
        logger.info("No tables found in public schema, using default schema")
        return render_schema(DEFAULT_SCHEMA)

    return render_schema(description)
