"""
PROVISION MODULE - Create a new database (and optionally its tables)

CREATE DATABASE cannot run inside a transaction block, so it goes through its
own AUTOCOMMIT connection to the admin database instead of the request session.
Table statements then run inside the new database, in order, in one transaction.
"""

import logging
import re
from typing import List, Optional

from sqlalchemy import text

from sqlbridge.core.config import settings
from sqlbridge.core.database import create_engine_for
from sqlbridge.core.schemas import ProvisionResult

logger = logging.getLogger(__name__)

# Postgres truncates identifiers at 63 bytes
DATABASE_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]{0,62}")

DATABASE_EXISTS_QUERY = text("SELECT 1 FROM pg_database WHERE datname = :name")


def is_valid_database_name(db_name: str) -> bool:
    return DATABASE_NAME.fullmatch(db_name) is not None


async def create_database(
    db_name: str, tables: Optional[List[str]] = None
) -> ProvisionResult:
    """
    Create `db_name` and run each statement of `tables` inside it.

    Returns:
        ProvisionResult; a database that was created but whose tables failed
        is reported as ok=False with both a message and the error.
    """
    if not is_valid_database_name(db_name):
        return ProvisionResult(
            ok=False,
            error_detail=(
                f"Invalid database name '{db_name}'. Use letters, digits and "
                "underscores, starting with a letter or underscore."
            ),
        )

    admin_engine = create_engine_for(
        settings.ADMIN_DATABASE, isolation_level="AUTOCOMMIT"
    )
    try:
        async with admin_engine.connect() as conn:
            logger.info("Connected to admin database for DDL operations")

            existing = await conn.execute(DATABASE_EXISTS_QUERY, {"name": db_name})
            if existing.first() is not None:
                return ProvisionResult(
                    ok=False, error_detail=f"Database '{db_name}' already exists"
                )

            await conn.exec_driver_sql(f'CREATE DATABASE "{db_name}"')
            logger.info(f"Database '{db_name}' created successfully")
    except Exception as error:
        logger.error(f"Error creating database '{db_name}': {error}")
        return ProvisionResult(ok=False, error_detail=str(error))
    finally:
        await admin_engine.dispose()

    if not tables:
        return ProvisionResult(
            ok=True, message=f"Database '{db_name}' created successfully"
        )

    new_db_engine = create_engine_for(db_name)
    try:
        async with new_db_engine.begin() as conn:
            for statement in tables:
                await conn.exec_driver_sql(statement)
        logger.info(f"Tables created in database '{db_name}'")
    except Exception as error:
        logger.error(f"Error creating tables in database '{db_name}': {error}")
        return ProvisionResult(
            ok=False,
            message=f"Database '{db_name}' created, but error creating tables",
            error_detail=str(error),
        )
    finally:
        await new_db_engine.dispose()

    return ProvisionResult(
        ok=True,
        message=f"Database '{db_name}' created successfully with specified tables",
    )
