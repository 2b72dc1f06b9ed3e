import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from sqlbridge.core.database import rollback_quietly
from sqlbridge.core.schemas import ExecutionOutcome

logger = logging.getLogger(__name__)


def _row_count(rowcount: Optional[int], fallback: int) -> int:
    # Drivers report -1 when they cannot tell
    if rowcount is None or rowcount < 0:
        return fallback
    return rowcount


async def execute_statement(sql: str, db: AsyncSession) -> ExecutionOutcome:
    """
    Run one generated statement as-is and commit.

    The text goes straight to the driver (exec_driver_sql) so that colons in
    literals are never read as bind parameters.
    Errors roll the session back and come back as ok=False.
    """
    try:
        connection = await db.connection()
        result = await connection.exec_driver_sql(sql)

        if result.returns_rows:
            rows = [dict(row) for row in result.mappings().all()]
            outcome = ExecutionOutcome(
                ok=True, rows=rows, row_count=len(rows), returns_rows=True
            )
        else:
            outcome = ExecutionOutcome(
                ok=True, row_count=_row_count(result.rowcount, 0), returns_rows=False
            )

        await db.commit()
        logger.info("SQL executed successfully")
        return outcome

    except Exception as error:
        await rollback_quietly(db)
        logger.error(f"Error executing SQL: {error}")
        return ExecutionOutcome(ok=False, error_detail=str(error))
