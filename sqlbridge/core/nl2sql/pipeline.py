import logging
import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from sqlbridge.ai_feature.translator import SqlTranslator
from sqlbridge.core.nl2sql import classify, execute, introspect
from sqlbridge.core.schemas import ErrorCategory, ExecutionOutcome, OperationCategory


# -----------------------------------------------------------------------------
# PIPELINE MODULE - Orchestration
# Purpose: Turn one natural-language command into an executed statement:
#   validate -> introspect -> translate -> guard -> classify -> execute -> shape
# Stops early on an empty command, a failed translation or a CREATE DATABASE
# statement. An execution failure is reported back with the attempted SQL.
# -----------------------------------------------------------------------------


class CommandStatus(Enum):
    """Outcome of one pipeline run."""

    COMPLETED = "completed"
    REJECTED = "rejected"
    TRANSLATION_FAILED = "translation_failed"
    UNSAFE_STATEMENT = "unsafe_statement"
    EXECUTION_FAILED = "execution_failed"


class PipelineStep(Enum):
    """Individual pipeline steps."""

    VALIDATE = "validate"
    INTROSPECT = "introspect"
    TRANSLATE = "translate"
    GUARD = "guard"
    CLASSIFY = "classify"
    EXECUTE = "execute"


logger = logging.getLogger(__name__)

CREATE_DATABASE_ENDPOINT = "/create-database"


class CommandLogger:
    """Logger scoped to a single pipeline run."""

    def __init__(self, run_id: Optional[str] = None):
        self.run_id = run_id or uuid.uuid4().hex[:8]
        self.start_time = datetime.now()

    def log(self, step: PipelineStep, message: str, level: str = "info"):
        elapsed = (datetime.now() - self.start_time).total_seconds()
        line = f"[Run {self.run_id}] {step.value} (+{elapsed:.2f}s): {message}"
        if level == "error":
            logger.error(line)
        elif level == "warning":
            logger.warning(line)
        else:
            logger.info(line)


def _failure(
    status: CommandStatus,
    error: ErrorCategory,
    message: str,
    details: Any = None,
    sql: Optional[str] = None,
    **extra: Any,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"error": error.value, "message": message}
    if details is not None:
        body["details"] = details
    if sql is not None:
        body["sql"] = sql
    body.update(extra)
    return {"status": status, "body": body}


def shape_response(
    sql: str, category: OperationCategory, outcome: ExecutionOutcome
) -> Dict[str, Any]:
    """
    Shape a successful execution by category.

    read      -> rows + rowCount
    write/ddl -> affectedRows + summary message
    other     -> the raw execution result
    """
    response: Dict[str, Any] = {"sql": sql, "operationType": category.value}

    if category == OperationCategory.READ:
        response["result"] = outcome.rows or []
        response["rowCount"] = outcome.row_count
    elif category in (OperationCategory.WRITE, OperationCategory.DDL):
        affected = outcome.row_count or 0
        response["affectedRows"] = outcome.row_count
        response["message"] = (
            f"Operation completed successfully. {affected} rows affected."
        )
    else:
        response["result"] = {"rows": outcome.rows, "rowCount": outcome.row_count}

    return response


async def run_natural_language_command(
    command: Optional[str], db: AsyncSession, translator: SqlTranslator
) -> Dict[str, Any]:
    """
    Run the complete command pipeline.

    Args:
        command: The user's request in plain language
        db: Session used for both introspection and execution
        translator: Client for the text-generation service

    Returns:
        {"status": CommandStatus, "body": {...}}; the body is what the caller
        gets back, keyed by category on success.
    """
    run_logger = CommandLogger()

    # 1. Validate
    if not command or not command.strip():
        run_logger.log(PipelineStep.VALIDATE, "Empty command rejected", "warning")
        return _failure(
            CommandStatus.REJECTED,
            ErrorCategory.INVALID_INPUT,
            "Natural language command is required.",
        )

    # 2. Schema context (never fails, falls back to a default description)
    schema_text = await introspect.describe_schema(db)
    run_logger.log(PipelineStep.INTROSPECT, f"Schema context: {len(schema_text)} chars")

    # 3. Translate
    translation = await translator.translate(command, schema_text)
    if not translation.ok:
        run_logger.log(
            PipelineStep.TRANSLATE, f"Translation failed: {translation.error_detail}", "error"
        )
        return _failure(
            CommandStatus.TRANSLATION_FAILED,
            ErrorCategory.TRANSLATION_FAILED,
            "Could not generate SQL from natural language command",
            details=translation.error_detail,
        )
    sql = translation.sql
    run_logger.log(PipelineStep.TRANSLATE, f"Generated SQL: {sql}")

    # 4. Guard: CREATE DATABASE cannot run inside a transaction
    if classify.contains_create_database(sql):
        run_logger.log(PipelineStep.GUARD, "CREATE DATABASE detected, not executed", "warning")
        return _failure(
            CommandStatus.UNSAFE_STATEMENT,
            ErrorCategory.UNSAFE_STATEMENT,
            "CREATE DATABASE command detected",
            details=(
                "CREATE DATABASE cannot be executed through this endpoint. "
                f"Please use the {CREATE_DATABASE_ENDPOINT} endpoint instead."
            ),
            sql=sql,
            suggestion=(
                f"Use POST {CREATE_DATABASE_ENDPOINT} with a JSON body containing "
                "{dbName: 'your_db_name'}"
            ),
        )

    # 5. Classify
    category = classify.classify_statement(sql)
    run_logger.log(PipelineStep.CLASSIFY, f"Operation type: {category.value}")

    # 6. Execute
    outcome = await execute.execute_statement(sql, db)
    if not outcome.ok:
        run_logger.log(PipelineStep.EXECUTE, f"Execution failed: {outcome.error_detail}", "error")
        return _failure(
            CommandStatus.EXECUTION_FAILED,
            ErrorCategory.EXECUTION_FAILED,
            "Could not execute the SQL query.",
            details=outcome.error_detail,
            sql=sql,
        )
    run_logger.log(PipelineStep.EXECUTE, f"Executed, row count: {outcome.row_count}")

    # 7. Shape
    return {
        "status": CommandStatus.COMPLETED,
        "body": shape_response(sql, category, outcome),
    }
