from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from sqlbridge.ai_feature.translator import SqlTranslator, get_translator
from sqlbridge.core import schemas
from sqlbridge.core.database import get_db
from sqlbridge.core.nl2sql import pipeline

router = APIRouter(tags=["Natural Language"])

db_dep = Annotated[AsyncSession, Depends(get_db)]
translator_dep = Annotated[SqlTranslator, Depends(get_translator)]

STATUS_CODES = {
    pipeline.CommandStatus.REJECTED: status.HTTP_400_BAD_REQUEST,
    pipeline.CommandStatus.UNSAFE_STATEMENT: status.HTTP_400_BAD_REQUEST,
    pipeline.CommandStatus.TRANSLATION_FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
    pipeline.CommandStatus.EXECUTION_FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@router.post("/natural-language")
async def natural_language(
    payload: schemas.CommandRequest, db: db_dep, translator: translator_dep
):
    """
    Translate a plain-language command to SQL, run it and shape the result:
    read -> rows, write/ddl -> affected rows, anything else -> raw result.
    """
    result = await pipeline.run_natural_language_command(
        payload.command, db, translator
    )

    if result["status"] != pipeline.CommandStatus.COMPLETED:
        raise HTTPException(
            status_code=STATUS_CODES[result["status"]], detail=result["body"]
        )
    return result["body"]
