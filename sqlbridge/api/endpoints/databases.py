from fastapi import APIRouter, HTTPException, status

from sqlbridge.core import provision, schemas
from sqlbridge.core.nl2sql.extract import extract_table_statements

router = APIRouter(tags=["Databases"])

TABLES_EXAMPLE = {
    "dbName": "example_db",
    "tables": [
        "CREATE TABLE table1 (id SERIAL PRIMARY KEY, name VARCHAR(255));"
    ],
}


# Create a new database outside the natural-language path
@router.post("/create-database")
async def create_database(payload: schemas.CreateDatabaseRequest):
    if not payload.db_name:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST, detail="Database name is required"
        )

    tables = payload.tables
    if tables is not None and not (
        isinstance(tables, list) and all(isinstance(t, str) for t in tables)
    ):
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "Tables must be an array of SQL statements",
                "example": TABLES_EXAMPLE,
            },
        )

    result = await provision.create_database(payload.db_name, tables)
    if not result.ok:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            detail={
                "error": result.error_detail or "Could not create database",
                "message": result.message,
            },
        )
    return {"message": result.message}


# Split a CREATE DATABASE script into its name and table statements
@router.post("/extract-create-tables")
async def extract_create_tables(payload: schemas.ExtractRequest):
    result = extract_table_statements(payload.sql)
    if not result.ok:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            detail={
                "error": schemas.ErrorCategory.PARSE_FAILED.value,
                "message": result.error_detail,
            },
        )
    return {
        "dbName": result.database_name,
        "tables": result.table_statements,
        "message": result.message,
    }
