from typing import Optional, List, Dict, Any
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, EmailStr


# =========================
# Enums
# =========================
class OperationCategory(str, Enum):
    READ = "read"
    WRITE = "write"
    DDL = "ddl"
    OTHER = "other"
    UNKNOWN = "unknown"


class ErrorCategory(str, Enum):
    INVALID_INPUT = "invalid_input"
    TRANSLATION_FAILED = "translation_failed"
    UNSAFE_STATEMENT = "unsafe_statement"
    EXECUTION_FAILED = "execution_failed"
    PARSE_FAILED = "parse_failed"


# =========================
# SCHEMA CONTEXT
# =========================
class ColumnDescriptor(BaseModel):
    name: str
    data_type: str


class TableDescriptor(BaseModel):
    name: str
    columns: List[ColumnDescriptor] = []


class SchemaDescription(BaseModel):
    tables: List[TableDescriptor] = []


# =========================
# COMPONENT OUTCOMES
# =========================
class TranslationResult(BaseModel):
    """
    Outcome of one call to the text-generation service.
    ok=True carries `sql`; ok=False carries whatever the upstream reported.
    """

    ok: bool
    sql: Optional[str] = None
    error_detail: Optional[Any] = None


class ExtractionResult(BaseModel):
    ok: bool
    database_name: Optional[str] = None
    table_statements: List[str] = []
    message: Optional[str] = None
    error_detail: Optional[str] = None


class ExecutionOutcome(BaseModel):
    ok: bool
    rows: Optional[List[Dict[str, Any]]] = None
    row_count: Optional[int] = None
    returns_rows: bool = False
    error_detail: Optional[str] = None


class ProvisionResult(BaseModel):
    ok: bool
    message: Optional[str] = None
    error_detail: Optional[str] = None


# =========================
# REQUEST BODIES
# =========================
# Fields are optional on purpose: missing values are reported with our own
# 400 messages instead of FastAPI's generic 422.
class CommandRequest(BaseModel):
    command: Optional[str] = None


class CreateDatabaseRequest(BaseModel):
    db_name: Optional[str] = Field(default=None, alias="dbName")
    tables: Optional[Any] = None

    model_config = ConfigDict(populate_by_name=True)


class ExtractRequest(BaseModel):
    sql: Optional[str] = None


# =========================
# USER
# =========================
class UserCreate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    age: Optional[int] = Field(default=None, ge=0)


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    age: int

    model_config = ConfigDict(from_attributes=True)
