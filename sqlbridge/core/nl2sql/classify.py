"""
CLASSIFY MODULE - Decide what a generated statement is going to do

Purpose:
    1. Map a statement to an OperationCategory from its leading keyword
    2. Spot CREATE DATABASE anywhere in the text (it cannot run inside a transaction)

Both checks are textual. Nothing here parses SQL, so a statement that starts
with a comment or whitespace before its keyword lands in OTHER.
"""

import re
from typing import Optional

from sqlbridge.core.schemas import OperationCategory


# Leading keyword -> category, checked in order
KEYWORD_CATEGORIES = (
    ("select", OperationCategory.READ),
    ("insert", OperationCategory.WRITE),
    ("update", OperationCategory.WRITE),
    ("delete", OperationCategory.WRITE),
    ("create", OperationCategory.DDL),
    ("alter", OperationCategory.DDL),
    ("drop", OperationCategory.DDL),
)

CREATE_DATABASE_PATTERN = re.compile(r"create\s+database", re.IGNORECASE)


def classify_statement(sql: Optional[str]) -> OperationCategory:
    """
    Return the operation category of a single statement.

    Example:
        classify_statement("SELECT * FROM users;")  -> OperationCategory.READ
        classify_statement("DROP TABLE users;")     -> OperationCategory.DDL
        classify_statement("")                      -> OperationCategory.UNKNOWN
    """
    if not sql:
        return OperationCategory.UNKNOWN

    sql_lower = sql.lower()
    for keyword, category in KEYWORD_CATEGORIES:
        if sql_lower.startswith(keyword):
            return category

    return OperationCategory.OTHER


def contains_create_database(sql: Optional[str]) -> bool:
    """True when the text holds a CREATE DATABASE clause, in any casing and at any position."""
    if not sql:
        return False
    return CREATE_DATABASE_PATTERN.search(sql) is not None
