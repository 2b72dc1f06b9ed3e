"""
EXTRACT MODULE - Split a "CREATE DATABASE + CREATE TABLE ..." script into parts

Purpose:
    1. Find the database name that follows CREATE DATABASE
    2. Collect every CREATE TABLE statement, in source order, up to its ';'

Data Flow:
    raw script → tokenize() → find_database_name() / find_table_statements() → ExtractionResult

The scanner is linear and never backtracks. It knows about quoted strings,
quoted identifiers, dollar quotes and comments, so a ';' or a "CREATE TABLE"
inside any of those is ignored. It is not a SQL grammar.
"""

import logging
import re
from typing import Iterator, List, NamedTuple, Optional

from sqlbridge.core.nl2sql.classify import contains_create_database
from sqlbridge.core.schemas import ExtractionResult

logger = logging.getLogger(__name__)

WORD = "word"
STRING = "string"
SEMICOLON = "semicolon"
SYMBOL = "symbol"

DOLLAR_TAG = re.compile(r"\$(?:[A-Za-z_][A-Za-z0-9_]*)?\$")
DATABASE_NAME = re.compile(r"[A-Za-z0-9_]+")


class Token(NamedTuple):
    kind: str
    value: str
    start: int
    end: int  # exclusive


# ============================================================================
# STEP 1: TOKENIZE
# ============================================================================


def _quote_end(sql: str, start: int, quote: str, backslash_escapes: bool = False) -> int:
    """
    Index just past the closing quote; doubled quotes are escapes, and so is a
    backslash inside E'...' strings. Unterminated runs to the end.
    """
    i = start + 1
    length = len(sql)
    while i < length:
        if backslash_escapes and sql[i] == "\\":
            i += 2
            continue
        if sql[i] == quote:
            if i + 1 < length and sql[i + 1] == quote:
                i += 2
                continue
            return i + 1
        i += 1
    return length


def tokenize(sql: str) -> Iterator[Token]:
    """
    Yield the tokens of a SQL script, skipping whitespace and comments.

    Example:
        tokenize("CREATE TABLE t (x text default 'a;b');")
        -> create, table, t, (, x, text, default, 'a;b', ), ;
    """
    i = 0
    length = len(sql)

    while i < length:
        ch = sql[i]

        if ch.isspace():
            i += 1
            continue

        # -- line comment
        if sql.startswith("--", i):
            newline = sql.find("\n", i)
            i = length if newline == -1 else newline + 1
            continue

        # /* block comment */
        if sql.startswith("/*", i):
            close = sql.find("*/", i + 2)
            i = length if close == -1 else close + 2
            continue

        # 'string literal' or "quoted identifier"
        if ch in ("'", '"'):
            end = _quote_end(sql, i, ch)
            yield Token(STRING, sql[i:end], i, end)
            i = end
            continue

        # $tag$ dollar quoted body $tag$
        if ch == "$":
            match = DOLLAR_TAG.match(sql, i)
            if match:
                tag = match.group(0)
                close = sql.find(tag, match.end())
                end = length if close == -1 else close + len(tag)
                yield Token(STRING, sql[i:end], i, end)
                i = end
                continue

        if ch == ";":
            yield Token(SEMICOLON, ch, i, i + 1)
            i += 1
            continue

        if ch.isalnum() or ch == "_":
            j = i + 1
            while j < length and (sql[j].isalnum() or sql[j] in "_$"):
                j += 1

            # E'escape string' with backslash escapes
            if sql[i:j] in ("E", "e") and j < length and sql[j] == "'":
                end = min(_quote_end(sql, j, "'", backslash_escapes=True), length)
                yield Token(STRING, sql[i:end], i, end)
                i = end
                continue

            yield Token(WORD, sql[i:j], i, j)
            i = j
            continue

        yield Token(SYMBOL, ch, i, i + 1)
        i += 1


# ============================================================================
# STEP 2: SCAN
# ============================================================================


def _is_keyword_pair(tokens: List[Token], index: int, first: str, second: str) -> bool:
    if index + 1 >= len(tokens):
        return False
    a, b = tokens[index], tokens[index + 1]
    return (
        a.kind == WORD
        and b.kind == WORD
        and a.value.lower() == first
        and b.value.lower() == second
    )


def find_database_name(tokens: List[Token]) -> Optional[str]:
    """Identifier right after the first CREATE DATABASE, or None."""
    for index in range(len(tokens)):
        if _is_keyword_pair(tokens, index, "create", "database"):
            if index + 2 >= len(tokens):
                return None
            candidate = tokens[index + 2]
            if candidate.kind == WORD and DATABASE_NAME.fullmatch(candidate.value):
                return candidate.value
            return None
    return None


def find_table_statements(sql: str, tokens: List[Token]) -> List[str]:
    """Every CREATE TABLE ... ; in order. A statement with no ';' is left out."""
    statements = []
    index = 0

    while index < len(tokens):
        if not _is_keyword_pair(tokens, index, "create", "table"):
            index += 1
            continue

        start = tokens[index].start
        terminator = next(
            (
                position
                for position in range(index + 2, len(tokens))
                if tokens[position].kind == SEMICOLON
            ),
            None,
        )
        if terminator is None:
            break

        statements.append(sql[start : tokens[terminator].end])
        index = terminator + 1

    return statements


def extract_table_statements(sql: Optional[str]) -> ExtractionResult:
    """
    Pull the database name and the table statements out of a compound script.

    Never raises: every problem comes back as ok=False with a message.

    Example:
        extract_table_statements(
            "CREATE DATABASE shop; CREATE TABLE items (id SERIAL PRIMARY KEY);"
        )
        -> ok=True, database_name="shop",
           table_statements=["CREATE TABLE items (id SERIAL PRIMARY KEY);"]
    """
    if not sql:
        return ExtractionResult(ok=False, error_detail="SQL statement is required")

    try:
        if not contains_create_database(sql):
            return ExtractionResult(
                ok=False, error_detail="No CREATE DATABASE statement found"
            )

        tokens = list(tokenize(sql))

        database_name = find_database_name(tokens)
        if not database_name:
            return ExtractionResult(
                ok=False, error_detail="Could not extract database name"
            )

        statements = find_table_statements(sql, tokens)
        return ExtractionResult(
            ok=True,
            database_name=database_name,
            table_statements=statements,
            message=f"Found {len(statements)} table creation statements",
        )

    except Exception as error:
        logger.exception("Error extracting table statements")
        return ExtractionResult(ok=False, error_detail=str(error))
