"""
TRANSLATOR - Natural language to SQL through a chat-completions API

Purpose:
    1. Build the system prompt (dialect, schema, allowed statements, rules)
    2. Send one request to the text-generation service (OpenRouter by default)
    3. Clean the reply into a single bare SQL statement

Data Flow:
    command + schema text → build_messages() → POST /chat/completions → clean_sql() → TranslationResult

translate() never raises. Upstream problems come back as ok=False with the
provider's error object (or the transport message) as error_detail.
"""

import logging
import re
from typing import Any, Dict, List, Optional

import httpx

from sqlbridge.core.config import settings
from sqlbridge.core.schemas import TranslationResult

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """You are an assistant that translates natural language into SQL. Only respond with the raw SQL query. The database is {dialect} and has the following structure:

{schema}

You can generate any valid {dialect} SQL, including but not limited to:
- SELECT queries (with JOINs, GROUP BY, HAVING, ORDER BY, LIMIT)
- INSERT, UPDATE, DELETE operations
- CREATE TABLE, ALTER TABLE, DROP TABLE statements
- CREATE INDEX, constraints, triggers
- Complex aggregations, window functions
- Common Table Expressions (CTEs)

Important: Do NOT generate CREATE DATABASE commands as they cannot be executed within a transaction. For database creation, the user should use the dedicated /create-database endpoint instead.

Focus on generating clean, efficient, and correct SQL that follows {dialect} syntax.
DO NOT include any explanations or markdown formatting in your response.
ONLY return the raw SQL query without any backticks, comments, or explanations."""

# Opening fence with an optional language tag. A tag on a line of its own can be
# any word except a statement keyword ("```SELECT\n* FROM t" keeps its SELECT);
# inline ("```sql SELECT ...") only the SQL-ish tags are recognised.
STATEMENT_KEYWORDS = (
    "select|insert|update|delete|with|create|alter|drop|truncate|"
    "grant|revoke|explain|values|begin|comment|merge|copy"
)
FENCE_OPEN = re.compile(
    rf"^```(?:(?!(?:{STATEMENT_KEYWORDS})\b)[\w+-]*[ \t]*\r?\n"
    r"|(?:sql|postgresql|postgres|pgsql|psql)\b)?",
    re.IGNORECASE,
)
FENCE_CLOSE = re.compile(r"\r?\n?```$")


def build_messages(command: str, schema: str, dialect: str) -> List[Dict[str, str]]:
    return [
        {
            "role": "system",
            "content": SYSTEM_PROMPT.format(dialect=dialect, schema=schema),
        },
        {"role": "user", "content": command},
    ]


def clean_sql(content: str) -> str:
    """
    Strip whitespace and a surrounding fenced code block.

    Example:
        clean_sql("```sql\\nSELECT 1;\\n```") -> "SELECT 1;"
    """
    sql = content.strip()
    if sql.startswith("```"):
        sql = FENCE_OPEN.sub("", sql, count=1)
        sql = FENCE_CLOSE.sub("", sql, count=1)
        sql = sql.strip()
    return sql


def _upstream_error(response: httpx.Response) -> Any:
    """The provider's `error` object when the body is JSON, else the raw body."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict) and body.get("error"):
        return body["error"]
    return body


class SqlTranslator:
    """Client for the text-generation service. One instance can serve many requests."""

    def __init__(
        self,
        api_key: str,
        model: str,
        url: str,
        timeout: float = 60.0,
        dialect: str = "PostgreSQL",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            api_key: Bearer token for the service
            model: Model identifier sent in every request
            url: Full chat-completions endpoint
            timeout: Seconds before the request is abandoned
            dialect: SQL dialect named in the prompt
            transport: Optional httpx transport (tests plug a MockTransport in here)
        """
        self.api_key = api_key
        self.model = model
        self.url = url
        self.timeout = timeout
        self.dialect = dialect
        self.transport = transport

    async def translate(self, command: str, schema: str) -> TranslationResult:
        payload = {
            "model": self.model,
            "messages": build_messages(command, schema, self.dialect),
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.post(self.url, json=payload, headers=headers)
                response.raise_for_status()
                data = response.json()

            content = data["choices"][0]["message"]["content"]
            if not isinstance(content, str):
                raise TypeError(f"Unexpected message content: {type(content).__name__}")

        except httpx.HTTPStatusError as error:
            detail = _upstream_error(error.response)
            logger.error(f"Translation service returned {error.response.status_code}: {detail}")
            return TranslationResult(ok=False, error_detail=detail)
        except httpx.HTTPError as error:
            logger.error(f"Translation service unreachable: {error!r}")
            return TranslationResult(ok=False, error_detail=str(error) or repr(error))
        except (ValueError, KeyError, IndexError, TypeError) as error:
            logger.error(f"Malformed response from translation service: {error!r}")
            return TranslationResult(
                ok=False, error_detail=f"Malformed response from translation service: {error}"
            )

        sql = clean_sql(content)
        if not sql:
            return TranslationResult(
                ok=False, error_detail="Translation service returned an empty statement"
            )

        logger.info(f"Generated SQL: {sql}")
        return TranslationResult(ok=True, sql=sql)


def get_translator() -> SqlTranslator:
    """FastAPI dependency; overridden in tests."""
    return SqlTranslator(
        api_key=settings.OPENROUTER_API_KEY,
        model=settings.OPENROUTER_MODEL,
        url=settings.OPENROUTER_URL,
        timeout=settings.TRANSLATION_TIMEOUT_SECONDS,
        dialect=settings.SQL_DIALECT,
    )
