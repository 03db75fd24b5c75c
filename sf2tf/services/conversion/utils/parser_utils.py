import sqlglot
from sqlglot import exp
from sqlglot.errors import SqlglotError
import logging

logger = logging.getLogger(__name__)


def safe_parse_one(sql: str, dialect: str = "snowflake") -> tuple[exp.Expression | None, str | None]:
    """
    Safely parses a single SQL statement into an AST.

    Args:
        sql: The SQL statement string to parse.
        dialect: The sqlglot dialect to use for parsing.

    Returns:
        A tuple containing (ast, error_message).
        If successful, ast is the parsed expression and error_message is None.
        If it fails, ast is None and error_message describes the failure.
    """
    try:
        ast = sqlglot.parse_one(sql.strip().rstrip(';'), read=dialect)
        return ast, None
    except SqlglotError as e:
        logger.debug(f"sqlglot could not parse statement: {e}")
        return None, str(e).splitlines()[0] if str(e) else type(e).__name__
