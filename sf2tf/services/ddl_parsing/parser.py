"""
SnowflakeDdlParser – turns a Snowflake SQL script into DDL object definitions.

Pipeline per call:
  1. normalise the text (BOM, line endings)
  2. split into top-level statements (``;`` in code only)
  3. strip comments from each statement for classification
  4. hand the statement to the first extractor whose classifier matches
     (Table → View → Procedure); statements nobody claims are skipped

Malformed statements never abort the script: the extractor's
``ExtractionError`` is turned into an ERROR diagnostic and parsing moves on.
A fresh set of extractors is built per call so no state is shared between
scripts.
"""
from typing import List

from sf2tf.utils.logger import setup_logger
from .extractors import ExtractionError, ProcedureExtractor, TableExtractor, ViewExtractor
from .models import DdlObject, Diagnostic, ParseResult
from .scanner import normalize_sql_text, split_statements, strip_comments

EXCERPT_LENGTH = 80


def make_excerpt(statement: str, length: int = EXCERPT_LENGTH) -> str:
    """Single-line prefix of a statement for diagnostics and logs."""
    flat = ' '.join(statement.split())
    return flat if len(flat) <= length else flat[:length - 3] + '...'


class SnowflakeDdlParser:

    def __init__(self):
        self.logger = setup_logger('SnowflakeDdlParser')

    def parse(self, sql: str) -> List[DdlObject]:
        return self.parse_with_diagnostics(sql).objects

    def parse_with_diagnostics(self, sql: str) -> ParseResult:
        """
        Parse *sql* and keep what could not be extracted.

        Args:
            sql: Script text, any number of statements.

        Returns:
            ParseResult with the objects in source order, the diagnostics
            and the number of statements seen.
        """
        result = ParseResult()
        extractors = [TableExtractor(), ViewExtractor(), ProcedureExtractor()]
        statements = split_statements(normalize_sql_text(sql))
        result.statement_count = len(statements)

        for index, statement in enumerate(statements):
            cleaned = strip_comments(statement)
            extractor = next((e for e in extractors if e.matches(cleaned)), None)
            if extractor is None:
                self.logger.debug(f"Skipping statement {index + 1}: {make_excerpt(cleaned)}")
                continue

            excerpt = make_excerpt(cleaned)
            try:
                obj = extractor.extract(statement, cleaned)
            except ExtractionError as e:
                extractor.warnings = []
                self.logger.warning(f"Statement {index + 1} skipped: {e} [{excerpt}]")
                result.diagnostics.append(Diagnostic(index, excerpt, str(e)))
                continue
            except Exception as e:
                extractor.warnings = []
                self.logger.error(f"Unexpected error extracting statement {index + 1}: {e}", exc_info=True)
                result.diagnostics.append(Diagnostic(index, excerpt, f"{type(e).__name__}: {e}"))
                continue

            for diagnostic in extractor.take_warnings(index, excerpt):
                self.logger.warning(f"Statement {index + 1}: {diagnostic.reason}")
                result.diagnostics.append(diagnostic)
            self.logger.debug(f"Extracted {obj.kind.value} {obj.name}")
            result.objects.append(obj)

        self.logger.info(
            f"Parsed {len(result.objects)} object(s) from {result.statement_count} statement(s), "
            f"{len(result.diagnostics)} diagnostic(s)"
        )
        return result
