"""
CREATE VIEW extraction.

The name, flags and optional column list are read from the comment-stripped
statement; the query is cut from the verbatim statement so its comments
survive:

    CREATE [OR REPLACE] [SECURE] [RECURSIVE] VIEW [IF NOT EXISTS] name
        [( col [COMMENT '...'], ... )] [COMMENT = '...']
    AS <query>

``COMMENT`` is only looked up in the header before ``AS``.
"""
import re
from typing import List, Optional

from sf2tf.services.ddl_parsing.extractors.base_extractor import BaseExtractor, ExtractionError
from sf2tf.services.ddl_parsing.identifiers import (
    QUALIFIED_NAME,
    clean_identifier,
    parse_fully_qualified_name,
    split_by_comma,
    tokenize_clause,
)
from sf2tf.services.ddl_parsing.models import ViewDefinition
from sf2tf.services.ddl_parsing.scanner import (
    find_balanced_span,
    find_keyword,
    next_code_index,
    scan_regions,
    strip_comments,
)

# Stripped text, anchored at statement start.
VIEW_CLASSIFIER = re.compile(
    r"^\s*CREATE\s+(?:OR\s+REPLACE\s+)?(?:SECURE\s+)?(?:RECURSIVE\s+)?VIEW\s+", re.IGNORECASE
)
VIEW_HEADER = re.compile(
    rf"^\s*CREATE\s+(OR\s+REPLACE\s+)?(SECURE\s+)?(?:RECURSIVE\s+)?VIEW\s+"
    rf"(?:IF\s+NOT\s+EXISTS\s+)?({QUALIFIED_NAME})",
    re.IGNORECASE,
)
# Verbatim text, code regions only.  Not part of a dotted name or identifier.
VIEW_KEYWORD = re.compile(r"\bVIEW\b", re.IGNORECASE)
AS_KEYWORD = re.compile(r'(?<![.\w"])AS\b', re.IGNORECASE)


class ViewExtractor(BaseExtractor):
    CLASSIFIER = VIEW_CLASSIFIER

    def extract(self, statement: str, cleaned: str) -> ViewDefinition:
        header = VIEW_HEADER.match(cleaned)
        if not header:
            raise ExtractionError("view name not found after CREATE VIEW")
        database, schema, name = parse_fully_qualified_name(header.group(3))
        columns = self._parse_column_list(cleaned, header.end())

        # The query is cut from the verbatim statement so its comments survive.
        regions = scan_regions(statement)
        view_kw = find_keyword(statement, VIEW_KEYWORD, 0, regions)
        search_from = view_kw.end() if view_kw else 0
        if columns is not None:
            open_kw = find_keyword(statement, r"\(", search_from, regions)
            span = find_balanced_span(statement, open_kw.start(), regions) if open_kw else None
            if span:
                search_from = span[1] + 1
        as_kw = find_keyword(statement, AS_KEYWORD, search_from, regions)
        if not as_kw:
            raise ExtractionError(f"view {name} has no AS <query> clause")

        query = statement[as_kw.end():].strip()
        if not query:
            raise ExtractionError(f"view {name} has an empty query")
        if not query.endswith(';'):
            query += ';'

        # COMMENT is a header property, never read from the query.
        comment = self.find_comment_property(strip_comments(statement[:as_kw.start()]))

        return ViewDefinition(
            name=name,
            query=query,
            schema=schema,
            database=database,
            columns=columns,
            comment=comment,
            secure=bool(header.group(2)),
            or_replace=bool(header.group(1)),
        )

    def _parse_column_list(self, cleaned: str, after_name: int) -> Optional[List[str]]:
        """Explicit output names: ``CREATE VIEW v (a, b COMMENT 'x') AS``."""
        regions = scan_regions(cleaned)
        open_pos = next_code_index(cleaned, after_name, regions)
        if open_pos is None or cleaned[open_pos] != '(':
            return None
        span = find_balanced_span(cleaned, open_pos, regions)
        if span is None:
            self.warnings.append("view column list is not closed; ignored")
            return None
        names = []
        for entry in split_by_comma(cleaned[open_pos + 1:span[1]]):
            tokens = tokenize_clause(entry)
            if tokens:
                names.append(clean_identifier(tokens[0]))
        return names or None
