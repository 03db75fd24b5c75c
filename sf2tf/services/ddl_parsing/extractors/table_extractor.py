"""
CREATE TABLE extraction.

Works entirely on the comment-stripped statement: nothing in a table
definition has to survive verbatim, and column/table ``COMMENT`` literals are
string literals, not SQL comments, so they are kept by the stripping pass.

Column-list entries are classified one by one:

    CONSTRAINT <name> <kind> (...)         named out-of-line constraint
    PRIMARY KEY | UNIQUE | FOREIGN KEY | CHECK (...)   unnamed constraint
    <name> <type> [modifiers...]           column

Unnamed constraints (out-of-line or inline on a column) are named
``<PK|UQ|FK|CK>_<TABLE>``, with ``_2``, ``_3`` ... on collision.
"""
import re
from typing import Dict, List, Optional, Tuple

from sf2tf.services.ddl_parsing.extractors.base_extractor import BaseExtractor, ExtractionError
from sf2tf.services.ddl_parsing.identifiers import (
    QUALIFIED_NAME,
    clean_identifier,
    parse_fully_qualified_name,
    split_by_comma,
    split_qualified_name,
    tokenize_clause,
    unquote_literal,
)
from sf2tf.services.ddl_parsing.models import (
    ColumnDefinition,
    ConstraintDefinition,
    ConstraintKind,
    ConstraintProperties,
    TableDefinition,
)
from sf2tf.services.ddl_parsing.scanner import find_balanced_span, next_code_index, scan_regions

# All patterns below run on comment-stripped text.

# Anchored at statement start.
TABLE_CLASSIFIER = re.compile(r"^\s*CREATE\s+(?:OR\s+REPLACE\s+)?TABLE\s+", re.IGNORECASE)
TABLE_HEADER = re.compile(
    rf"^\s*CREATE\s+(?:OR\s+REPLACE\s+)?TABLE\s+(?:IF\s+NOT\s+EXISTS\s+)?({QUALIFIED_NAME})",
    re.IGNORECASE,
)
# Anchored at the start of one column-list entry.
CONSTRAINT_INTRO = re.compile(r"^(?:CONSTRAINT\s|PRIMARY\s+KEY\b|FOREIGN\s+KEY\b|UNIQUE\b|CHECK\b)", re.IGNORECASE)
CONSTRAINT_NAME = re.compile(rf"^CONSTRAINT\s+({QUALIFIED_NAME})\s*", re.IGNORECASE)
CONSTRAINT_KIND = re.compile(r"^(PRIMARY\s+KEY|FOREIGN\s+KEY|UNIQUE|CHECK)\b\s*", re.IGNORECASE)
REFERENCES = re.compile(rf"\bREFERENCES\s+({QUALIFIED_NAME})\s*", re.IGNORECASE)
# Unanchored; searched in the text after the column list.
CLUSTER_BY = re.compile(r"\bCLUSTER\s+BY\s*(?:LINEAR\s*)?(?=\()", re.IGNORECASE)

_NAME_PREFIXES = {
    ConstraintKind.PRIMARY_KEY: "PK",
    ConstraintKind.UNIQUE: "UQ",
    ConstraintKind.FOREIGN_KEY: "FK",
    ConstraintKind.CHECK: "CK",
}


class TableExtractor(BaseExtractor):
    CLASSIFIER = TABLE_CLASSIFIER

    def extract(self, statement: str, cleaned: str) -> TableDefinition:
        header = TABLE_HEADER.match(cleaned)
        if not header:
            raise ExtractionError("table name not found after CREATE TABLE")

        database, schema, name = parse_fully_qualified_name(header.group(1))
        regions = scan_regions(cleaned)
        open_pos = next_code_index(cleaned, header.end(), regions)
        if open_pos is None or cleaned[open_pos] != '(':
            raise ExtractionError(
                f"CREATE TABLE {name} has no column list (CTAS, CLONE and LIKE are not supported)"
            )
        span = find_balanced_span(cleaned, open_pos, regions)
        if span is None:
            raise ExtractionError(f"column list of table {name} is not closed")

        columns, constraints = self._parse_entries(cleaned[open_pos + 1:span[1]], name)
        tail = cleaned[span[1] + 1:]

        return TableDefinition(
            name=name,
            schema=schema,
            database=database,
            columns=columns,
            constraints=constraints,
            comment=self.find_comment_property(tail),
            cluster_by=self._parse_cluster_by(tail),
        )

    # ------------------------------------------------------------------
    # Column list
    # ------------------------------------------------------------------

    def _parse_entries(self, columns_text: str, table_name: str) -> Tuple[List[ColumnDefinition], List[ConstraintDefinition]]:
        columns: List[ColumnDefinition] = []
        constraints: List[ConstraintDefinition] = []
        used_names: Dict[str, int] = {}

        for entry in split_by_comma(columns_text):
            if CONSTRAINT_INTRO.match(entry):
                constraint = self._parse_constraint(entry, table_name, used_names)
                if constraint:
                    constraints.append(constraint)
                continue

            column, inline = self._parse_column(entry)
            if column is None:
                continue
            columns.append(column)
            for explicit_name, kind, ref_table, ref_columns in inline:
                constraints.append(ConstraintDefinition(
                    name=explicit_name or self._unnamed(kind, table_name, used_names),
                    kind=kind,
                    columns=[column.name],
                    references_table=ref_table,
                    references_columns=ref_columns,
                ))
        return columns, constraints

    def _parse_column(self, entry: str) -> Tuple[Optional[ColumnDefinition], list]:
        tokens = tokenize_clause(entry)
        if len(tokens) < 2:
            self.warnings.append(f"column definition '{entry}' has no data type; skipped")
            return None, []

        name = clean_identifier(tokens[0])
        col_type, i = _read_type(tokens, 1)

        nullable = True
        default_value = None
        comment = None
        inline = []
        pending_name = None
        n = len(tokens)

        while i < n:
            word = tokens[i].upper()
            if word == 'NOT' and i + 1 < n and tokens[i + 1].upper() == 'NULL':
                nullable = False
                i += 2
            elif word == 'DEFAULT' and i + 1 < n:
                default_value = tokens[i + 1]
                i += 2
                # CURRENT_TIMESTAMP ()
                if i < n and tokens[i].startswith('('):
                    default_value += tokens[i]
                    i += 1
            elif word == 'COMMENT' and i + 1 < n:
                if tokens[i + 1] == '=' and i + 2 < n:
                    i += 1
                comment = unquote_literal(tokens[i + 1])
                i += 2
            elif word == 'CONSTRAINT' and i + 1 < n:
                pending_name = clean_identifier(tokens[i + 1])
                i += 2
            elif word == 'PRIMARY' and i + 1 < n and tokens[i + 1].upper() == 'KEY':
                inline.append((pending_name, ConstraintKind.PRIMARY_KEY, None, []))
                pending_name = None
                i += 2
            elif word == 'UNIQUE':
                inline.append((pending_name, ConstraintKind.UNIQUE, None, []))
                pending_name = None
                i += 1
            elif word == 'REFERENCES' and i + 1 < n:
                ref_table, ref_columns = _split_reference(tokens[i + 1])
                i += 2
                if i < n and tokens[i].startswith('('):
                    ref_columns = _column_names(tokens[i][1:-1])
                    i += 1
                inline.append((pending_name, ConstraintKind.FOREIGN_KEY, ref_table, ref_columns))
                pending_name = None
            elif word == 'COLLATE' and i + 1 < n:
                i += 2
            else:
                # NULL, AUTOINCREMENT, IDENTITY, masking policies, tags ...
                i += 1

        column = ColumnDefinition(
            name=name,
            type=col_type,
            nullable=nullable,
            default_value=default_value,
            comment=comment,
        )
        return column, inline

    def _parse_constraint(self, entry: str, table_name: str, used_names: Dict[str, int]) -> Optional[ConstraintDefinition]:
        rest = entry
        name = None
        named = CONSTRAINT_NAME.match(rest)
        if named:
            name = clean_identifier(named.group(1))
            rest = rest[named.end():]

        kind_match = CONSTRAINT_KIND.match(rest)
        if not kind_match:
            self.warnings.append(f"unsupported constraint '{entry}'; skipped")
            return None
        kind = ConstraintKind(' '.join(kind_match.group(1).upper().split()))
        rest = rest[kind_match.end():]

        columns: List[str] = []
        expression = None
        if rest.startswith('('):
            span = find_balanced_span(rest, 0)
            if span is None:
                self.warnings.append(f"constraint '{entry}' has an unclosed column list; skipped")
                return None
            inner = rest[1:span[1]]
            rest = rest[span[1] + 1:]
            if kind is ConstraintKind.CHECK:
                expression = inner.strip()
            else:
                columns = _column_names(inner)
        else:
            self.warnings.append(f"constraint '{entry}' has no column list; skipped")
            return None

        references_table = None
        references_columns: List[str] = []
        if kind is ConstraintKind.FOREIGN_KEY:
            ref = REFERENCES.search(rest)
            if ref:
                references_table = '.'.join(split_qualified_name(ref.group(1)))
                after = rest[ref.end():]
                if after.startswith('('):
                    ref_span = find_balanced_span(after, 0)
                    if ref_span:
                        references_columns = _column_names(after[1:ref_span[1]])
                        after = after[ref_span[1] + 1:]
                rest = after
            else:
                self.warnings.append(f"foreign key '{entry}' has no REFERENCES clause")

        return ConstraintDefinition(
            name=name or self._unnamed(kind, table_name, used_names),
            kind=kind,
            columns=columns,
            properties=_parse_properties(rest),
            references_table=references_table,
            references_columns=references_columns,
            expression=expression,
        )

    @staticmethod
    def _unnamed(kind: ConstraintKind, table_name: str, used_names: Dict[str, int]) -> str:
        base = f"{_NAME_PREFIXES[kind]}_{table_name}".upper()
        used_names[base] = used_names.get(base, 0) + 1
        count = used_names[base]
        return base if count == 1 else f"{base}_{count}"

    # ------------------------------------------------------------------
    # Trailing clauses
    # ------------------------------------------------------------------

    def _parse_cluster_by(self, tail: str) -> Optional[List[str]]:
        m = CLUSTER_BY.search(tail)
        if not m:
            return None
        span = find_balanced_span(tail, m.end())
        if span is None:
            self.warnings.append("CLUSTER BY list is not closed; ignored")
            return None
        keys = [clean_identifier(k) for k in split_by_comma(tail[m.end() + 1:span[1]])]
        return keys or None


def _read_type(tokens: List[str], i: int) -> Tuple[str, int]:
    """Read the data type starting at ``tokens[i]``; return it and the next index."""
    col_type = tokens[i]
    i += 1
    n = len(tokens)
    base = col_type.split('(')[0].upper()

    if base == 'DOUBLE' and i < n and tokens[i].upper() == 'PRECISION':
        col_type = f"{col_type} {tokens[i]}"
        i += 1
    elif base in ('CHARACTER', 'CHAR', 'NCHAR') and i < n and tokens[i].upper().startswith('VARYING'):
        col_type = f"{col_type} {tokens[i]}"
        i += 1
    elif base.startswith('TIMESTAMP') and i < n and tokens[i].upper() in ('WITH', 'WITHOUT'):
        j = i
        while j < n and tokens[j].upper() != 'ZONE':
            j += 1
        if j < n:
            col_type = ' '.join([col_type] + tokens[i:j + 1])
            i = j + 1

    # DECIMAL (10,2)
    if i < n and tokens[i].startswith('('):
        col_type += tokens[i]
        i += 1
    return col_type, i


def _column_names(text: str) -> List[str]:
    return [clean_identifier(c) for c in split_by_comma(text)]


def _split_reference(token: str) -> Tuple[str, List[str]]:
    """``other_table(id)`` -> ``('other_table', ['id'])``."""
    if '(' in token:
        name, _, cols = token.partition('(')
        return '.'.join(split_qualified_name(name)), _column_names(cols.rstrip(')'))
    return '.'.join(split_qualified_name(token)), []


def _parse_properties(text: str) -> ConstraintProperties:
    upper = ' '.join(text.upper().split())
    return ConstraintProperties(
        rely=not re.search(r"\bNORELY\b", upper),
        deferrable=not re.search(r"\bNOT DEFERRABLE\b", upper),
        enable=not re.search(r"\bDISABLE\b", upper),
    )
