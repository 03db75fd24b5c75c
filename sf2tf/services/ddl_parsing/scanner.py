"""
Lexical scanner for Snowflake SQL scripts.

The scanner walks the text once and classifies every character into one of
the lexical regions below.  Everything else in the parser is built on the
region list:

- ``strip_comments()``   comment-free projection used for keyword matching
- ``split_statements()`` top-level statements, split on ``;`` in code only
- ``find_keyword()``     regex search restricted to code regions
- ``find_balanced_span()`` parenthesis matching that ignores quoted text

States
------
NORMAL         plain SQL code
SINGLE_QUOTE   '...'   ('' and backslash escapes stay inside)
DOUBLE_QUOTE   "..."   ("" escape stays inside)
LINE_COMMENT   -- ... up to, not including, the newline
BLOCK_COMMENT  /* ... */
DOLLAR_QUOTE   $tag$ ... $tag$   (tag empty or an identifier; no nesting)

Unterminated regions run to the end of the input.
"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Pattern, Tuple, Union


class LexState(Enum):
    NORMAL = "normal"
    SINGLE_QUOTE = "single_quote"
    DOUBLE_QUOTE = "double_quote"
    LINE_COMMENT = "line_comment"
    BLOCK_COMMENT = "block_comment"
    DOLLAR_QUOTE = "dollar_quote"


COMMENT_STATES = (LexState.LINE_COMMENT, LexState.BLOCK_COMMENT)


@dataclass(frozen=True)
class Region:
    state: LexState
    start: int
    end: int  # exclusive
    tag: Optional[str] = None


# Anchored at a '$' in code: "$$" or "$identifier$".
_DOLLAR_OPEN = re.compile(r"\$([A-Za-z_][A-Za-z0-9_]*)?\$")
_IDENT_CHAR = re.compile(r"[A-Za-z0-9_$]")


def normalize_sql_text(sql: str) -> str:
    """Drop a leading BOM and convert CRLF / CR line endings to LF."""
    if sql.startswith('\ufeff'):
        sql = sql[1:]
    return sql.replace('\r\n', '\n').replace('\r', '\n')


def _scan_single_quote(sql: str, start: int) -> int:
    n = len(sql)
    j = start + 1
    while j < n:
        ch = sql[j]
        if ch == '\\':
            j += 2
        elif ch == "'":
            if j + 1 < n and sql[j + 1] == "'":
                j += 2
            else:
                return j + 1
        else:
            j += 1
    return n


def _scan_double_quote(sql: str, start: int) -> int:
    n = len(sql)
    j = start + 1
    while j < n:
        if sql[j] == '"':
            if j + 1 < n and sql[j + 1] == '"':
                j += 2
                continue
            return j + 1
        j += 1
    return n


def scan_regions(sql: str) -> List[Region]:
    """Classify *sql* into consecutive, non-overlapping lexical regions."""
    regions: List[Region] = []
    n = len(sql)
    i = 0
    normal_start = 0

    def close_normal(upto: int) -> None:
        if upto > normal_start:
            regions.append(Region(LexState.NORMAL, normal_start, upto))

    while i < n:
        ch = sql[i]
        nxt = sql[i + 1] if i + 1 < n else ''
        state = None
        end = i
        tag = None

        if ch == '-' and nxt == '-':
            state = LexState.LINE_COMMENT
            newline = sql.find('\n', i + 2)
            end = n if newline == -1 else newline
        elif ch == '/' and nxt == '*':
            state = LexState.BLOCK_COMMENT
            close = sql.find('*/', i + 2)
            end = n if close == -1 else close + 2
        elif ch == "'":
            state = LexState.SINGLE_QUOTE
            end = _scan_single_quote(sql, i)
        elif ch == '"':
            state = LexState.DOUBLE_QUOTE
            end = _scan_double_quote(sql, i)
        elif ch == '$':
            m = _DOLLAR_OPEN.match(sql, i)
            # "$tag$" glued to an identifier is part of the identifier (a$b$c);
            # a bare "$$" always opens a body (AS$$ ... $$).
            if m and m.group(1) and i > 0 and _IDENT_CHAR.match(sql[i - 1]):
                m = None
            if m:
                state = LexState.DOLLAR_QUOTE
                tag = m.group(1) or ''
                close = sql.find(m.group(0), m.end())
                end = n if close == -1 else close + len(m.group(0))

        if state is None:
            i += 1
            continue

        close_normal(i)
        regions.append(Region(state, i, end, tag))
        i = end
        normal_start = i

    close_normal(n)
    return regions


def strip_comments(sql: str) -> str:
    """
    Comment-free projection of *sql*.

    Line comments disappear (their newline is kept), block comments become a
    single space, quoted and dollar-quoted text passes through untouched.
    """
    parts = []
    for region in scan_regions(sql):
        if region.state is LexState.LINE_COMMENT:
            continue
        if region.state is LexState.BLOCK_COMMENT:
            parts.append(' ')
            continue
        parts.append(sql[region.start:region.end])
    return ''.join(parts)


def split_statements(sql: str) -> List[str]:
    """
    Split a script into top-level statements.

    Only a ``;`` found in NORMAL code terminates a statement.  Statements are
    trimmed, empty ones are dropped, comments are kept verbatim.
    """
    statements: List[str] = []
    stmt_start = 0

    for region in scan_regions(sql):
        if region.state is not LexState.NORMAL:
            continue
        pos = sql.find(';', region.start, region.end)
        while pos != -1:
            stmt = sql[stmt_start:pos].strip()
            if stmt:
                statements.append(stmt)
            stmt_start = pos + 1
            pos = sql.find(';', stmt_start, region.end)

    tail = sql[stmt_start:].strip()
    if tail:
        statements.append(tail)
    return statements


def find_keyword(sql: str, pattern: Union[str, Pattern], start: int = 0,
                 regions: Optional[List[Region]] = None) -> Optional[re.Match]:
    """
    Search *pattern* in the NORMAL code regions of *sql* at or after *start*.

    String patterns are compiled case-insensitively.  Matches never begin
    inside quoted text, comments or dollar-quoted bodies.
    """
    if isinstance(pattern, str):
        pattern = re.compile(pattern, re.IGNORECASE)
    for region in regions if regions is not None else scan_regions(sql):
        if region.state is not LexState.NORMAL or region.end <= start:
            continue
        m = pattern.search(sql, max(region.start, start), region.end)
        if m:
            return m
    return None


def find_balanced_span(sql: str, open_pos: int,
                       regions: Optional[List[Region]] = None) -> Optional[Tuple[int, int]]:
    """
    Return ``(open_pos, close_pos)`` of the parenthesis opened at *open_pos*.

    Parentheses inside quoted text, comments or dollar-quoted bodies are not
    counted.  Returns None when the parenthesis never closes.
    """
    if open_pos >= len(sql) or sql[open_pos] != '(':
        return None
    depth = 0
    for region in regions if regions is not None else scan_regions(sql):
        if region.state is not LexState.NORMAL or region.end <= open_pos:
            continue
        for k in range(max(region.start, open_pos), region.end):
            ch = sql[k]
            if ch == '(':
                depth += 1
            elif ch == ')':
                depth -= 1
                if depth == 0:
                    return open_pos, k
    return None


def next_code_index(sql: str, start: int, regions: Optional[List[Region]] = None) -> Optional[int]:
    """Index of the first non-blank character at or after *start* outside comments."""
    for region in regions if regions is not None else scan_regions(sql):
        if region.end <= start or region.state in COMMENT_STATES:
            continue
        for k in range(max(region.start, start), region.end):
            if not sql[k].isspace():
                return k
    return None
