"""
Identifier and clause helpers shared by the object extractors.

- fully-qualified name splitting (``db.schema.object``, quoted parts allowed)
- comma splitting that respects nested parentheses and quotes
- whitespace tokenising that keeps quoted text and parenthesised groups whole
- identifier / string-literal unquoting
"""
import re
from typing import List, Optional, Tuple

from .scanner import LexState, scan_regions

# One identifier part: a double-quoted identifier ("" escapes) or a bare run
# without whitespace, dots, quotes or parentheses.
IDENTIFIER_PART = r'(?:"(?:[^"]|"")*"|[^\s().";,]+)'
# A 1..n part dotted name built from IDENTIFIER_PART.
QUALIFIED_NAME = rf'{IDENTIFIER_PART}(?:\.{IDENTIFIER_PART})*'

# Matches a complete single-quoted literal, '' and backslash escapes included.
STRING_LITERAL = r"'(?:[^'\\]|\\.|'')*'"


def clean_identifier(identifier: str) -> str:
    """Remove identifier quoting: ``'"My ""Col""'`` -> ``'My "Col"'``, ``x`` -> ``x``."""
    ident = identifier.strip()
    if len(ident) >= 2 and ident[0] == ident[-1] == '"':
        return ident[1:-1].replace('""', '"')
    return ident.replace('"', '').replace('`', '').strip()


def split_qualified_name(name: str) -> List[str]:
    """
    Split a dotted name into unquoted parts; dots inside quotes do not split.

    ``'"DB"."my.schema".T'`` -> ``['DB', 'my.schema', 'T']``
    """
    parts: List[str] = []
    buf: List[str] = []
    in_quote = False
    i = 0
    while i < len(name):
        ch = name[i]
        if ch == '"':
            if in_quote and i + 1 < len(name) and name[i + 1] == '"':
                buf.append('""')
                i += 2
                continue
            in_quote = not in_quote
            buf.append(ch)
        elif ch == '.' and not in_quote:
            parts.append(clean_identifier(''.join(buf)))
            buf = []
        else:
            buf.append(ch)
        i += 1
    parts.append(clean_identifier(''.join(buf)))
    return [p for p in parts if p]


def parse_fully_qualified_name(full_name: str) -> Tuple[Optional[str], Optional[str], str]:
    """
    Return ``(database, schema, name)`` by dot count.

    3 parts -> all three, 2 -> schema and name, 1 -> name only.  Longer chains
    keep their last three parts.
    """
    parts = split_qualified_name(full_name)
    if not parts:
        return None, None, ''
    if len(parts) >= 3:
        return parts[-3], parts[-2], parts[-1]
    if len(parts) == 2:
        return None, parts[0], parts[1]
    return None, None, parts[0]


def split_by_comma(text: str) -> List[str]:
    """
    Split on top-level commas only.

    Commas nested in parentheses or inside quoted text, comments or dollar
    bodies do not split: ``"a(1,2), b"`` -> ``["a(1,2)", "b"]``.
    Entries are trimmed; empty entries are dropped.
    """
    parts: List[str] = []
    depth = 0
    start = 0
    for region in scan_regions(text):
        if region.state is not LexState.NORMAL:
            continue
        for k in range(region.start, region.end):
            ch = text[k]
            if ch == '(':
                depth += 1
            elif ch == ')':
                depth = max(depth - 1, 0)
            elif ch == ',' and depth == 0:
                part = text[start:k].strip()
                if part:
                    parts.append(part)
                start = k + 1
    tail = text[start:].strip()
    if tail:
        parts.append(tail)
    return parts


def tokenize_clause(text: str) -> List[str]:
    """
    Split a clause on whitespace, keeping quoted text and parenthesised
    groups together.

    ``"amount DECIMAL(10, 2) DEFAULT 'a b' NOT NULL"`` ->
    ``['amount', 'DECIMAL(10, 2)', 'DEFAULT', "'a b'", 'NOT', 'NULL']``

    A quote that never closes extends its token to the end of the text.
    """
    tokens: List[str] = []
    depth = 0
    start: Optional[int] = None
    for region in scan_regions(text):
        if region.state is not LexState.NORMAL:
            if start is None:
                start = region.start
            continue
        for k in range(region.start, region.end):
            ch = text[k]
            if ch.isspace() and depth == 0:
                if start is not None:
                    tokens.append(text[start:k])
                    start = None
                continue
            if start is None:
                start = k
            if ch == '(':
                depth += 1
            elif ch == ')':
                depth = max(depth - 1, 0)
    if start is not None:
        tokens.append(text[start:])
    return tokens


def unquote_literal(value: str) -> str:
    """
    Strip one layer of string-literal quoting.

    ``'it''s'`` -> ``it's``; ``$$text$$`` -> ``text``; an opening quote that
    never closes is dropped and the rest kept.  Unquoted values are returned
    unchanged.
    """
    value = value.strip()
    if len(value) >= 4 and value.startswith('$$') and value.endswith('$$'):
        return value[2:-2]
    if not value.startswith("'"):
        return value
    inner = value[1:-1] if len(value) >= 2 and value.endswith("'") else value[1:]
    return re.sub(r"''|\\'", "'", inner)
