"""
CREATE PROCEDURE extraction.

The parameter list and the body are located on the verbatim statement (the
body must keep its comments); the header between them is searched on its
comment-stripped projection:

    CREATE [OR REPLACE] [SECURE] PROCEDURE name ( params )
        RETURNS <type> LANGUAGE <lang> [EXECUTE AS OWNER|CALLER]
        [COMMENT = '...'] [HANDLER = '...'] [RUNTIME_VERSION = '...'] [PACKAGES = (...)]
    AS <body>
"""
import re
from typing import List, Optional

from sf2tf.services.ddl_parsing.extractors.base_extractor import BaseExtractor, ExtractionError
from sf2tf.services.ddl_parsing.identifiers import (
    IDENTIFIER_PART,
    QUALIFIED_NAME,
    STRING_LITERAL,
    clean_identifier,
    parse_fully_qualified_name,
    split_by_comma,
    unquote_literal,
)
from sf2tf.services.ddl_parsing.models import ProcedureDefinition, ProcedureParameter
from sf2tf.services.ddl_parsing.scanner import find_balanced_span, find_keyword, scan_regions, strip_comments

# Stripped text, anchored at statement start.
PROCEDURE_CLASSIFIER = re.compile(r"^\s*CREATE\s+(?:OR\s+REPLACE\s+)?(?:SECURE\s+)?PROCEDURE\s+", re.IGNORECASE)
PROCEDURE_HEADER = re.compile(
    rf"^\s*CREATE\s+(?:OR\s+REPLACE\s+)?(?:SECURE\s+)?PROCEDURE\s+(?:IF\s+NOT\s+EXISTS\s+)?({QUALIFIED_NAME})",
    re.IGNORECASE,
)

# Verbatim text, code regions only.
PROCEDURE_KEYWORD = re.compile(r"\bPROCEDURE\b", re.IGNORECASE)
AS_KEYWORD = re.compile(r'(?<![.\w"])AS\b', re.IGNORECASE)
EXECUTE_BEFORE = re.compile(r"\bEXECUTE\s*$", re.IGNORECASE)
EXECUTE_MODE = re.compile(r"\s*(OWNER|CALLER)\b", re.IGNORECASE)
DEFAULT_KEYWORD = re.compile(r"\s+DEFAULT\s+", re.IGNORECASE)

# Unanchored; searched in the stripped header only.
RETURNS = re.compile(r"\bRETURNS\s+", re.IGNORECASE)
LANGUAGE = re.compile(r"\bLANGUAGE\s+(\w+)", re.IGNORECASE)
HANDLER = re.compile(rf"\bHANDLER\s*=\s*({STRING_LITERAL})", re.IGNORECASE)
RUNTIME_VERSION = re.compile(rf"\bRUNTIME_VERSION\s*=\s*({STRING_LITERAL}|[\d.]+)", re.IGNORECASE)
PACKAGES = re.compile(r"\bPACKAGES\s*=\s*(?=\()", re.IGNORECASE)

# Anchored at the start of one parameter entry.
PARAMETER = re.compile(rf"\s*({IDENTIFIER_PART})\s+(.+)$", re.DOTALL)

# Anchored at the start of the body.
DOLLAR_DELIMITER = re.compile(r"^\$([A-Za-z_][A-Za-z0-9_]*)?\$")


class ProcedureExtractor(BaseExtractor):
    CLASSIFIER = PROCEDURE_CLASSIFIER

    def extract(self, statement: str, cleaned: str) -> ProcedureDefinition:
        header = PROCEDURE_HEADER.match(cleaned)
        if not header:
            raise ExtractionError("procedure name not found after CREATE PROCEDURE")
        database, schema, name = parse_fully_qualified_name(header.group(1))

        regions = scan_regions(statement)
        proc_kw = find_keyword(statement, PROCEDURE_KEYWORD, 0, regions)
        open_kw = find_keyword(statement, r"\(", proc_kw.end() if proc_kw else 0, regions)
        if not open_kw:
            raise ExtractionError(f"procedure {name} has no parameter list")
        span = find_balanced_span(statement, open_kw.start(), regions)
        if span is None:
            raise ExtractionError(f"parameter list of procedure {name} is not closed")
        parameters = self._parse_parameters(strip_comments(statement[span[0] + 1:span[1]]))

        # The first AS that is not part of EXECUTE AS starts the body.
        execute_as = None
        pos = span[1] + 1
        while True:
            as_kw = find_keyword(statement, AS_KEYWORD, pos, regions)
            if not as_kw:
                raise ExtractionError(f"procedure {name} has no AS <body> clause")
            if EXECUTE_BEFORE.search(strip_comments(statement[span[1] + 1:as_kw.start()])):
                mode = EXECUTE_MODE.match(statement, as_kw.end())
                if mode:
                    execute_as = mode.group(1).upper()
                    pos = mode.end()
                else:
                    pos = as_kw.end()
                continue
            break

        body = _strip_body_delimiters(statement[as_kw.end():].strip())
        if not body:
            raise ExtractionError(f"procedure {name} has an empty body")

        header_text = strip_comments(statement[span[1] + 1:as_kw.start()])
        language = LANGUAGE.search(header_text)
        handler = HANDLER.search(header_text)
        runtime = RUNTIME_VERSION.search(header_text)

        return ProcedureDefinition(
            name=name,
            body=body,
            schema=schema,
            database=database,
            parameters=parameters,
            return_type=_parse_return_type(header_text),
            comment=self.find_comment_property(header_text),
            language=language.group(1).upper() if language else "SQL",
            execute_as=execute_as,
            handler=unquote_literal(handler.group(1)) if handler else None,
            runtime_version=unquote_literal(runtime.group(1)) if runtime else None,
            packages=self._parse_packages(header_text),
        )

    def _parse_parameters(self, params_text: str) -> List[ProcedureParameter]:
        parameters = []
        for entry in split_by_comma(params_text):
            m = PARAMETER.match(entry)
            if not m:
                self.warnings.append(f"parameter '{entry}' has no data type; skipped")
                continue
            remainder = m.group(2)
            default = find_keyword(remainder, DEFAULT_KEYWORD)
            if default:
                param_type = remainder[:default.start()].strip()
                default_value = remainder[default.end():].strip() or None
            else:
                param_type = remainder.strip()
                default_value = None
            parameters.append(ProcedureParameter(clean_identifier(m.group(1)), param_type, default_value))
        return parameters

    def _parse_packages(self, header_text: str) -> List[str]:
        m = PACKAGES.search(header_text)
        if not m:
            return []
        span = find_balanced_span(header_text, m.end())
        if span is None:
            self.warnings.append("PACKAGES list is not closed; ignored")
            return []
        return [unquote_literal(p) for p in split_by_comma(header_text[m.end() + 1:span[1]])]


def _parse_return_type(header_text: str) -> Optional[str]:
    """``RETURNS NUMBER(38, 0)``, ``RETURNS TABLE (a INT)`` and ``RETURNS VARCHAR NOT NULL`` -> the type."""
    m = RETURNS.search(header_text)
    if not m:
        return None
    rest = header_text[m.end():]
    word = re.match(r"[^\s(]+", rest)
    if not word:
        return None
    type_name = word.group(0)
    after = word.end()
    open_pos = after + (len(rest[after:]) - len(rest[after:].lstrip()))
    if open_pos < len(rest) and rest[open_pos] == '(':
        span = find_balanced_span(rest, open_pos)
        if span:
            separator = ' ' if type_name.upper() == 'TABLE' else ''
            return f"{type_name}{separator}{rest[open_pos:span[1] + 1]}"
    return type_name


def _strip_body_delimiters(body: str) -> str:
    """Remove one layer of ``$tag$``, ``'``, ``"`` or ``/`` delimiters and trim."""
    m = DOLLAR_DELIMITER.match(body)
    if m:
        delimiter = m.group(0)
        inner = body[len(delimiter):]
        if inner.endswith(delimiter):
            inner = inner[:-len(delimiter)]
        return inner.strip()
    if len(body) >= 2 and body[0] == body[-1] and body[0] in ("'", '"', '/'):
        inner = body[1:-1]
        if body[0] == "'":
            inner = inner.replace("''", "'")
        return inner.strip()
    return body.strip()
