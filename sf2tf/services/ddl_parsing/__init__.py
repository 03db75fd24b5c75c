"""Snowflake DDL parsing: scanner, extractors and the object model."""
from typing import List

from .models import (
    ColumnDefinition,
    ConstraintDefinition,
    ConstraintKind,
    ConstraintProperties,
    DdlObject,
    Diagnostic,
    ObjectKind,
    ParseResult,
    ProcedureDefinition,
    ProcedureParameter,
    TableDefinition,
    ViewDefinition,
    full_object_name,
)
from .parser import SnowflakeDdlParser


def parse(sql: str) -> List[DdlObject]:
    """Parse a Snowflake script into table, view and procedure definitions."""
    return SnowflakeDdlParser().parse(sql)


def parse_with_diagnostics(sql: str) -> ParseResult:
    return SnowflakeDdlParser().parse_with_diagnostics(sql)


__all__ = [
    "parse",
    "parse_with_diagnostics",
    "SnowflakeDdlParser",
    "ColumnDefinition",
    "ConstraintDefinition",
    "ConstraintKind",
    "ConstraintProperties",
    "DdlObject",
    "Diagnostic",
    "ObjectKind",
    "ParseResult",
    "ProcedureDefinition",
    "ProcedureParameter",
    "TableDefinition",
    "ViewDefinition",
    "full_object_name",
]
