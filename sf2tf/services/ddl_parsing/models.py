"""
Structured descriptions of the Snowflake objects recognised by the parser.

Every definition carries an explicit ``kind`` tag that is fixed when the
extractor builds it; downstream code dispatches on that tag only.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union


class ObjectKind(str, Enum):
    TABLE = "TABLE"
    VIEW = "VIEW"
    PROCEDURE = "PROCEDURE"


class ConstraintKind(str, Enum):
    PRIMARY_KEY = "PRIMARY KEY"
    FOREIGN_KEY = "FOREIGN KEY"
    UNIQUE = "UNIQUE"
    CHECK = "CHECK"


@dataclass(frozen=True)
class ColumnDefinition:
    name: str
    type: str
    nullable: bool = True
    default_value: Optional[str] = None
    comment: Optional[str] = None


@dataclass(frozen=True)
class ConstraintProperties:
    rely: bool = True
    deferrable: bool = True
    enable: bool = True


@dataclass(frozen=True)
class ConstraintDefinition:
    name: str
    kind: ConstraintKind
    columns: List[str] = field(default_factory=list)
    properties: ConstraintProperties = field(default_factory=ConstraintProperties)
    references_table: Optional[str] = None   # FOREIGN KEY target, as written
    references_columns: List[str] = field(default_factory=list)
    expression: Optional[str] = None         # CHECK body


@dataclass(frozen=True)
class ProcedureParameter:
    name: str
    type: str
    default_value: Optional[str] = None


@dataclass
class TableDefinition:
    name: str
    schema: Optional[str] = None
    database: Optional[str] = None
    columns: List[ColumnDefinition] = field(default_factory=list)
    constraints: List[ConstraintDefinition] = field(default_factory=list)
    comment: Optional[str] = None
    cluster_by: Optional[List[str]] = None
    kind: ObjectKind = field(default=ObjectKind.TABLE, init=False)


@dataclass
class ViewDefinition:
    name: str
    query: str
    schema: Optional[str] = None
    database: Optional[str] = None
    columns: Optional[List[str]] = None
    comment: Optional[str] = None
    secure: bool = False
    or_replace: bool = False
    kind: ObjectKind = field(default=ObjectKind.VIEW, init=False)


@dataclass
class ProcedureDefinition:
    name: str
    body: str
    schema: Optional[str] = None
    database: Optional[str] = None
    parameters: List[ProcedureParameter] = field(default_factory=list)
    return_type: Optional[str] = None
    comment: Optional[str] = None
    language: str = "SQL"
    execute_as: Optional[str] = None
    handler: Optional[str] = None
    runtime_version: Optional[str] = None
    packages: List[str] = field(default_factory=list)
    kind: ObjectKind = field(default=ObjectKind.PROCEDURE, init=False)


DdlObject = Union[TableDefinition, ViewDefinition, ProcedureDefinition]


def full_object_name(obj: DdlObject) -> str:
    """Return ``database.schema.name``, ``schema.name`` or ``name``."""
    if obj.database:
        return f"{obj.database}.{obj.schema or ''}.{obj.name}"
    if obj.schema:
        return f"{obj.schema}.{obj.name}"
    return obj.name


@dataclass(frozen=True)
class Diagnostic:
    """A statement the parser recognised but could not (fully) extract."""
    statement_index: int
    excerpt: str
    reason: str
    severity: str = "ERROR"


@dataclass
class ParseResult:
    objects: List[DdlObject] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    statement_count: int = 0
