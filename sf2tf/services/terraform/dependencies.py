"""
DependencyAnalyzer – adds ``depends_on`` to synthesized resources.

Object map
----------
Every object is registered under its full name (``db.schema.name``,
``schema.name`` or ``name``) in declaration order.  A reference matches an
entry when it equals the full name or its trailing parts (``t`` and
``s.t`` both match ``db.s.t``).  When several entries match, the first
declared one wins.

Views
-----
The query is scanned for ``FROM <ref>`` / ``JOIN <ref>`` (1-3 part chain,
optionally behind a ``${...}.`` database token).  Only references in the
view's own schema are kept (unqualified references count as the view's
schema; ``_SANDBOX``-style suffixes are ignored on both sides).  Unknown
references still become dependencies: ``VW_*`` names are assumed to be views,
everything else tables.

Skipped: CTE names, table functions (``ref(``), ``FROM`` inside a
non-subquery parenthesis (``EXTRACT(YEAR FROM d)``), ``IS [NOT] DISTINCT
FROM`` and references to the view itself.

Procedures
----------
The body is scanned for ``FROM``, ``UPDATE``, ``INTO`` and ``DELETE FROM``
references; only objects declared in the same document are kept.

Foreign keys
------------
A foreign-key constraint also depends on the referenced table when that
table is declared in the same document.
"""
import re
from typing import Iterable, List, Optional, Sequence, Tuple

from sf2tf.services.ddl_parsing.models import (
    ConstraintKind,
    DdlObject,
    ObjectKind,
    ProcedureDefinition,
    TableDefinition,
    ViewDefinition,
    full_object_name,
)
from sf2tf.services.ddl_parsing.scanner import LexState, scan_regions
from sf2tf.utils.logger import setup_logger
from .models import Resource
from .naming import generate_resource_name, schema_reference

# All patterns run on upper-cased text with double quotes removed.
_CHAIN = r"[A-Z_][A-Z0-9_$]*(?:\.[A-Z_][A-Z0-9_$]*){0,2}"
_TOKEN_PREFIX = r"(?:\$\{[^}]*\}\.)?"
VIEW_REFERENCE = re.compile(rf"\b(?:FROM|JOIN)\s+{_TOKEN_PREFIX}({_CHAIN})(\s*\()?")
PROCEDURE_REFERENCE = re.compile(rf"\b(DELETE\s+FROM|FROM|UPDATE|INTO)\s+{_TOKEN_PREFIX}({_CHAIN})(\s*\()?")
CTE_NAME = re.compile(r"(?:\bWITH\s+(?:RECURSIVE\s+)?|,\s*)([A-Z_][A-Z0-9_$]*)\s+AS\s*\(")
DISTINCT_FROM_BEFORE = re.compile(r"\bIS\s+(?:NOT\s+)?DISTINCT\s*$")
SUBQUERY_START = re.compile(r"\s*(?:SELECT|WITH)\b")

# Words that can follow FROM/JOIN without naming an object.
NON_OBJECT_WORDS = frozenset({"LATERAL", "TABLE", "SELECT", "VALUES", "IDENTIFIER", "DUAL"})

VIEW_PREFIX = "VW_"

KnownObject = Tuple[str, DdlObject, Resource]


def matches_reference(full_name: str, reference: str) -> bool:
    """Exact or trailing-parts match, case-insensitive."""
    full_parts = full_name.lower().split(".")
    ref_parts = reference.lower().split(".")
    if len(ref_parts) > len(full_parts):
        return False
    return full_parts[-len(ref_parts):] == ref_parts


def scan_text_for_references(sql: str) -> str:
    """Upper-cased code of *sql*: comments and string literals blanked, identifier quotes removed."""
    parts = []
    for region in scan_regions(sql):
        text = sql[region.start:region.end]
        if region.state is LexState.NORMAL:
            parts.append(text)
        elif region.state is LexState.DOUBLE_QUOTE:
            parts.append(text.replace('"', ''))
        else:
            parts.append(' ')
    return ''.join(parts).upper()


def _inside_non_subquery_parenthesis(text: str, pos: int) -> bool:
    """True when *pos* sits inside parentheses that do not open a subquery."""
    depth = 0
    for k in range(pos - 1, -1, -1):
        ch = text[k]
        if ch == ')':
            depth += 1
        elif ch == '(':
            if depth == 0:
                return not SUBQUERY_START.match(text, k + 1)
            depth -= 1
    return False


class DependencyAnalyzer:

    def __init__(self, prefix_schema: bool = True, schema_suffixes: Optional[Iterable[str]] = None):
        self.logger = setup_logger('DependencyAnalyzer')
        self.prefix_schema = prefix_schema
        self.schema_suffixes = list(schema_suffixes) if schema_suffixes is not None else None

    def apply(self, synthesized: Sequence[Tuple[DdlObject, List[Resource]]]) -> None:
        """
        Add dependencies to the resources in place.

        Args:
            synthesized: ``(object, resources)`` pairs in declaration order; the
                object's own resource is the first of its list, a table's
                constraint resources follow in constraint order.
        """
        known: List[KnownObject] = [(full_object_name(obj), obj, resources[0])
                                    for obj, resources in synthesized if resources]

        for obj, resources in synthesized:
            if not resources:
                continue
            if obj.kind is ObjectKind.VIEW:
                references = self.view_dependencies(obj, known)
            elif obj.kind is ObjectKind.PROCEDURE:
                references = self.procedure_dependencies(obj, known)
            else:
                self._foreign_key_dependencies(obj, resources, known)
                continue
            if references:
                self.logger.debug(f"{resources[0].address} depends on {', '.join(references)}")
                resources[0].add_dependencies(references)

    # ------------------------------------------------------------------

    def _resolve(self, reference: str, known: List[KnownObject],
                 kinds: Tuple[ObjectKind, ...] = (ObjectKind.TABLE, ObjectKind.VIEW)) -> Optional[KnownObject]:
        for entry in known:
            full_name, obj, _ = entry
            if obj.kind in kinds and matches_reference(full_name, reference):
                return entry
        return None

    def _normalized_schema(self, schema: Optional[str]) -> Optional[str]:
        return schema_reference(schema, self.schema_suffixes) if schema else None

    def view_dependencies(self, view: ViewDefinition, known: List[KnownObject]) -> List[str]:
        text = scan_text_for_references(view.query)
        cte_names = set(CTE_NAME.findall(text))
        view_schema = self._normalized_schema(view.schema)
        references = []

        for m in VIEW_REFERENCE.finditer(text):
            reference, call = m.group(1), m.group(2)
            parts = reference.split(".")
            if call or parts[-1] in NON_OBJECT_WORDS:
                continue
            if len(parts) == 1 and reference in cte_names:
                continue
            if DISTINCT_FROM_BEFORE.search(text, 0, m.start()):
                continue
            if _inside_non_subquery_parenthesis(text, m.start()):
                continue

            ref_schema = parts[-2] if len(parts) >= 2 else None
            if (self._normalized_schema(ref_schema) if ref_schema else view_schema) != view_schema:
                continue

            entry = self._resolve(reference, known)
            if entry:
                _, obj, resource = entry
                if obj is view:
                    continue
                references.append(resource.address)
            else:
                references.append(self._inferred_address(parts[-1], ref_schema or view.schema))

        return sorted(set(references))

    def _inferred_address(self, name: str, schema: Optional[str]) -> str:
        resource_type = "snowflake_view" if name.startswith(VIEW_PREFIX) else "snowflake_table"
        return f"{resource_type}.{generate_resource_name(name, schema, self.prefix_schema, self.schema_suffixes)}"

    def procedure_dependencies(self, procedure: ProcedureDefinition, known: List[KnownObject]) -> List[str]:
        text = procedure.body.upper().replace('"', '')
        references = []
        for m in PROCEDURE_REFERENCE.finditer(text):
            # A parenthesis after INTO or UPDATE is a column list, after FROM a table function.
            if m.group(3) and m.group(1) == "FROM":
                continue
            entry = self._resolve(m.group(2), known)
            if entry:
                references.append(entry[2].address)
        return sorted(set(references))

    def _foreign_key_dependencies(self, table: TableDefinition, resources: List[Resource],
                                  known: List[KnownObject]) -> None:
        for constraint, resource in zip(table.constraints, resources[1:]):
            if constraint.kind is not ConstraintKind.FOREIGN_KEY or not constraint.references_table:
                continue
            entry = self._resolve(constraint.references_table, known, (ObjectKind.TABLE,))
            if entry and entry[1] is not table:
                resource.add_dependencies([entry[2].address])
