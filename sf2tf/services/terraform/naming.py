"""Terraform resource identifiers and schema references."""
import re
from typing import Iterable, Optional

DEFAULT_SCHEMA_SUFFIXES = ("_SANDBOX",)

_INVALID_CHARS = re.compile(r"[^A-Z0-9_]")


def normalize_identifier(name: str) -> str:
    """``my-table`` -> ``MY_TABLE``; ``1st`` -> ``_1ST``."""
    identifier = _INVALID_CHARS.sub("_", name.upper())
    if identifier[:1].isdigit():
        identifier = f"_{identifier}"
    return identifier


def schema_reference(schema: str, schema_suffixes: Optional[Iterable[str]] = None) -> str:
    """Normalised schema name with environment suffixes removed: ``rdv_sandbox`` -> ``RDV``."""
    reference = normalize_identifier(schema)
    for suffix in schema_suffixes if schema_suffixes is not None else DEFAULT_SCHEMA_SUFFIXES:
        suffix = suffix.upper()
        if suffix and reference.endswith(suffix) and len(reference) > len(suffix):
            reference = reference[:-len(suffix)]
    return reference


def generate_resource_name(name: str, schema: Optional[str] = None, prefix_schema: bool = True,
                           schema_suffixes: Optional[Iterable[str]] = None) -> str:
    """
    Deterministic resource identifier for an object.

    Args:
        name: Object name as written in the DDL.
        schema: Owning schema, if any.
        prefix_schema: Prepend the schema reference (``SALES_PRODUCTS``).
        schema_suffixes: Suffixes stripped from the schema before prefixing.
    """
    identifier = normalize_identifier(name)
    if prefix_schema and schema:
        return f"{schema_reference(schema, schema_suffixes)}_{identifier}"
    return identifier
