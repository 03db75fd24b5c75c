"""
Fixed text substitutions applied to procedure bodies.

- longhand database names -> ``${local.databases["<KEY>"]}``
- environment suffixes removed from schema parts of qualified names
  (``DB.RDV_SANDBOX.T`` -> ``DB.RDV.T``)
"""
import re
from typing import Dict, Iterable, Optional

from .naming import DEFAULT_SCHEMA_SUFFIXES

DEFAULT_DATABASE_TOKENS: Dict[str, str] = {
    "DB_CDI_DEV_DWH": "DWH",
    "DB_CDI_DEV_STG": "STG",
    "DB_CDI_DEV_RAW": "RAW",
}


def database_lookup(key: str) -> str:
    return f'${{local.databases["{key}"]}}'


def substitute_database_tokens(body: str, database_tokens: Optional[Dict[str, str]] = None) -> str:
    tokens = DEFAULT_DATABASE_TOKENS if database_tokens is None else database_tokens
    for token, key in tokens.items():
        pattern = re.compile(rf"(?<![\w$]){re.escape(token)}(?![\w$])", re.IGNORECASE)
        replacement = database_lookup(key)
        body = pattern.sub(lambda _m: replacement, body)
    return body


def remove_schema_suffixes(body: str, schema_suffixes: Optional[Iterable[str]] = None) -> str:
    suffixes = DEFAULT_SCHEMA_SUFFIXES if schema_suffixes is None else schema_suffixes
    for suffix in suffixes:
        if not suffix:
            continue
        # Only the schema part of a dotted name: the suffix ends a word and a dot follows.
        body = re.sub(rf"(?<=\w){re.escape(suffix)}(?=\"?\.)", "", body, flags=re.IGNORECASE)
    return body


def apply_body_substitutions(body: str, database_tokens: Optional[Dict[str, str]] = None,
                             schema_suffixes: Optional[Iterable[str]] = None) -> str:
    return remove_schema_suffixes(substitute_database_tokens(body, database_tokens), schema_suffixes)
