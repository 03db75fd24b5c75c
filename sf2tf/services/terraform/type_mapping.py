"""Snowflake column type normalisation for ``snowflake_table`` columns."""

TYPE_MAP = {
    'INT': 'NUMBER(38,0)',
    'INTEGER': 'NUMBER(38,0)',
    'BIGINT': 'NUMBER(38,0)',
    'SMALLINT': 'NUMBER(38,0)',
    'TINYINT': 'NUMBER(38,0)',
    'BYTEINT': 'NUMBER(38,0)',
    'FLOAT': 'FLOAT',
    'DOUBLE': 'FLOAT',
    'REAL': 'FLOAT',
    'TEXT': 'VARCHAR(16777216)',
    'STRING': 'VARCHAR(16777216)',
    'BOOLEAN': 'BOOLEAN',
    'BOOL': 'BOOLEAN',
    'DATE': 'DATE',
    'DATETIME': 'TIMESTAMP_NTZ(9)',
    'TIMESTAMP': 'TIMESTAMP_NTZ(9)',
    'TIME': 'TIME(9)',
    'VARIANT': 'VARIANT',
    'OBJECT': 'OBJECT',
    'ARRAY': 'ARRAY',
}

# Parameterised families kept exactly as written.
PASSTHROUGH_PREFIXES = ('VARCHAR', 'CHAR', 'NUMBER', 'NUMERIC', 'DECIMAL', 'TIMESTAMP')


def map_data_type(sql_type: str) -> str:
    """``INT`` -> ``NUMBER(38,0)``; ``VARCHAR(100)`` and unknown types unchanged."""
    return TYPE_MAP.get(sql_type.strip().upper(), sql_type)


def is_known_type(sql_type: str) -> bool:
    upper = sql_type.strip().upper()
    return upper in TYPE_MAP or upper.startswith(PASSTHROUGH_PREFIXES)
