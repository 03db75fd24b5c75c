from sf2tf.services.ddl_parsing import ObjectKind, SnowflakeDdlParser, parse, parse_with_diagnostics
from sf2tf.services.ddl_parsing.parser import make_excerpt

SCRIPT = """
-- setup
USE DATABASE DB;
CREATE TABLE a (id INT);
INSERT INTO a VALUES (1);
CREATE VIEW v AS SELECT * FROM a;
CREATE PROCEDURE p() RETURNS INT AS $$ SELECT 1; $$;
GRANT SELECT ON a TO ROLE r;
"""


def test_non_ddl_statements_are_ignored():
    assert parse("SELECT * FROM t;") == []
    result = parse_with_diagnostics("SELECT * FROM t;")
    assert result.diagnostics == []
    assert result.statement_count == 1


def test_objects_keep_source_order_and_kind():
    result = parse_with_diagnostics(SCRIPT)
    assert [(o.kind, o.name) for o in result.objects] == [
        (ObjectKind.TABLE, "a"),
        (ObjectKind.VIEW, "v"),
        (ObjectKind.PROCEDURE, "p"),
    ]
    assert result.statement_count == 6


def test_malformed_statement_does_not_stop_the_script():
    result = parse_with_diagnostics("CREATE TABLE bad AS SELECT 1; CREATE TABLE ok (id INT);")
    assert [o.name for o in result.objects] == ["ok"]
    assert len(result.diagnostics) == 1
    assert result.diagnostics[0].statement_index == 0
    assert result.diagnostics[0].excerpt == "CREATE TABLE bad AS SELECT 1"


def test_parser_instance_is_reusable():
    parser = SnowflakeDdlParser()
    first = parser.parse(SCRIPT)
    second = parser.parse(SCRIPT)
    assert first == second


def test_crlf_and_bom_input():
    objects = parse("\ufeffCREATE TABLE t (\r\n  id INT\r\n);\r\n")
    assert objects[0].columns[0].name == "id"


def test_make_excerpt_flattens_and_truncates():
    assert make_excerpt("CREATE  TABLE\n t") == "CREATE TABLE t"
    excerpt = make_excerpt("x" * 100)
    assert len(excerpt) == 80
    assert excerpt.endswith("...")
