from sf2tf.services.ddl_parsing import ConstraintKind, ObjectKind, parse, parse_with_diagnostics


def test_simple_table_columns_and_nullability():
    objects = parse("CREATE TABLE t (id NUMBER(38,0) NOT NULL, name VARCHAR(50));")
    assert len(objects) == 1
    table = objects[0]
    assert table.kind is ObjectKind.TABLE
    assert table.name == "t"
    assert table.schema is None and table.database is None
    assert [(c.name, c.type, c.nullable) for c in table.columns] == [
        ("id", "NUMBER(38,0)", False),
        ("name", "VARCHAR(50)", True),
    ]


def test_full_table_definition(products_sql):
    table = parse(products_sql)[0]
    assert (table.database, table.schema, table.name) == ("DB", "SALES", "PRODUCTS")
    assert table.comment == "Products catalog"
    assert table.cluster_by == ["name", "price"]

    columns = {c.name: c for c in table.columns}
    assert list(columns) == ["id", "name", "price", "created_at", "status"]
    assert columns["name"].comment == "Product display name"
    assert columns["price"].type == "DECIMAL(10, 2)"
    assert columns["price"].default_value == "0"
    assert columns["created_at"].type == "TIMESTAMP WITH TIME ZONE"
    assert columns["created_at"].default_value == "CURRENT_TIMESTAMP()"
    assert columns["status"].default_value == "'active'"


def test_inline_and_named_constraints(products_sql):
    table = parse(products_sql)[0]
    pk, fk = table.constraints
    assert pk.name == "PK_PRODUCTS"
    assert pk.kind is ConstraintKind.PRIMARY_KEY
    assert pk.columns == ["id"]

    assert fk.name == "fk_cat"
    assert fk.kind is ConstraintKind.FOREIGN_KEY
    assert fk.columns == ["category_id"]
    assert fk.references_table == "DB.SALES.CATEGORIES"
    assert fk.references_columns == ["id"]
    assert fk.properties.rely is False
    assert fk.properties.deferrable is True
    assert fk.properties.enable is True


def test_unnamed_constraints_get_unique_names():
    table = parse("CREATE TABLE t (a INT UNIQUE, b INT UNIQUE, PRIMARY KEY (a))")[0]
    assert [(c.name, c.kind) for c in table.constraints] == [
        ("UQ_T", ConstraintKind.UNIQUE),
        ("UQ_T_2", ConstraintKind.UNIQUE),
        ("PK_T", ConstraintKind.PRIMARY_KEY),
    ]


def test_check_constraint_keeps_expression():
    table = parse("CREATE TABLE t (a INT, CONSTRAINT ck_a CHECK (a > 0) NOT DEFERRABLE DISABLE)")[0]
    check = table.constraints[0]
    assert check.kind is ConstraintKind.CHECK
    assert check.expression == "a > 0"
    assert check.columns == []
    assert check.properties.deferrable is False
    assert check.properties.enable is False


def test_quoted_identifiers_are_unquoted():
    table = parse('CREATE TABLE "My DB"."S"."T 1" ("col one" INT)')[0]
    assert (table.database, table.schema, table.name) == ("My DB", "S", "T 1")
    assert table.columns[0].name == "col one"


def test_comments_inside_column_list_are_ignored():
    table = parse("CREATE TABLE t ( -- ids\n id INT, /* x, y */ name STRING )")[0]
    assert [c.name for c in table.columns] == ["id", "name"]


def test_ctas_is_reported_not_extracted():
    result = parse_with_diagnostics("CREATE TABLE t2 AS SELECT * FROM t")
    assert result.objects == []
    assert len(result.diagnostics) == 1
    assert result.diagnostics[0].severity == "ERROR"
    assert "no column list" in result.diagnostics[0].reason


def test_column_without_type_is_skipped_with_warning():
    result = parse_with_diagnostics("CREATE TABLE t (id, name VARCHAR)")
    table = result.objects[0]
    assert [c.name for c in table.columns] == ["name"]
    assert [d.severity for d in result.diagnostics] == ["WARNING"]


def test_empty_column_list_gives_table_without_columns():
    table = parse("CREATE TABLE e ()")[0]
    assert table.columns == []
    assert table.constraints == []
