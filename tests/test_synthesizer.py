import pytest

from sf2tf.services.ddl_parsing import parse
from sf2tf.services.terraform import TerraformSynthesizer, convert_to_resources


def synthesize(sql, **kwargs):
    synthesizer = TerraformSynthesizer(**kwargs)
    return [resource for obj in parse(sql) for resource in synthesizer.synthesize(obj)]


def test_simple_table_block():
    (table,) = synthesize("CREATE TABLE t (id NUMBER(38,0) NOT NULL, name VARCHAR(50));")
    assert table.address == "snowflake_table.T"
    assert table.content == (
        'resource "snowflake_table" "T" {\n'
        '  name = "t"\n'
        '\n'
        '  column {\n'
        '    name = "id"\n'
        '    type = "NUMBER(38,0)"\n'
        '    nullable = false\n'
        '  }\n'
        '\n'
        '  column {\n'
        '    name = "name"\n'
        '    type = "VARCHAR(50)"\n'
        '  }\n'
        '}'
    )


def test_table_attributes_and_column_details(products_sql):
    table = synthesize(products_sql)[0]
    assert table.name == "SALES_PRODUCTS"
    content = table.content
    assert '  name = "PRODUCTS"' in content
    assert "  database = local.databases[var.DATABASE]" in content
    assert "  schema = snowflake_schema.SALES.name" in content
    assert '  comment = "Products catalog"' in content
    assert '  cluster_by = ["name", "price"]' in content
    assert '    type = "NUMBER(38,0)"' in content
    assert '    type = "DECIMAL(10, 2)"' in content
    assert '    type = "TIMESTAMP WITH TIME ZONE"' in content
    assert "      constant = 0" in content
    assert '      expression = "CURRENT_TIMESTAMP()"' in content
    assert "      expression = \"\\'active\\'\"" in content
    assert '    comment = "Product display name"' in content


def test_boolean_constant_defaults_are_lower_case():
    (table,) = synthesize("CREATE TABLE t (f BOOLEAN DEFAULT TRUE, g BOOLEAN DEFAULT false);")
    assert "      constant = true" in table.content
    assert "      constant = false" in table.content
    assert "TRUE" not in table.content


def test_constraint_resources_follow_their_table(products_sql):
    table, pk, fk = synthesize(products_sql)
    assert pk.address == "snowflake_table_constraint.SALES_PK_PRODUCTS"
    assert '  type = "PRIMARY KEY"' in pk.content
    assert "  table_id = snowflake_table.SALES_PRODUCTS.qualified_name" in pk.content
    assert '  columns = ["id"]' in pk.content
    assert pk.dependencies == ["snowflake_table.SALES_PRODUCTS"]
    assert pk.content.endswith("\n\n  depends_on = [snowflake_table.SALES_PRODUCTS]\n}")

    assert fk.name == "SALES_FK_CAT"
    assert "  rely = false" in fk.content
    assert "  deferrable = true" in fk.content
    assert '      table_id = "DB.SALES.CATEGORIES"' in fk.content
    assert '      columns = ["id"]' in fk.content


def test_check_constraint_rendered_as_comment():
    _, check = synthesize("CREATE TABLE t (a INT, CONSTRAINT ck_a CHECK (a >\n 0))")
    assert '  type = "CHECK"' in check.content
    assert "  # check: a > 0" in check.content
    assert "columns =" not in check.content


def test_prefix_schema_off():
    table = synthesize("CREATE TABLE SALES.PRODUCTS (id INT)", prefix_schema=False)[0]
    assert table.name == "PRODUCTS"
    assert "  schema = snowflake_schema.SALES.name" in table.content


def test_sandbox_schema_is_normalised():
    table = synthesize("CREATE TABLE RDV_SANDBOX.TEST_TABLE (id INT)")[0]
    assert table.name == "RDV_TEST_TABLE"
    assert "  schema = snowflake_schema.RDV.name" in table.content


def test_view_block(active_users_sql):
    (view,) = synthesize(active_users_sql)
    assert view.address == "snowflake_view.PUBLIC_ACTIVE_USERS"
    assert '  comment = "View of active users only"' in view.content
    assert "  is_secure = true" in view.content
    assert "  or_replace = true" in view.content
    assert view.content.endswith(
        "  statement = <<-EOT\n"
        "    -- keep me\n"
        "    SELECT id, name FROM users WHERE active = TRUE;\n"
        "  EOT\n"
        "}"
    )


def test_view_column_blocks():
    (view,) = synthesize("CREATE VIEW v (a, b) AS SELECT 1, 2")
    assert '  column {\n    column_name = "a"\n  }' in view.content
    assert '  column {\n    column_name = "b"\n  }' in view.content


def test_sql_procedure_block():
    (proc,) = synthesize("CREATE PROCEDURE p(x NUMBER DEFAULT 1) RETURNS STRING LANGUAGE SQL AS $$ SELECT 1; $$;")
    assert proc.address == "snowflake_procedure.P"
    content = proc.content
    assert '  language = "SQL"' in content
    assert '  return_type = "STRING"' in content
    assert '  arguments {\n    name = "x"\n    type = "NUMBER"\n    default_value = "1"\n  }' in content
    assert "  statement = <<-EOT\n    SELECT 1;\n  EOT" in content
    assert "$$" not in content
    assert "execute_as" not in content


def test_javascript_procedure_block(update_status_sql):
    (proc,) = synthesize(update_status_sql)
    assert proc.address == "snowflake_procedure_javascript.ADMIN_UPDATE_STATUS"
    content = proc.content
    assert "language =" not in content
    assert '  execute_as = "CALLER"' in content
    assert '    arg_name = "user_id"' in content
    assert '    arg_data_type = "NUMBER(38, 0)"' in content
    assert '    arg_default_value = "TRUE"' in content
    assert '  procedure_definition = <<-EOT\n    var x = 1;\n    return "ok";\n  EOT' in content


def test_scripting_procedure_defaults_to_owner():
    (proc,) = synthesize("CREATE PROCEDURE p() RETURNS STRING LANGUAGE JAVASCRIPT AS $$ return 1; $$")
    assert '  execute_as = "OWNER"' in proc.content


def test_python_procedure_options(python_proc_sql):
    (proc,) = synthesize(python_proc_sql)
    assert proc.resource_type == "snowflake_procedure_python"
    assert '  return_type = "TABLE (id NUMBER, name VARCHAR)"' in proc.content
    assert '  runtime_version = "3.11"' in proc.content
    assert '  packages = ["snowflake-snowpark-python", "pandas"]' in proc.content
    assert '  handler = "run"' in proc.content


def test_procedure_body_substitutions_after_template_escaping():
    sql = (
        "CREATE PROCEDURE ETL.LOAD() RETURNS STRING AS $$\n"
        "INSERT INTO DB_CDI_DEV_STG.RAW_SANDBOX.EVENTS SELECT '${keep}';\n"
        "$$"
    )
    (proc,) = synthesize(sql)
    assert 'INSERT INTO ${local.databases["STG"]}.RAW.EVENTS' in proc.content
    assert "'$${keep}'" in proc.content


def test_unknown_kind_raises():
    class Other:
        kind = "SEQUENCE"

    with pytest.raises(ValueError):
        TerraformSynthesizer().synthesize(Other())


def test_convert_to_resources_keeps_declaration_order(products_sql, active_users_sql):
    resources = convert_to_resources(parse(active_users_sql + ";" + products_sql))
    assert [r.resource_type for r in resources] == [
        "snowflake_view",
        "snowflake_table",
        "snowflake_table_constraint",
        "snowflake_table_constraint",
    ]
