import pytest

from sf2tf.services.terraform.naming import generate_resource_name, normalize_identifier, schema_reference


@pytest.mark.parametrize(
    "name, schema, prefix_schema, expected",
    [
        ("products", "SALES", True, "SALES_PRODUCTS"),
        ("products", "SALES", False, "PRODUCTS"),
        ("products", None, True, "PRODUCTS"),
        ("test_table", "RDV_SANDBOX", True, "RDV_TEST_TABLE"),
        ("my-table", "raw", True, "RAW_MY_TABLE"),
    ],
)
def test_generate_resource_name(name, schema, prefix_schema, expected):
    assert generate_resource_name(name, schema, prefix_schema) == expected


def test_normalize_identifier_leading_digit():
    assert normalize_identifier("1st-table") == "_1ST_TABLE"


def test_schema_reference_strips_suffix_but_not_whole_name():
    assert schema_reference("rdv_sandbox") == "RDV"
    assert schema_reference("_SANDBOX") == "_SANDBOX"
    assert schema_reference("STAGE_DEV", ["_DEV"]) == "STAGE"
    assert schema_reference("RDV_SANDBOX", []) == "RDV_SANDBOX"
