from sf2tf.services.terraform.substitutions import (
    apply_body_substitutions,
    remove_schema_suffixes,
    substitute_database_tokens,
)


def test_database_token_and_schema_suffix():
    body = "SELECT * FROM DB_CDI_DEV_DWH.RDV_SANDBOX.T"
    assert apply_body_substitutions(body) == 'SELECT * FROM ${local.databases["DWH"]}.RDV.T'


def test_database_token_is_case_insensitive_and_whole_word():
    assert substitute_database_tokens("db_cdi_dev_stg.x") == '${local.databases["STG"]}.x'
    assert substitute_database_tokens("DB_CDI_DEV_DWH2.X") == "DB_CDI_DEV_DWH2.X"


def test_custom_database_tokens():
    assert substitute_database_tokens("PROD_DB.S.T", {"PROD_DB": "MAIN"}) == '${local.databases["MAIN"]}.S.T'


def test_suffix_only_removed_from_qualified_names():
    assert remove_schema_suffixes("SELECT 'RDV_SANDBOX' FROM RDV_SANDBOX.T") == "SELECT 'RDV_SANDBOX' FROM RDV.T"
    assert remove_schema_suffixes('FROM "RDV_SANDBOX".T') == 'FROM "RDV".T'
