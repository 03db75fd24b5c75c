import json

import pytest

import sf2tf.services.conversion.orchestrator as orchestrator_module
from sf2tf.config import config
from sf2tf.services.conversion import ConversionOrchestrator


@pytest.fixture
def source_tree(tmp_path):
    src = tmp_path / "src"
    (src / "sub").mkdir(parents=True)
    (src / ".git").mkdir()
    (src / "a.sql").write_text("CREATE TABLE a (id INT);\n", encoding="utf-8")
    (src / "empty.sql").write_text("SELECT 1;\n", encoding="utf-8")
    (src / "sub" / "b.sql").write_text("CREATE VIEW v AS SELECT * FROM a;\n", encoding="utf-8")
    (src / ".git" / "ignored.sql").write_text("CREATE TABLE x (id INT);\n", encoding="utf-8")
    return src


def test_convert_text_result_shape():
    result = ConversionOrchestrator().convert_text("CREATE TABLE t (id INT);")
    assert result["status"] == "success"
    assert result["objects"] == [{"kind": "TABLE", "name": "t"}]
    assert result["resources"] == [{"type": "snowflake_table", "name": "T", "dependencies": []}]
    assert result["resource_types"] == {"snowflake_table": 1}
    assert result["diagnostics"] == []
    assert result["view_validation"] == []
    assert result["terraform"].startswith('resource "snowflake_table" "T" {')


def test_convert_text_without_ddl_is_skipped():
    result = ConversionOrchestrator().convert_text("SELECT 1;")
    assert result["status"] == "skipped"
    assert result["terraform"] == ""


def test_prefix_schema_override():
    result = ConversionOrchestrator(prefix_schema=False).convert_text("CREATE TABLE s.t (id INT);")
    assert 'resource "snowflake_table" "T"' in result["terraform"]


def test_unparseable_view_query_is_reported(monkeypatch):
    monkeypatch.setattr(orchestrator_module, "safe_parse_one", lambda sql, dialect: (None, "boom"))
    result = ConversionOrchestrator().convert_text("CREATE VIEW v AS SELECT 1;")
    assert result["view_validation"] == [{"object_name": "v", "error_message": "boom"}]


def test_view_validation_can_be_disabled(monkeypatch):
    monkeypatch.setattr(orchestrator_module, "safe_parse_one", lambda sql, dialect: (None, "boom"))
    result = ConversionOrchestrator(validate_view_sql=False).convert_text("CREATE VIEW v AS SELECT 1;")
    assert result["view_validation"] == []


def test_folder_conversion_writes_next_to_sources(source_tree):
    result = ConversionOrchestrator().convert(str(source_tree))

    assert result["status"] == "success"
    assert result["stats"]["files_found"] == 3
    assert result["stats"]["files_converted"] == 2
    assert result["stats"]["files_skipped"] == 1
    assert result["conversion_summary"] == {"snowflake_table": 1, "snowflake_view": 1}

    assert (source_tree / "a.tf").read_text(encoding="utf-8").startswith('resource "snowflake_table" "A"')
    view_hcl = (source_tree / "sub" / "b.tf").read_text(encoding="utf-8")
    assert "depends_on = [snowflake_table.A]" in view_hcl
    assert not (source_tree / "empty.tf").exists()
    assert not (source_tree / ".git" / "ignored.tf").exists()

    summary = json.loads((source_tree / "conversion_summary.json").read_text(encoding="utf-8"))
    assert summary["overall_statistics"]["files_converted"] == 2
    assert [f["status"] for f in summary["files"]] == ["success", "skipped", "success"]
    assert result["manual_review_log"] is None


def test_output_dir_mirrors_source_tree(source_tree, tmp_path):
    out = tmp_path / "out"
    result = ConversionOrchestrator().convert(str(source_tree), output_dir=str(out))
    assert (out / "a.tf").exists()
    assert (out / "sub" / "b.tf").exists()
    assert not (source_tree / "a.tf").exists()
    assert result["summary_file"] == str(out / "conversion_summary.json")
    assert result["output_directory"] == str(out)


def test_single_file_conversion(tmp_path):
    sql_file = tmp_path / "one.sql"
    sql_file.write_text("CREATE TABLE t (id INT);", encoding="utf-8")
    result = ConversionOrchestrator().convert(str(sql_file))
    assert result["status"] == "success"
    assert (tmp_path / "one.tf").exists()


def test_cancellation_between_files(source_tree):
    calls = []

    def should_cancel():
        calls.append(1)
        return len(calls) > 1

    result = ConversionOrchestrator().convert(str(source_tree), should_cancel=should_cancel)
    assert result["status"] == "cancelled"
    assert result["stats"]["cancelled"] is True
    assert result["stats"]["files_converted"] == 1
    assert len(result["results"]) == 1


def test_malformed_statement_goes_to_manual_review(tmp_path):
    (tmp_path / "mixed.sql").write_text("CREATE TABLE bad AS SELECT 1;\nCREATE TABLE ok (id INT);", encoding="utf-8")
    result = ConversionOrchestrator().convert(str(tmp_path))

    assert result["status"] == "success"
    assert result["results"][0]["objects"] == 1
    review = json.loads(open(result["manual_review_log"], encoding="utf-8").read())
    assert review["total_items_requiring_review"] == 1
    item = review["review_items"][0]
    assert item["issue_type"] == "MALFORMED_STATEMENT"
    assert item["severity"] == "ERROR"
    assert item["statement_index"] == 0


def test_failing_file_does_not_stop_the_batch(source_tree, monkeypatch):
    original = orchestrator_module.read_file_content

    def read(path):
        if path.endswith("a.sql"):
            raise OSError("disk error")
        return original(path)

    monkeypatch.setattr(orchestrator_module, "read_file_content", read)
    result = ConversionOrchestrator().convert(str(source_tree))

    assert result["status"] == "partial_success"
    assert result["stats"]["files_failed"] == 1
    assert result["stats"]["files_converted"] == 1
    failed = result["results"][0]
    assert failed["errors"][0]["error_type"] == "OSError"
    summary = json.loads((source_tree / "conversion_summary.json").read_text(encoding="utf-8"))
    assert summary["conversion_logs"][0]["error_message"] == "disk error"


def test_missing_source_path(tmp_path):
    result = ConversionOrchestrator().convert(str(tmp_path / "nope"))
    assert result["status"] == "error"
    assert result["results"] == []


def test_folder_without_sql_files(tmp_path):
    result = ConversionOrchestrator().convert(str(tmp_path))
    assert result["status"] == "error"


def test_folder_conversion_writes_a_run_log(source_tree, tmp_path, monkeypatch):
    monkeypatch.setitem(config["base_dirs"], "logs", str(tmp_path / "logs"))
    result = ConversionOrchestrator().convert(str(source_tree))

    run_log = result["run_log"]
    assert run_log.startswith(str(tmp_path / "logs" / "conversion_runs" / "src_"))
    text = open(run_log, encoding="utf-8").read()
    assert "Processing 3 SQL files" in text
    assert "Conversion summary written to" in text
