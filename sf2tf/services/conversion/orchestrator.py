"""ConversionOrchestrator – high-level driver for Snowflake DDL → Terraform conversion.

Responsibilities
----------------
1. Convert a single SQL text (``convert_text``): parse → synthesize → render.
2. Convert a file or folder tree (``convert``):
     • locate input *.sql files (excluded directories skipped)
     • for each file: convert, write ``<name>.tf`` next to the source or
       mirrored under ``output_dir``; files without DDL objects are skipped
     • stop between files when ``should_cancel()`` returns True
3. Record statements that need a human (diagnostics, view queries sqlglot
   cannot parse) with ``ManualReviewLogger``.
4. Produce ``conversion_summary.json``.

All parsing and rendering lives in ``ddl_parsing`` and ``terraform``; the
orchestrator only handles I/O, logging and aggregation.  Naming switches come
from ``settings.yaml`` unless given explicitly.
"""

import os
import json
from pathlib import Path
from typing import Callable, Dict, List, Optional

from sf2tf.config import config
from sf2tf.services.ddl_parsing import ObjectKind, SnowflakeDdlParser
from sf2tf.services.ddl_parsing.models import DdlObject, full_object_name
from sf2tf.services.terraform import convert_to_resources, render
from sf2tf.utils.file_utils import find_sql_files, make_relative_path, read_file_content, write_file_content
from sf2tf.utils.logger import conversion_run_log, setup_logger
from .utils.manual_review_logger import ManualReviewLogger
from .utils.parser_utils import safe_parse_one
from .utils.result_formatter import (
    count_resource_types,
    create_result_dictionary,
    diagnostics_to_dicts,
    summarize_objects,
    summarize_resources,
)

SUMMARY_FILENAME = "conversion_summary.json"


class ConversionOrchestrator:

    def __init__(self, prefix_schema: Optional[bool] = None, *,
                 database_tokens: Optional[Dict[str, str]] = None,
                 schema_suffixes: Optional[List[str]] = None,
                 validate_view_sql: Optional[bool] = None,
                 exclude_dirs: Optional[List[str]] = None):
        self.logger = setup_logger("ConversionOrchestrator")
        conversion_cfg = config.get('conversion', {})

        self.prefix_schema = conversion_cfg.get('prefix_schema', True) if prefix_schema is None else prefix_schema
        self.database_tokens = database_tokens if database_tokens is not None else conversion_cfg.get('database_tokens')
        self.schema_suffixes = schema_suffixes if schema_suffixes is not None else conversion_cfg.get('schema_suffixes')
        self.validate_view_sql = (conversion_cfg.get('validate_view_sql', True)
                                  if validate_view_sql is None else validate_view_sql)
        self.exclude_dirs = exclude_dirs if exclude_dirs is not None else conversion_cfg.get('exclude_dirs')
        self.source_extension = conversion_cfg.get('source_extension', '.sql')
        self.target_extension = conversion_cfg.get('target_extension', '.tf')

        self.parser = SnowflakeDdlParser()
        self.manual_review_logger = None

    # ------------------------------------------------------------------
    # Single text
    # ------------------------------------------------------------------

    def convert_text(self, sql_text: str) -> dict:
        """
        Convert one SQL document to Terraform.

        Args:
            sql_text: Any number of Snowflake statements.

        Returns:
            Dictionary with the rendered ``terraform`` text, object and resource
            summaries, parser ``diagnostics`` and ``view_validation`` issues.
        """
        parse_result = self.parser.parse_with_diagnostics(sql_text)
        resources = convert_to_resources(
            parse_result.objects,
            prefix_schema=self.prefix_schema,
            database_tokens=self.database_tokens,
            schema_suffixes=self.schema_suffixes,
        )
        object_count = len(parse_result.objects)

        return {
            "status": "success" if object_count else "skipped",
            "message": (f"Converted {object_count} object(s) into {len(resources)} resource(s)"
                        if object_count else "No CREATE TABLE, VIEW or PROCEDURE statements found"),
            "terraform": render(resources),
            "statements": parse_result.statement_count,
            "objects": summarize_objects(parse_result.objects),
            "resources": summarize_resources(resources),
            "resource_types": count_resource_types(resources),
            "diagnostics": diagnostics_to_dicts(parse_result.diagnostics),
            "view_validation": self._validate_views(parse_result.objects),
        }

    def _validate_views(self, objects: List[DdlObject]) -> List[dict]:
        """View queries sqlglot (snowflake dialect) cannot parse."""
        if not self.validate_view_sql:
            return []
        issues = []
        for obj in objects:
            if obj.kind is not ObjectKind.VIEW:
                continue
            _, error = safe_parse_one(obj.query, "snowflake")
            if error:
                issues.append({"object_name": full_object_name(obj), "error_message": error})
        return issues

    # ------------------------------------------------------------------
    # Files and folders
    # ------------------------------------------------------------------

    def convert(self, source_path: str, output_dir: Optional[str] = None,
                should_cancel: Optional[Callable[[], bool]] = None) -> dict:
        """
        Convert every SQL file under *source_path* (a folder or a single file).

        Args:
            source_path: Folder searched recursively, or one .sql file
            output_dir: Mirror the source tree here; default writes next to each source
            should_cancel: Polled before each file; True stops the batch

        Returns:
            Result dictionary (see ``create_result_dictionary``) with per-file results,
            the summary file path and the manual review log path.
        """
        stats = {
            "files_found": 0,
            "files_converted": 0,
            "files_skipped": 0,
            "objects_converted": 0,
            "resources_written": 0,
            "cancelled": False,
        }
        if not os.path.exists(source_path):
            self.logger.warning(f"Source path not found: {source_path}")
            return create_result_dictionary("error", f"Source path not found: {source_path}", stats, [])

        sql_files = find_sql_files(source_path, self.exclude_dirs, self.source_extension)
        stats["files_found"] = len(sql_files)
        if not sql_files:
            self.logger.warning(f"No SQL files found in: {source_path}")
            return create_result_dictionary("error", f"No SQL files found in {source_path}", stats, [])

        base_dir = source_path if os.path.isdir(source_path) else os.path.dirname(os.path.abspath(source_path))
        report_dir = output_dir or base_dir
        self.manual_review_logger = ManualReviewLogger(output_dir=str(report_dir), logger=self.logger)

        with conversion_run_log(self.logger, source_path) as run_log:
            self.logger.info(f"Processing {len(sql_files)} SQL files from: {source_path}")
            if output_dir:
                self.logger.info(f"Output directory: {output_dir}")
            file_results = self._convert_files(sql_files, base_dir, output_dir, stats, should_cancel)

            summary_file = self._write_conversion_summary_to_file(stats, file_results, report_dir)
            review_log = self.manual_review_logger.write_manual_review_log()
            if review_log:
                self.logger.info(self.manual_review_logger.create_summary_report())

        failed = [r for r in file_results if r["status"] == "error"]
        if stats["cancelled"]:
            status, message = "cancelled", f"Conversion cancelled after {len(file_results)} of {len(sql_files)} files."
        elif failed:
            status, message = "partial_success", f"Conversion finished with {len(failed)} failed file(s)."
        else:
            status, message = "success", f"Conversion finished for {len(sql_files)} files."

        return create_result_dictionary(
            status, message, stats, file_results, str(report_dir),
            summary_file=summary_file,
            manual_review_log=review_log,
            run_log=run_log,
        )

    def _convert_files(self, sql_files: List[str], base_dir: str, output_dir: Optional[str],
                       stats: dict, should_cancel: Optional[Callable[[], bool]]) -> List[dict]:
        file_results: List[dict] = []
        for i, file_path in enumerate(sql_files, 1):
            if should_cancel and should_cancel():
                self.logger.warning(f"Conversion cancelled after {i - 1} of {len(sql_files)} files")
                stats["cancelled"] = True
                break

            relative_name = make_relative_path(file_path, base_dir)
            self.logger.info(f"[{i}/{len(sql_files)}] Processing: {relative_name}")
            try:
                result = self._process_file(file_path, relative_name, base_dir, output_dir)
            except Exception as e:
                self.logger.error(f"Failed to convert {relative_name}: {e}", exc_info=True)
                result = self._create_file_error_result(relative_name, e)

            self._log_file_result(result)
            file_results.append(result)
            if result["status"] == "success":
                stats["files_converted"] += 1
                stats["objects_converted"] += result["objects"]
                stats["resources_written"] += result["resources"]
            elif result["status"] == "skipped":
                stats["files_skipped"] += 1
        return file_results

    def _process_file(self, file_path: str, relative_name: str, base_dir: str, output_dir: Optional[str]) -> dict:
        content = read_file_content(file_path)
        if content is None:
            return self._create_file_skip_result(relative_name, "File is empty")

        converted = self.convert_text(content)
        self._record_review_items(relative_name, converted)

        if not converted["objects"]:
            return self._create_file_skip_result(relative_name, converted["message"], converted["diagnostics"])

        target_path = self._target_path(file_path, base_dir, output_dir)
        write_file_content(target_path, converted["terraform"])

        return {
            "file_name": relative_name,
            "status": "success",
            "message": converted["message"],
            "output_file": str(target_path),
            "objects": len(converted["objects"]),
            "resources": len(converted["resources"]),
            "resource_types": converted["resource_types"],
            "diagnostics": converted["diagnostics"],
            "errors": [],
        }

    def _record_review_items(self, relative_name: str, converted: dict) -> None:
        for diagnostic in converted["diagnostics"]:
            self.manual_review_logger.log_manual_review_item(
                file_path=relative_name,
                object_name=diagnostic["excerpt"],
                issue_type="MALFORMED_STATEMENT" if diagnostic["severity"] == "ERROR" else "PARTIAL_EXTRACTION",
                message=diagnostic["reason"],
                severity=diagnostic["severity"],
                statement_index=diagnostic["statement_index"],
            )
        for issue in converted["view_validation"]:
            self.manual_review_logger.log_manual_review_item(
                file_path=relative_name,
                object_name=issue["object_name"],
                issue_type="VIEW_SQL_UNPARSEABLE",
                message=issue["error_message"],
                object_type=ObjectKind.VIEW.value,
            )

    def _target_path(self, file_path: str, base_dir: str, output_dir: Optional[str]) -> Path:
        if output_dir:
            relative = Path(os.path.relpath(file_path, base_dir))
            return (Path(output_dir) / relative).with_suffix(self.target_extension)
        return Path(file_path).with_suffix(self.target_extension)

    def _create_file_skip_result(self, relative_name: str, message: str, diagnostics: Optional[list] = None) -> dict:
        return {
            "file_name": relative_name,
            "status": "skipped",
            "message": message,
            "output_file": None,
            "objects": 0,
            "resources": 0,
            "diagnostics": diagnostics or [],
            "errors": [],
        }

    def _create_file_error_result(self, relative_name: str, error: Exception) -> dict:
        return {
            "file_name": relative_name,
            "status": "error",
            "message": f"Error converting {relative_name}",
            "output_file": None,
            "objects": 0,
            "resources": 0,
            "diagnostics": [],
            "errors": [{
                "file_name": relative_name,
                "error_type": type(error).__name__,
                "error_message": str(error),
            }],
        }

    def _log_file_result(self, result: dict) -> None:
        if result["status"] == "success":
            self.logger.info(f"Wrote {result['resources']} resource(s) to: {result['output_file']}")
        elif result["status"] == "skipped":
            self.logger.info(f"Skipped {result['file_name']}: {result['message']}")
        else:
            self.logger.error(f"Failed {result['file_name']}: {result['errors'][0]['error_message']}")

    def _write_conversion_summary_to_file(self, stats: dict, file_results: List[dict], report_dir: str) -> str:
        summary_payload = {
            "overall_statistics": stats,
            "files": [
                {k: r.get(k) for k in ("file_name", "status", "message", "output_file", "objects", "resources")}
                for r in file_results
            ],
            "conversion_logs": [error for r in file_results for error in r.get("errors", [])],
            "output_directory": str(report_dir),
        }
        summary_path = os.path.join(report_dir, SUMMARY_FILENAME)
        write_file_content(summary_path, json.dumps(summary_payload, indent=2, ensure_ascii=False))
        self.logger.info(f"Conversion summary written to: {summary_path}")
        return summary_path
