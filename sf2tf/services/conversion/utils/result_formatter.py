"""
Result formatting utilities for Terraform conversion.
Handles creation of standardized result dictionaries and summary data.
"""
from dataclasses import asdict
from typing import Dict, List

from sf2tf.services.ddl_parsing.models import DdlObject, Diagnostic, full_object_name
from sf2tf.services.terraform.models import Resource


def create_result_dictionary(status: str, message: str, stats: dict, results: list, output_dir: str = None,
                             source_file: str = None, **kwargs) -> dict:
    """
    Create standardized result dictionary for conversion operations.

    Args:
        status: Overall conversion status ('success', 'error', 'partial_success', 'cancelled')
        message: Human-readable status message
        stats: Conversion statistics dictionary
        results: List of individual file conversion results
        output_dir: Output directory path (optional)
        source_file: Source file path (optional)
        **kwargs: Extra top-level keys

    Returns:
        Standardized result dictionary with aggregated stats and a per resource-type summary
    """
    successful_files = len([r for r in results if r.get('status') == 'success'])
    failed_files = len([r for r in results if r.get('status') == 'error'])

    conversion_summary: Dict[str, int] = {}
    for result in results:
        for resource_type, count in result.get('resource_types', {}).items():
            conversion_summary[resource_type] = conversion_summary.get(resource_type, 0) + count

    result = {
        "status": status,
        "message": message,
        "stats": {
            **stats,
            "files_successful": successful_files,
            "files_failed": failed_files
        },
        "conversion_summary": conversion_summary,
        "results": results
    }

    if output_dir:
        result["output_directory"] = output_dir
    if source_file:
        result["source_file"] = source_file
    result.update(kwargs)

    return result


def summarize_objects(objects: List[DdlObject]) -> List[dict]:
    return [{"kind": obj.kind.value, "name": full_object_name(obj)} for obj in objects]


def summarize_resources(resources: List[Resource]) -> List[dict]:
    return [
        {"type": r.resource_type, "name": r.name, "dependencies": list(r.dependencies)}
        for r in resources
    ]


def count_resource_types(resources: List[Resource]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for resource in resources:
        counts[resource.resource_type] = counts.get(resource.resource_type, 0) + 1
    return counts


def diagnostics_to_dicts(diagnostics: List[Diagnostic]) -> List[dict]:
    return [asdict(d) for d in diagnostics]
