"""Terraform (HCL) synthesis for parsed Snowflake DDL objects."""
from typing import Dict, Iterable, List, Optional

from sf2tf.services.ddl_parsing.models import DdlObject
from .dependencies import DependencyAnalyzer
from .models import Resource
from .renderer import render
from .synthesizer import TerraformSynthesizer


def convert_to_resources(objects: List[DdlObject], prefix_schema: bool = True,
                         database_tokens: Optional[Dict[str, str]] = None,
                         schema_suffixes: Optional[Iterable[str]] = None) -> List[Resource]:
    """
    Synthesize resources for *objects* and add their dependencies.

    Order follows the input; each table is followed by its constraint
    resources.
    """
    synthesizer = TerraformSynthesizer(prefix_schema, database_tokens, schema_suffixes)
    synthesized = [(obj, synthesizer.synthesize(obj)) for obj in objects]
    DependencyAnalyzer(prefix_schema, schema_suffixes).apply(synthesized)
    return [resource for _, resources in synthesized for resource in resources]


__all__ = ["convert_to_resources", "render", "Resource", "TerraformSynthesizer", "DependencyAnalyzer"]
