"""
TerraformSynthesizer – renders one DDL object into Snowflake provider resources.

    TableDefinition      -> snowflake_table + one snowflake_table_constraint per constraint
    ViewDefinition       -> snowflake_view
    ProcedureDefinition  -> snowflake_procedure (SQL) or snowflake_procedure_<language>

Blocks are built line by line; attribute values that come from the DDL are
always escaped with ``escape_string`` and bodies go into ``<<-EOT`` heredocs.
Dependencies between objects are added afterwards by the DependencyAnalyzer;
the only dependency known here is a constraint's own table.
"""
from typing import Dict, Iterable, List, Optional

from sf2tf.services.ddl_parsing.models import (
    ColumnDefinition,
    ConstraintDefinition,
    ConstraintKind,
    DdlObject,
    ObjectKind,
    ProcedureDefinition,
    TableDefinition,
    ViewDefinition,
)
from sf2tf.utils.logger import setup_logger
from .escaping import escape_template_sequences, hcl_constant, heredoc_attribute, is_constant_default, quote
from .models import Resource
from .naming import generate_resource_name, schema_reference
from .substitutions import apply_body_substitutions
from .type_mapping import is_known_type, map_data_type

SCRIPTING_LANGUAGES = ("JAVASCRIPT", "PYTHON", "JAVA", "SCALA")
DEFAULT_EXECUTE_AS = "OWNER"


def _bool(value: bool) -> str:
    return "true" if value else "false"


def _string_list(values: Iterable[str]) -> str:
    return f"[{', '.join(quote(v) for v in values)}]"


class TerraformSynthesizer:

    def __init__(self, prefix_schema: bool = True, database_tokens: Optional[Dict[str, str]] = None,
                 schema_suffixes: Optional[Iterable[str]] = None):
        self.logger = setup_logger('TerraformSynthesizer')
        self.prefix_schema = prefix_schema
        self.database_tokens = database_tokens
        self.schema_suffixes = list(schema_suffixes) if schema_suffixes is not None else None

    def synthesize(self, obj: DdlObject) -> List[Resource]:
        """
        Build the resources of one object; the object's own resource comes first.

        Raises:
            ValueError: for an object kind without a renderer.
        """
        if obj.kind is ObjectKind.TABLE:
            return self._table_resources(obj)
        if obj.kind is ObjectKind.VIEW:
            return [self._view_resource(obj)]
        if obj.kind is ObjectKind.PROCEDURE:
            return [self._procedure_resource(obj)]
        raise ValueError(f"Unsupported object kind: {obj.kind}")

    def resource_name(self, name: str, schema: Optional[str]) -> str:
        return generate_resource_name(name, schema, self.prefix_schema, self.schema_suffixes)

    # ------------------------------------------------------------------
    # Shared header lines
    # ------------------------------------------------------------------

    def _location_lines(self, obj: DdlObject) -> List[str]:
        lines = [f"  name = {quote(obj.name)}"]
        if obj.database:
            lines.append("  database = local.databases[var.DATABASE]")
        if obj.schema:
            lines.append(f"  schema = snowflake_schema.{schema_reference(obj.schema, self.schema_suffixes)}.name")
        return lines

    @staticmethod
    def _block(resource_type: str, name: str, lines: List[str]) -> str:
        return "\n".join([f'resource "{resource_type}" "{name}" {{', *lines, "}"])

    # ------------------------------------------------------------------
    # Tables and constraints
    # ------------------------------------------------------------------

    def _table_resources(self, table: TableDefinition) -> List[Resource]:
        name = self.resource_name(table.name, table.schema)
        lines = self._location_lines(table)
        if table.comment:
            lines.append(f"  comment = {quote(table.comment)}")
        if table.cluster_by:
            lines.append(f"  cluster_by = {_string_list(table.cluster_by)}")
        for column in table.columns:
            lines.append("")
            lines.extend(self._column_lines(column, table.name))

        resources = [Resource("snowflake_table", name, self._block("snowflake_table", name, lines))]
        for constraint in table.constraints:
            resources.append(self._constraint_resource(constraint, table, name))
        return resources

    def _column_lines(self, column: ColumnDefinition, table_name: str) -> List[str]:
        if not is_known_type(column.type):
            self.logger.debug(f"Unknown type '{column.type}' on {table_name}.{column.name}; kept as written")
        lines = [
            "  column {",
            f"    name = {quote(column.name)}",
            f"    type = {quote(map_data_type(column.type))}",
        ]
        if not column.nullable:
            lines.append("    nullable = false")
        if column.default_value is not None:
            lines.append("    default {")
            if is_constant_default(column.default_value):
                lines.append(f"      constant = {hcl_constant(column.default_value)}")
            else:
                lines.append(f"      expression = {quote(column.default_value)}")
            lines.append("    }")
        if column.comment:
            lines.append(f"    comment = {quote(column.comment)}")
        lines.append("  }")
        return lines

    def _constraint_resource(self, constraint: ConstraintDefinition, table: TableDefinition,
                             table_resource: str) -> Resource:
        name = self.resource_name(constraint.name, table.schema)
        lines = [
            f"  name = {quote(constraint.name)}",
            f"  type = {quote(constraint.kind.value)}",
            f"  table_id = snowflake_table.{table_resource}.qualified_name",
        ]
        if constraint.columns:
            lines.append(f"  columns = {_string_list(constraint.columns)}")
        if constraint.expression:
            lines.append(f"  # check: {' '.join(constraint.expression.split())}")
        lines.extend([
            f"  rely = {_bool(constraint.properties.rely)}",
            f"  deferrable = {_bool(constraint.properties.deferrable)}",
            f"  enable = {_bool(constraint.properties.enable)}",
        ])
        if constraint.kind is ConstraintKind.FOREIGN_KEY and constraint.references_table:
            lines.extend([
                "",
                "  foreign_key_properties {",
                "    references {",
                f"      table_id = {quote(constraint.references_table)}",
            ])
            if constraint.references_columns:
                lines.append(f"      columns = {_string_list(constraint.references_columns)}")
            lines.extend(["    }", "  }"])

        resource = Resource("snowflake_table_constraint", name, self._block("snowflake_table_constraint", name, lines))
        resource.add_dependencies([f"snowflake_table.{table_resource}"])
        return resource

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def _view_resource(self, view: ViewDefinition) -> Resource:
        name = self.resource_name(view.name, view.schema)
        lines = self._location_lines(view)
        if view.comment:
            lines.append(f"  comment = {quote(view.comment)}")
        if view.secure:
            lines.append("  is_secure = true")
        if view.or_replace:
            lines.append("  or_replace = true")
        for column_name in view.columns or []:
            lines.extend(["", "  column {", f"    column_name = {quote(column_name)}", "  }"])
        lines.append("")
        lines.append(heredoc_attribute("statement", view.query))
        return Resource("snowflake_view", name, self._block("snowflake_view", name, lines))

    # ------------------------------------------------------------------
    # Procedures
    # ------------------------------------------------------------------

    def _procedure_resource(self, procedure: ProcedureDefinition) -> Resource:
        name = self.resource_name(procedure.name, procedure.schema)
        language = (procedure.language or "SQL").upper()
        scripting = language in SCRIPTING_LANGUAGES
        if language != "SQL" and not scripting:
            self.logger.debug(f"Procedure {procedure.name}: language {language} rendered as snowflake_procedure")
        resource_type = f"snowflake_procedure_{language.lower()}" if scripting else "snowflake_procedure"

        lines = self._location_lines(procedure)
        if not scripting:
            lines.append(f"  language = {quote(language)}")
        if procedure.return_type:
            lines.append(f"  return_type = {quote(procedure.return_type)}")
        if scripting:
            lines.append(f"  execute_as = {quote(procedure.execute_as or DEFAULT_EXECUTE_AS)}")
            if procedure.handler:
                lines.append(f"  handler = {quote(procedure.handler)}")
            if procedure.runtime_version:
                lines.append(f"  runtime_version = {quote(procedure.runtime_version)}")
            if procedure.packages:
                lines.append(f"  packages = {_string_list(procedure.packages)}")
        if procedure.comment:
            lines.append(f"  comment = {quote(procedure.comment)}")

        for parameter in procedure.parameters:
            lines.append("")
            lines.append("  arguments {")
            if scripting:
                lines.append(f"    arg_name = {quote(parameter.name)}")
                lines.append(f"    arg_data_type = {quote(parameter.type)}")
                if parameter.default_value is not None:
                    lines.append(f"    arg_default_value = {quote(parameter.default_value)}")
            else:
                lines.append(f"    name = {quote(parameter.name)}")
                lines.append(f"    type = {quote(parameter.type)}")
                if parameter.default_value is not None:
                    lines.append(f"    default_value = {quote(parameter.default_value)}")
            lines.append("  }")

        # Escape template sequences before the substitutions add real ones.
        body = apply_body_substitutions(
            escape_template_sequences(procedure.body), self.database_tokens, self.schema_suffixes
        )
        lines.append("")
        lines.append(heredoc_attribute("procedure_definition" if scripting else "statement", body,
                                       escape_templates=False))
        return Resource(resource_type, name, self._block(resource_type, name, lines))
