from .base_extractor import BaseExtractor, ExtractionError
from .procedure_extractor import ProcedureExtractor
from .table_extractor import TableExtractor
from .view_extractor import ViewExtractor

__all__ = ["BaseExtractor", "ExtractionError", "TableExtractor", "ViewExtractor", "ProcedureExtractor"]
