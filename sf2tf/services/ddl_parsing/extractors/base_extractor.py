import re
from typing import List, Optional

from sf2tf.services.ddl_parsing.identifiers import STRING_LITERAL, unquote_literal
from sf2tf.services.ddl_parsing.models import DdlObject, Diagnostic

# "COMMENT = '<literal>'" anywhere in the given text (comment-stripped input).
COMMENT_PROPERTY = re.compile(rf"\bCOMMENT\s*=\s*({STRING_LITERAL}|\$\$.*?\$\$)", re.IGNORECASE | re.DOTALL)


class ExtractionError(ValueError):
    """A recognised CREATE statement is missing a required part."""


class BaseExtractor:
    """
    A base class for all object extractors to ensure a consistent interface.

    ``matches()`` decides on the comment-stripped statement whether the
    extractor owns it; ``extract()`` builds the definition from the verbatim
    statement and its stripped twin, raising ``ExtractionError`` when a
    required part is missing.  Recoverable problems inside the statement are
    collected in ``self.warnings``.
    """
    # Anchored at the start of the comment-stripped statement.
    CLASSIFIER: re.Pattern = None

    def __init__(self):
        self.warnings: List[str] = []

    def matches(self, cleaned: str) -> bool:
        return bool(self.CLASSIFIER.match(cleaned))

    def extract(self, statement: str, cleaned: str) -> DdlObject:
        raise NotImplementedError("Each extractor must implement its own extract method.")

    def take_warnings(self, statement_index: int, excerpt: str) -> List[Diagnostic]:
        """Turn the warnings of the last ``extract()`` call into diagnostics."""
        diagnostics = [Diagnostic(statement_index, excerpt, reason, severity="WARNING") for reason in self.warnings]
        self.warnings = []
        return diagnostics

    @staticmethod
    def find_comment_property(text: str) -> Optional[str]:
        m = COMMENT_PROPERTY.search(text)
        return unquote_literal(m.group(1)) if m else None
