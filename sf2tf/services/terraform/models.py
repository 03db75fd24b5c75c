import re
from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

# "  depends_on = [...]" plus the blank line in front of it, at the end of a block body.
_DEPENDS_ON_LINE = re.compile(r"\n\n  depends_on = \[[^\]]*\]$")


def dependency_sort_key(reference: str) -> Tuple[int, str]:
    """Tables first, then everything else, each group lexicographic."""
    return (0 if reference.startswith("snowflake_table.") else 1, reference)


@dataclass
class Resource:
    """
    One rendered Terraform resource block.

    ``content`` is the complete ``resource "<type>" "<name>" { ... }`` text
    without a trailing newline.  Only ``add_dependencies`` changes it after
    synthesis.
    """
    resource_type: str
    name: str
    content: str
    dependencies: List[str] = field(default_factory=list)

    @property
    def address(self) -> str:
        return f"{self.resource_type}.{self.name}"

    def add_dependencies(self, references: Iterable[str]) -> None:
        merged = sorted(set(self.dependencies) | set(references), key=dependency_sort_key)
        if merged == self.dependencies:
            return
        self.dependencies = merged
        body, _, closing = self.content.rpartition("\n")
        body = _DEPENDS_ON_LINE.sub("", body)
        self.content = f"{body}\n\n  depends_on = [{', '.join(merged)}]\n{closing}"
