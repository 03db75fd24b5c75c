from typing import List

from .models import Resource


def render(resources: List[Resource]) -> str:
    """Resource blocks in order, separated by one blank line, newline-terminated."""
    if not resources:
        return ""
    return "\n\n".join(resource.content for resource in resources) + "\n"
