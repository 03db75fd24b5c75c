"""
HCL string and heredoc helpers.

Quoted strings use ``escape_string``; its replacement order matters: the
backslash goes first so the backslashes added by the later rules are not
doubled again.
"""
import re
from typing import Optional

_ESCAPES = (
    ("\\", "\\\\"),
    ('"', '\\"'),
    ("'", "\\'"),
    ("\n", "\\n"),
    ("\r", "\\r"),
    ("\t", "\\t"),
    ("$", "\\$"),
    ("\0", "\\0"),
)

CONSTANT_DEFAULT = re.compile(r"^-?\d+(\.\d+)?$")

HEREDOC_INDENT = "    "


def escape_string(value: str) -> str:
    for raw, escaped in _ESCAPES:
        value = value.replace(raw, escaped)
    return value


def quote(value: str) -> str:
    return f'"{escape_string(value)}"'


def is_constant_default(value: str) -> bool:
    """Numeric and boolean literals are constants; everything else is an expression."""
    value = value.strip()
    return bool(CONSTANT_DEFAULT.match(value)) or value.upper() in ("TRUE", "FALSE")


def hcl_constant(value: str) -> str:
    """Bare HCL literal for a constant default: numbers as written, booleans lower-case."""
    value = value.strip()
    return value.lower() if value.upper() in ("TRUE", "FALSE") else value


def escape_template_sequences(text: str) -> str:
    """Keep Terraform from interpolating ``${`` / ``%{`` found in SQL or JavaScript."""
    return text.replace("${", "$${").replace("%{", "%%{")


def heredoc_marker(text: str, base: str = "EOT") -> str:
    """A closing marker that does not occur as a line of *text*."""
    lines = {line.strip() for line in text.split("\n")}
    marker = base
    count = 0
    while marker in lines:
        count += 1
        marker = f"{base}_{count}"
    return marker


def format_heredoc_body(text: str, indent: Optional[str] = HEREDOC_INDENT) -> str:
    """
    Re-indent a SQL body for a ``<<-`` heredoc.

    The first line is taken as is (bodies arrive trimmed); the common
    indentation of the remaining non-blank lines is removed and every
    non-blank line is prefixed with *indent*.  Blank lines stay empty.
    """
    lines = text.split("\n")
    rest = lines[1:]
    widths = [len(line) - len(line.lstrip()) for line in rest if line.strip()]
    cut = min(widths) if widths else 0

    formatted = [f"{indent}{lines[0].strip()}" if lines[0].strip() else ""]
    for line in rest:
        formatted.append(f"{indent}{line[cut:]}" if line.strip() else "")
    return "\n".join(formatted)


def heredoc_attribute(attribute: str, text: str, escape_templates: bool = True) -> str:
    """``  <attribute> = <<-EOT`` block lines for *text*."""
    body = escape_template_sequences(text) if escape_templates else text
    marker = heredoc_marker(body)
    return f"  {attribute} = <<-{marker}\n{format_heredoc_body(body)}\n  {marker}"
