"""Human-readable rendering of marker errors with source excerpts."""

from __future__ import annotations

from typing import List

from syncrdme.domain.errors import SyncRdmeError

from .scanner import FindAllError
from .span import line_col, render_snippet


def render_diagnostic(error: SyncRdmeError, *, indent: str = "") -> List[str]:
    """Render ``error`` and everything nested in it, one line per entry."""

    if isinstance(error, FindAllError):
        lines = [f"{indent}error: {error.message}"]
        for nested in error.errors:
            lines.extend(_render_located(error.readme.path, error.readme.text, nested, indent + "  "))
        return lines

    lines = [f"{indent}error: {error.message}"]
    for nested in error.related():
        lines.extend(render_diagnostic(nested, indent=indent + "  "))
    if error.remediation and not error.related():
        lines.append(f"{indent}  hint: {error.remediation}")
    return lines


def _render_located(path: str, text: str, error: SyncRdmeError, indent: str) -> List[str]:
    labelled = error.labelled_spans() if hasattr(error, "labelled_spans") else []
    if not labelled:
        return [f"{indent}{path}: {error.message}"]
    line, column = line_col(text, labelled[0][0].start)
    lines = [f"{indent}{path}:{line}:{column}: {error.message}"]
    lines.extend(f"{indent}{row}" for row in render_snippet(text, labelled))
    if error.remediation:
        lines.append(f"{indent}hint: {error.remediation}")
    return lines
