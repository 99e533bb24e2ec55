"""``title`` region: the package name as a top-level heading."""

from __future__ import annotations

from ..context import PackageContext


def create(context: PackageContext) -> str:
    return f"# {context.name}\n"
