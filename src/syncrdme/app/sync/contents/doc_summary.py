"""``doc-summary`` region: the crate-level docs from rustdoc JSON."""

from __future__ import annotations

from syncrdme.domain.rustdoc import render_summary

from ..context import PackageContext


def create(context: PackageContext) -> str:
    cached = context.cached_summary()
    if cached is not None:
        return cached
    summary = render_summary(context.doc_tree(), context.html_root_url)
    for warning in summary.warnings:
        context.warn(warning, event="sync.link_unresolved")
    context.remember_summary(summary.text)
    return summary.text
