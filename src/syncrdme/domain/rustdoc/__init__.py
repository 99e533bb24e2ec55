"""rustdoc JSON model, item paths and intra-doc link resolution."""

from __future__ import annotations

from .links import LinkResolver, ResolvedLinks, summary_to_url
from .model import DocTree, Item, ItemSummary, RustdocOutputError
from .paths import PathIndex
from .summary import Summary, render_summary

__all__ = [
    "DocTree",
    "Item",
    "ItemSummary",
    "LinkResolver",
    "PathIndex",
    "ResolvedLinks",
    "RustdocOutputError",
    "Summary",
    "render_summary",
    "summary_to_url",
]
