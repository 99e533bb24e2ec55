"""Turn intra-doc link targets into absolute documentation URLs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from . import model
from .model import DocTree, Item, ItemSummary
from .paths import PathIndex

# kinds documented on a page of their own: <kindword>.<name>.html
PAGE_PREFIXES = {
    model.STRUCT: "struct",
    model.UNION: "union",
    model.ENUM: "enum",
    model.FUNCTION: "fn",
    model.TYPE_ALIAS: "type",
    model.CONSTANT: "constant",
    model.TRAIT: "trait",
    model.STATIC: "static",
    model.MACRO: "macro",
    model.PROC_ATTRIBUTE: "attr",
    model.PROC_DERIVE: "derive",
    model.PRIMITIVE: "primitive",
}

# kinds documented as an anchor on their container's page
FRAGMENTS = {
    model.STRUCT_FIELD: ("struct", "structfield"),
    model.VARIANT: ("enum", "variant"),
    model.ASSOC_CONST: ("trait", "associatedconstant"),
    model.ASSOC_TYPE: ("trait", "associatedtype"),
}


@dataclass
class ResolvedLinks:
    """Link name to URL for one item; ``None`` marks a failed resolution."""

    urls: Dict[str, Optional[str]] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    def resolved(self) -> Dict[str, str]:
        return {name: url for name, url in self.urls.items() if url is not None}

    def unresolved(self) -> List[str]:
        return [name for name, url in self.urls.items() if url is None]


def summary_to_url(base_url: str, summary: ItemSummary) -> Optional[str]:
    """Build the page URL for ``summary`` under ``base_url``.

    Returns ``None`` for kinds (or path shapes) with no known page layout.
    """

    parts = [base_url.rstrip("/")]
    path = summary.path
    kind = summary.kind

    if kind == model.MODULE:
        parts.extend(path)
        parts.append("index.html")
    elif kind in PAGE_PREFIXES and len(path) >= 1:
        parts.extend(path[:-1])
        parts.append(f"{PAGE_PREFIXES[kind]}.{path[-1]}.html")
    elif kind in FRAGMENTS and len(path) >= 2:
        page, anchor = FRAGMENTS[kind]
        parts.extend(path[:-2])
        parts.append(f"{page}.{path[-2]}.html#{anchor}.{path[-1]}")
    else:
        return None
    return "/".join(parts)


class LinkResolver:
    def __init__(self, tree: DocTree, local_html_root_url: str) -> None:
        self._tree = tree
        self._local_root = local_html_root_url
        self._paths = PathIndex(tree)

    def base_url(self, summary: ItemSummary) -> Optional[str]:
        if summary.crate_id == model.LOCAL_CRATE_ID:
            return self._local_root
        external = self._tree.external_crates.get(summary.crate_id)
        if external is None:
            return None
        return external.html_root_url

    def url_for(self, item_id: str, warnings: Optional[List[str]] = None) -> Optional[str]:
        summary = self._paths.summary(item_id)
        if summary is None:
            return None
        base = self.base_url(summary)
        if base is None:
            return None
        url = summary_to_url(base, summary)
        if url is None and warnings is not None:
            warnings.append(
                f"unexpected intra-doc link item & path found: kind={summary.kind} path={'::'.join(summary.path)}"
            )
        return url

    def resolve(self, item: Item) -> ResolvedLinks:
        result = ResolvedLinks()
        for name, target in item.links.items():
            url = self.url_for(target, result.warnings)
            if url is None:
                result.warnings.append(f"failed to resolve link to `{name}` (id {target})")
            result.urls[name] = url
        return result
