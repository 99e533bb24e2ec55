"""Typed view over rustdoc's JSON output.

Only the parts needed to resolve intra-doc links are modelled. Item ids are
strings in older format versions and integers in newer ones; both are
normalised to ``str``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional

from syncrdme.domain.errors import SyncRdmeError

LOCAL_CRATE_ID = 0

MODULE = "module"
IMPORT = "import"
UNION = "union"
STRUCT = "struct"
STRUCT_FIELD = "struct_field"
ENUM = "enum"
VARIANT = "variant"
FUNCTION = "function"
TRAIT = "trait"
TRAIT_ALIAS = "trait_alias"
IMPL = "impl"
TYPE_ALIAS = "type_alias"
CONSTANT = "constant"
STATIC = "static"
FOREIGN_TYPE = "foreign_type"
MACRO = "macro"
PROC_ATTRIBUTE = "proc_attribute"
PROC_DERIVE = "proc_derive"
PRIMITIVE = "primitive"
ASSOC_CONST = "assoc_const"
ASSOC_TYPE = "assoc_type"

# spellings used by other format versions
_KIND_ALIASES = {
    "use": IMPORT,
    "typedef": TYPE_ALIAS,
    "extern_type": FOREIGN_TYPE,
}

_PROC_MACRO_KINDS = {
    "bang": MACRO,
    "attr": PROC_ATTRIBUTE,
    "derive": PROC_DERIVE,
}


class RustdocOutputError(SyncRdmeError):
    default_code = "RUSTDOC_OUTPUT_INVALID"


def normalize_kind(raw: str) -> str:
    return _KIND_ALIASES.get(raw, raw)


def _id(value: Any) -> str:
    return str(value)


@dataclass(frozen=True)
class ItemSummary:
    crate_id: int
    kind: str
    path: List[str]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ItemSummary":
        return cls(
            crate_id=int(data.get("crate_id", LOCAL_CRATE_ID)),
            kind=normalize_kind(str(data.get("kind", ""))),
            path=[str(part) for part in data.get("path") or []],
        )


@dataclass(frozen=True)
class ExternalCrate:
    name: str
    html_root_url: Optional[str] = None


@dataclass(frozen=True)
class Item:
    id: str
    name: Optional[str]
    kind: str
    body: Mapping[str, Any]
    crate_id: int = LOCAL_CRATE_ID
    docs: Optional[str] = None
    links: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, item_id: str, data: Mapping[str, Any]) -> "Item":
        kind, body = _split_inner(data)
        links = {str(name): _id(target) for name, target in (data.get("links") or {}).items()}
        return cls(
            id=item_id,
            name=data.get("name"),
            kind=kind,
            body=body,
            crate_id=int(data.get("crate_id", LOCAL_CRATE_ID)),
            docs=data.get("docs"),
            links=links,
        )

    def children(self) -> Iterator[str]:
        """Ids of items structurally contained in this one."""

        body = self.body
        if self.kind in (MODULE, TRAIT, IMPL):
            yield from (_id(child) for child in body.get("items") or [])
        elif self.kind == UNION:
            yield from (_id(child) for child in body.get("fields") or [])
        elif self.kind == ENUM:
            yield from (_id(child) for child in body.get("variants") or [])
        elif self.kind in (STRUCT, VARIANT):
            yield from _field_ids(body)


def _field_ids(body: Mapping[str, Any]) -> Iterator[str]:
    if "fields" in body:
        # format versions before the struct/variant kind split
        yield from (_id(child) for child in body.get("fields") or [])
        return
    kind = body.get("kind")
    if not isinstance(kind, Mapping):
        return
    if "tuple" in kind:
        yield from (_id(child) for child in (kind["tuple"] or []) if child is not None)
        return
    for key in ("plain", "struct"):
        if key in kind:
            yield from (_id(child) for child in (kind[key] or {}).get("fields") or [])


def _split_inner(data: Mapping[str, Any]) -> tuple[str, Mapping[str, Any]]:
    inner = data.get("inner")
    if "kind" in data:
        kind = normalize_kind(str(data["kind"]))
        body = inner if isinstance(inner, Mapping) else {}
    elif isinstance(inner, Mapping) and len(inner) == 1:
        raw_kind, raw_body = next(iter(inner.items()))
        kind = normalize_kind(str(raw_kind))
        body = raw_body if isinstance(raw_body, Mapping) else {}
    elif isinstance(inner, str):
        # unit-like variants such as "extern_type"
        kind, body = normalize_kind(inner), {}
    else:
        raise RustdocOutputError(f"item {data.get('id')!r} has no recognisable kind")
    if kind == "proc_macro":
        kind = _PROC_MACRO_KINDS.get(str(body.get("kind")), MACRO)
    return kind, body


@dataclass(frozen=True)
class DocTree:
    root: str
    index: Dict[str, Item]
    paths: Dict[str, ItemSummary]
    external_crates: Dict[int, ExternalCrate]
    format_version: Optional[int] = None

    @property
    def root_item(self) -> Optional[Item]:
        return self.index.get(self.root)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DocTree":
        if not isinstance(data, Mapping):
            raise RustdocOutputError("rustdoc output must be a JSON object")
        for key in ("root", "index", "paths"):
            if key not in data:
                raise RustdocOutputError(f"rustdoc output is missing `{key}`")
        index = {_id(key): Item.from_dict(_id(key), value) for key, value in data["index"].items()}
        paths = {_id(key): ItemSummary.from_dict(value) for key, value in data["paths"].items()}
        external = {
            int(key): ExternalCrate(name=str(value.get("name", "")), html_root_url=value.get("html_root_url"))
            for key, value in (data.get("external_crates") or {}).items()
        }
        return cls(
            root=_id(data["root"]),
            index=index,
            paths=paths,
            external_crates=external,
            format_version=data.get("format_version"),
        )

    @classmethod
    def load(cls, path: Path) -> "DocTree":
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise RustdocOutputError(f"failed to read rustdoc output: {path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise RustdocOutputError(f"rustdoc output is not valid JSON: {path}: {exc}") from exc
        return cls.from_dict(raw)
