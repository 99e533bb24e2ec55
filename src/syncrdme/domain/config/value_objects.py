"""Value objects for the per-package ``.sync-rdme.yaml`` configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

from syncrdme.domain.errors import SyncRdmeError

DEFAULT_VERSION = 1
CONFIG_FILENAME = ".sync-rdme.yaml"
DEFAULT_GROUP_KEY = "badges"
GROUP_KEY_PREFIX = "badges-"
BADGE_STYLES = {"plastic", "flat", "flat-square", "for-the-badge", "social"}

MAINTENANCE = "maintenance"
LICENSE = "license"
CRATES_IO = "crates-io"
DOCS_RS = "docs-rs"
RUST_VERSION = "rust-version"
GITHUB_ACTIONS = "github-actions"
CODECOV = "codecov"
BADGE_KINDS = (MAINTENANCE, LICENSE, CRATES_IO, DOCS_RS, RUST_VERSION, GITHUB_ACTIONS, CODECOV)


class SyncConfigError(SyncRdmeError):
    """Raised when ``.sync-rdme.yaml`` violates its invariants."""

    default_code = "SYNC_CONFIG_INVALID"


@dataclass(frozen=True)
class Workflow:
    file: str
    name: Optional[str] = None


@dataclass(frozen=True)
class BadgeItem:
    """One entry of a badge group, in the order it was declared."""

    kind: str
    link: Optional[str] = None
    workflows: Tuple[Workflow, ...] = ()

    @classmethod
    def from_value(cls, kind: str, value: object, *, where: str) -> Optional["BadgeItem"]:
        if kind not in BADGE_KINDS:
            raise SyncConfigError(f"Unknown badge '{kind}' in {where}")
        if value is False:
            return None
        if value is True or value is None:
            return cls(kind=kind)
        if not isinstance(value, Mapping):
            raise SyncConfigError(f"Badge '{kind}' in {where} must be a boolean or a mapping")
        if kind == LICENSE:
            _reject_unknown(value, {"link"}, f"{where}.{kind}")
            link = value.get("link")
            if link is not None and not isinstance(link, str):
                raise SyncConfigError(f"'{where}.{kind}.link' must be a string")
            return cls(kind=kind, link=link)
        if kind == GITHUB_ACTIONS:
            _reject_unknown(value, {"workflows"}, f"{where}.{kind}")
            return cls(kind=kind, workflows=_parse_workflows(value.get("workflows"), f"{where}.{kind}"))
        if value:
            raise SyncConfigError(f"Badge '{kind}' in {where} takes no options")
        return cls(kind=kind)


@dataclass(frozen=True)
class BadgeGroup:
    name: str
    items: Tuple[BadgeItem, ...] = ()


@dataclass(frozen=True)
class SyncConfig:
    """Aggregate value object for one package's configuration."""

    version: int = DEFAULT_VERSION
    extra_targets: Tuple[str, ...] = ()
    html_root_url: Optional[str] = None
    badge_style: Optional[str] = None
    badge_groups: Mapping[str, BadgeGroup] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, object], *, config_path: Path) -> "SyncConfig":
        """Build config from a raw mapping, validating invariants."""

        if not isinstance(data, Mapping):
            raise SyncConfigError(f"Configuration in {config_path} must be a mapping")
        _reject_unknown(data, {"version", "extra-targets", "rustdoc", "badge"}, str(config_path))

        version = data.get("version", DEFAULT_VERSION)
        if version != DEFAULT_VERSION:
            raise SyncConfigError(f"Unsupported sync-rdme config version {version} in {config_path}")

        extra = data.get("extra-targets") or []
        if not isinstance(extra, list) or not all(isinstance(item, str) and item for item in extra):
            raise SyncConfigError("'extra-targets' must be a list of relative paths")

        rustdoc = data.get("rustdoc") or {}
        if not isinstance(rustdoc, Mapping):
            raise SyncConfigError("'rustdoc' must be a mapping")
        _reject_unknown(rustdoc, {"html-root-url"}, "rustdoc")
        html_root_url = rustdoc.get("html-root-url")
        if html_root_url is not None and not isinstance(html_root_url, str):
            raise SyncConfigError("'rustdoc.html-root-url' must be a string")

        badge = data.get("badge") or {}
        if not isinstance(badge, Mapping):
            raise SyncConfigError("'badge' must be a mapping")
        style = badge.get("style")
        if style is not None and style not in BADGE_STYLES:
            raise SyncConfigError(f"Unsupported badge style '{style}', expected one of {sorted(BADGE_STYLES)}")
        groups = _build_groups(badge)

        return cls(
            version=DEFAULT_VERSION,
            extra_targets=tuple(extra),
            html_root_url=html_root_url,
            badge_style=style,
            badge_groups=groups,
        )

    @classmethod
    def default(cls) -> "SyncConfig":
        return cls()

    def group(self, name: str) -> BadgeGroup:
        """Badge group ``name``; an undeclared default group is empty."""

        try:
            return self.badge_groups[name]
        except KeyError as exc:
            if name == "":
                return BadgeGroup(name="")
            raise SyncConfigError(f"Badge group '{name}' is not declared") from exc

    @property
    def declared_groups(self) -> List[str]:
        return [name for name in self.badge_groups if name]


def _group_name(key: str) -> Optional[str]:
    if key == DEFAULT_GROUP_KEY:
        return ""
    if key.startswith(GROUP_KEY_PREFIX):
        return key[len(GROUP_KEY_PREFIX) :]
    return None


def _build_groups(badge: Mapping[str, object]) -> Dict[str, BadgeGroup]:
    groups: Dict[str, BadgeGroup] = {}
    owners: Dict[str, str] = {}
    for key, raw in badge.items():
        if key == "style":
            continue
        name = _group_name(str(key))
        if name is None:
            raise SyncConfigError(f"Unknown key 'badge.{key}'; badge groups are named 'badges' or 'badges-<name>'")
        if name in owners:
            raise SyncConfigError(f"'badge.{key}' and 'badge.{owners[name]}' both declare badge group '{name}'")
        if raw is None:
            raw = {}
        if not isinstance(raw, Mapping):
            raise SyncConfigError(f"'badge.{key}' must be a mapping of badge items")
        items = []
        for kind, value in raw.items():
            item = BadgeItem.from_value(str(kind), value, where=f"badge.{key}")
            if item is not None:
                items.append(item)
        owners[name] = str(key)
        groups[name] = BadgeGroup(name=name, items=tuple(items))
    return groups


def _parse_workflows(raw: object, where: str) -> Tuple[Workflow, ...]:
    if raw is None:
        return ()
    entries = raw if isinstance(raw, list) else [raw]
    workflows = []
    for entry in entries:
        if isinstance(entry, str) and entry:
            workflows.append(Workflow(file=entry))
            continue
        if isinstance(entry, Mapping) and isinstance(entry.get("file"), str):
            _reject_unknown(entry, {"file", "name"}, f"{where}.workflows")
            name = entry.get("name")
            if name is not None and not isinstance(name, str):
                raise SyncConfigError(f"'{where}.workflows' name must be a string")
            workflows.append(Workflow(file=entry["file"], name=name))
            continue
        raise SyncConfigError(f"'{where}.workflows' entries must be file names or {{file, name}} mappings")
    return tuple(workflows)


def _reject_unknown(data: Mapping[str, object], allowed: set, where: str) -> None:
    unknown = sorted(str(key) for key in data if key not in allowed)
    if unknown:
        raise SyncConfigError(f"Unknown keys {unknown} in {where}")
