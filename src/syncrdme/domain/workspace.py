"""Cargo workspace layout as reported by ``cargo metadata``."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from .errors import SyncRdmeError


class WorkspaceError(SyncRdmeError):
    default_code = "WORKSPACE_METADATA_FAILED"


@dataclass(frozen=True)
class Package:
    id: str
    name: str
    manifest_path: Path

    @property
    def root(self) -> Path:
        return self.manifest_path.parent

    @property
    def doc_stem(self) -> str:
        """File stem rustdoc uses for the crate's JSON output."""

        return self.name.replace("-", "_")


@dataclass(frozen=True)
class Workspace:
    root: Path
    target_dir: Path
    packages: Tuple[Package, ...]
    members: Tuple[str, ...] = ()
    manifest_path: Optional[Path] = None

    @property
    def root_manifest(self) -> Path:
        return self.root / "Cargo.toml"

    @classmethod
    def from_metadata(cls, data: Mapping[str, Any], *, manifest_path: Optional[Path] = None) -> "Workspace":
        try:
            packages = tuple(
                Package(id=str(raw["id"]), name=str(raw["name"]), manifest_path=Path(raw["manifest_path"]))
                for raw in data["packages"]
            )
            root = Path(data["workspace_root"])
            target_dir = Path(data["target_directory"])
        except (KeyError, TypeError) as exc:
            raise WorkspaceError(f"unexpected `cargo metadata` output: missing {exc}") from exc
        members = tuple(str(member) for member in data.get("workspace_members") or [package.id for package in packages])
        return cls(root=root, target_dir=target_dir, packages=packages, members=members, manifest_path=manifest_path)

    def member_packages(self) -> List[Package]:
        member_ids = set(self.members)
        return [package for package in self.packages if package.id in member_ids]

    def root_package(self) -> Optional[Package]:
        manifest = (self.manifest_path or self.root_manifest).resolve()
        for package in self.packages:
            if package.manifest_path.resolve() == manifest:
                return package
        return None

    def select(self, *, all_members: bool = False, names: Sequence[str] = ()) -> List[Package]:
        """Packages a sync run covers: every member, the named ones, or the root."""

        if all_members:
            return self.member_packages()
        if names:
            selected = []
            for name in names:
                match = next((package for package in self.packages if package.name == name), None)
                if match is None:
                    raise WorkspaceError(f"package not found: {name}", code="PACKAGE_NOT_FOUND")
                selected.append(match)
            return selected
        package = self.root_package()
        if package is None:
            raise WorkspaceError(
                f"no root package found in {self.manifest_path or self.root_manifest}",
                code="PACKAGE_NOT_FOUND",
            )
        return [package]


@dataclass(frozen=True)
class FeatureSelection:
    features: Tuple[str, ...] = field(default_factory=tuple)
    all_features: bool = False
    no_default_features: bool = False

    def cargo_args(self) -> List[str]:
        args: List[str] = []
        if self.all_features:
            args.append("--all-features")
        for feature in self.features:
            args.extend(["--features", feature])
        if self.no_default_features:
            args.append("--no-default-features")
        return args
