"""Facts read from a package's ``Cargo.toml``."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

from syncrdme.domain.errors import ContentsError, SyncRdmeError

DEFAULT_README_NAMES = ("README.md", "README.txt", "README")
MAINTENANCE_STATUSES = {
    "actively-developed",
    "passively-maintained",
    "as-is",
    "experimental",
    "looking-for-maintainer",
    "deprecated",
    "none",
}
INHERITABLE_KEYS = ("readme", "license", "license-file", "repository", "rust-version")


class ManifestError(SyncRdmeError):
    default_code = "MANIFEST_INVALID"


class ConfigKeyNotSetError(ContentsError):
    """A generator needs a manifest key the package does not set."""

    default_code = "CONFIG_KEY_NOT_SET"

    def __init__(self, manifest_path: Path, key: str) -> None:
        super().__init__(f"`{key}` is not set in {manifest_path}")
        self.manifest_path = manifest_path
        self.key = key


def load_toml(path: Path) -> Mapping[str, Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except OSError as exc:
        raise ManifestError(f"failed to read manifest: {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ManifestError(f"failed to parse manifest: {path}: {exc}") from exc


@dataclass(frozen=True)
class PackageManifest:
    path: Path
    name: str
    readme: Optional[str] = None
    license: Optional[str] = None
    license_file: Optional[str] = None
    repository: Optional[str] = None
    rust_version: Optional[str] = None
    maintenance_status: Optional[str] = None
    sync_metadata: Optional[Mapping[str, Any]] = field(default=None, compare=False)

    @property
    def root(self) -> Path:
        return self.path.parent

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        *,
        manifest_path: Path,
        workspace_package: Optional[Mapping[str, Any]] = None,
    ) -> "PackageManifest":
        package = data.get("package")
        if not isinstance(package, Mapping) or not isinstance(package.get("name"), str):
            raise ManifestError(f"{manifest_path} does not declare [package] with a name")

        values = {}
        for key in INHERITABLE_KEYS:
            value = package.get(key)
            if isinstance(value, Mapping) and value.get("workspace") is True:
                if workspace_package is None or key not in workspace_package:
                    raise ManifestError(f"`package.{key}` inherits from the workspace but [workspace.package] does not set it")
                value = workspace_package[key]
            values[key] = value

        return cls(
            path=manifest_path,
            name=package["name"],
            readme=_readme(values["readme"], manifest_path.parent),
            license=_optional_str(values["license"], "package.license", manifest_path),
            license_file=_optional_str(values["license-file"], "package.license-file", manifest_path),
            repository=_optional_str(values["repository"], "package.repository", manifest_path),
            rust_version=_optional_str(values["rust-version"], "package.rust-version", manifest_path),
            maintenance_status=_maintenance_status(data, manifest_path),
            sync_metadata=_sync_metadata(package, manifest_path),
        )

    @classmethod
    def load(cls, manifest_path: Path, *, workspace_manifest: Optional[Path] = None) -> "PackageManifest":
        data = load_toml(manifest_path)
        workspace_package = None
        if workspace_manifest is not None and workspace_manifest.exists():
            workspace_data = data if workspace_manifest == manifest_path else load_toml(workspace_manifest)
            workspace = workspace_data.get("workspace") or {}
            workspace_package = workspace.get("package") if isinstance(workspace, Mapping) else None
        return cls.from_dict(data, manifest_path=manifest_path, workspace_package=workspace_package)

    def require(self, key: str) -> str:
        """Value of manifest ``key`` (dotted, as written in Cargo.toml)."""

        attribute = {
            "package.license": self.license,
            "package.license-file": self.license_file,
            "package.repository": self.repository,
            "package.rust-version": self.rust_version,
            "badges.maintenance.status": self.maintenance_status,
        }[key]
        if attribute is None:
            raise ConfigKeyNotSetError(self.path, key)
        return attribute


def _optional_str(value: Any, key: str, manifest_path: Path) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ManifestError(f"`{key}` in {manifest_path} must be a string")
    return value


def _readme(value: Any, package_root: Path) -> Optional[str]:
    if value is False:
        return None
    if value is True:
        return "README.md"
    if isinstance(value, str):
        return value
    for candidate in DEFAULT_README_NAMES:
        if (package_root / candidate).is_file():
            return candidate
    return None


def _maintenance_status(data: Mapping[str, Any], manifest_path: Path) -> Optional[str]:
    badges = data.get("badges") or {}
    maintenance = badges.get("maintenance") if isinstance(badges, Mapping) else None
    if not isinstance(maintenance, Mapping) or "status" not in maintenance:
        return None
    status = maintenance["status"]
    if status not in MAINTENANCE_STATUSES:
        raise ManifestError(f"unknown `badges.maintenance.status` {status!r} in {manifest_path}")
    return status


def _sync_metadata(package: Mapping[str, Any], manifest_path: Path) -> Optional[Mapping[str, Any]]:
    """The ``[package.metadata.sync-rdme]`` table, if the package has one."""

    metadata = package.get("metadata")
    if not isinstance(metadata, Mapping) or "sync-rdme" not in metadata:
        return None
    table = metadata["sync-rdme"]
    if not isinstance(table, Mapping):
        raise ManifestError(f"`package.metadata.sync-rdme` in {manifest_path} must be a table")
    return table
