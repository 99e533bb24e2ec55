"""Application service running README synchronization passes."""

from __future__ import annotations

import difflib
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

import jsonschema
import yaml

from syncrdme.domain.config import ManifestError, PackageManifest, SyncConfig, SyncConfigError
from syncrdme.domain.config.value_objects import CONFIG_FILENAME
from syncrdme.domain.errors import SyncRdmeError
from syncrdme.domain.readme import ReadmeFile, find_all, replace_all
from syncrdme.domain.readme.editor import read_readme, write_readme
from syncrdme.domain.readme.events import iter_events
from syncrdme.domain.workspace import Package, Workspace
from syncrdme.ports.rustdoc import DocTreeProvider
from syncrdme.ports.vcs import FileStatus, VcsDiscovery
from syncrdme.ports.workspace import WorkspaceProvider
from syncrdme.resources import load_schema
from syncrdme.settings import RuntimeSettings
from syncrdme.utils.telemetry import record_structured_event

from . import contents
from .context import PackageContext

UPDATED = "updated"
UP_TO_DATE = "up-to-date"
FAILED = "failed"

Progress = Callable[[str, str], None]


class UpdateNotAllowedError(SyncRdmeError):
    default_code = "README_NOT_SYNCED"


@dataclass(frozen=True)
class UpdatePolicy:
    """Whether a changed document may be written."""

    check: bool = False
    allow_no_vcs: bool = False
    allow_dirty: bool = False
    allow_staged: bool = False

    def ensure_allowed(self, path: Path, old_text: str, new_text: str, vcs: VcsDiscovery) -> None:
        if self.check:
            raise UpdateNotAllowedError(f"README is not synced: {path}\n{unified_diff(path, old_text, new_text)}")
        if self.allow_no_vcs:
            return
        repository = vcs.discover(path)
        if repository is None:
            raise UpdateNotAllowedError(f"no VCS detected for README: {path}", code="VCS_NOT_FOUND")
        status = repository.status(path)
        if status is FileStatus.DIRTY and not self.allow_dirty:
            raise UpdateNotAllowedError(f"README has uncommitted changes: {path}", code="README_DIRTY")
        if status is FileStatus.STAGED and not (self.allow_dirty or self.allow_staged):
            raise UpdateNotAllowedError(f"README has staged changes: {path}", code="README_STAGED")


def unified_diff(path: Path, old_text: str, new_text: str) -> str:
    lines = difflib.unified_diff(
        old_text.splitlines(keepends=True),
        new_text.splitlines(keepends=True),
        fromfile=f"a/{path.name}",
        tofile=f"b/{path.name}",
    )
    return "".join(line if line.endswith("\n") else line + "\n" for line in lines)


@dataclass
class DocumentOutcome:
    package: str
    path: Path
    status: str
    error: Optional[SyncRdmeError] = None
    warnings: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "package": self.package,
            "path": self.path.as_posix(),
            "status": self.status,
            "warnings": list(self.warnings),
        }
        if self.error is not None:
            payload["error"] = self.error.as_dict()
        return payload


@dataclass
class SyncReport:
    outcomes: List[DocumentOutcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(outcome.status != FAILED for outcome in self.outcomes)

    def count(self, status: str) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "summary": {status: self.count(status) for status in (UPDATED, UP_TO_DATE, FAILED)},
            "documents": [outcome.as_dict() for outcome in self.outcomes],
        }


class SyncService:
    """High-level API behind ``sync-rdme sync``."""

    SCHEMA_RESOURCE = "sync_rdme.schema.json"

    def __init__(
        self,
        settings: RuntimeSettings,
        *,
        workspaces: WorkspaceProvider,
        doc_trees: DocTreeProvider,
        vcs: VcsDiscovery,
        progress: Optional[Progress] = None,
    ) -> None:
        self._settings = settings
        self._workspaces = workspaces
        self._doc_trees = doc_trees
        self._vcs = vcs
        self._progress = progress
        self._validator: Optional[jsonschema.Draft202012Validator] = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(
        self,
        *,
        manifest_path: Optional[Path] = None,
        all_members: bool = False,
        names: Sequence[str] = (),
        policy: UpdatePolicy = UpdatePolicy(),
    ) -> SyncReport:
        workspace = self._workspaces.load(manifest_path)
        report = SyncReport()
        for package in workspace.select(all_members=all_members, names=names):
            report.outcomes.extend(self.sync_package(workspace, package, policy))
        return report

    def sync_package(self, workspace: Workspace, package: Package, policy: UpdatePolicy) -> List[DocumentOutcome]:
        try:
            context = self._package_context(workspace, package)
            targets = self.targets(context)
        except SyncRdmeError as exc:
            self._record_document(package.name, package.manifest_path, FAILED, exc, 0.0)
            return [DocumentOutcome(package=package.name, path=package.manifest_path, status=FAILED, error=exc)]
        return [self.sync_document(context, path, policy) for path in targets]

    def sync_document(self, context: PackageContext, path: Path, policy: UpdatePolicy) -> DocumentOutcome:
        """One read, scan, generate, interpolate and write pass over ``path``."""

        started = time.perf_counter()
        warnings_before = len(context.warnings)
        self._emit("info", f"syncing {path}...")
        try:
            readme = read_readme(path)
            new_text = self.render(context, readme)
            if new_text == readme.text:
                status = UP_TO_DATE
                self._emit("info", f"already up-to-date {path}")
            else:
                policy.ensure_allowed(path, readme.text, new_text, self._vcs)
                write_readme(path, new_text)
                status = UPDATED
                self._emit("info", f"updated {path}")
        except SyncRdmeError as exc:
            duration = (time.perf_counter() - started) * 1000
            self._record_document(context.name, path, FAILED, exc, duration)
            return DocumentOutcome(
                package=context.name,
                path=path,
                status=FAILED,
                error=exc,
                warnings=context.warnings[warnings_before:],
            )
        duration = (time.perf_counter() - started) * 1000
        self._record_document(context.name, path, status, None, duration)
        return DocumentOutcome(package=context.name, path=path, status=status, warnings=context.warnings[warnings_before:])

    def render(self, context: PackageContext, readme: ReadmeFile) -> str:
        """New text for ``readme``; raises on marker or generation errors."""

        regions = find_all(readme, iter_events(readme.text), context.config.declared_groups)
        bodies = contents.create_all(context, readme.path, regions)
        return replace_all(readme.text, regions, bodies)

    def targets(self, context: PackageContext) -> List[Path]:
        relative = [context.manifest.readme] if context.manifest.readme else []
        relative.extend(context.config.extra_targets)
        if not relative:
            raise SyncRdmeError(
                f"no target files found for {context.name}; set `package.readme` or `extra-targets`",
                code="NO_TARGETS",
            )
        return [context.package.root / item for item in relative]

    def load_config(self, package_root: Path, manifest: Optional[PackageManifest] = None) -> SyncConfig:
        """Read ``.sync-rdme.yaml``, falling back to ``[package.metadata.sync-rdme]``."""

        config_path = package_root / CONFIG_FILENAME
        raw = self._load_raw_config(config_path)
        if not raw and manifest is not None and manifest.sync_metadata:
            raw = dict(manifest.sync_metadata)
            config_path = manifest.path
        if not raw:
            return SyncConfig.default()
        self._validate_against_schema(raw, config_path)
        return SyncConfig.from_dict(raw, config_path=config_path)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _package_context(self, workspace: Workspace, package: Package) -> PackageContext:
        manifest = PackageManifest.load(package.manifest_path, workspace_manifest=workspace.root_manifest)
        if manifest.name != package.name:
            raise ManifestError(f"{package.manifest_path} declares package {manifest.name!r}, expected {package.name!r}")
        config = self.load_config(package.root, manifest)
        return PackageContext(
            workspace=workspace,
            package=package,
            manifest=manifest,
            config=config,
            doc_trees=self._doc_trees,
            on_warning=lambda event, message, name=package.name: self._warn(name, event, message),
        )

    def _load_raw_config(self, config_path: Path) -> Dict[str, Any]:
        if not config_path.exists():
            return {}
        try:
            return yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise SyncConfigError(f"Invalid YAML in {config_path}: {exc}") from exc
        except OSError as exc:
            raise SyncConfigError(f"failed to read {config_path}: {exc}") from exc

    def _validate_against_schema(self, raw: Any, config_path: Path) -> None:
        if self._validator is None:
            self._validator = jsonschema.Draft202012Validator(load_schema(self.SCHEMA_RESOURCE))
        errors = sorted(self._validator.iter_errors(raw), key=lambda e: [str(part) for part in e.path])
        if not errors:
            return
        details = "; ".join(f"{'.'.join(str(part) for part in error.path) or '<root>'}: {error.message}" for error in errors)
        raise SyncConfigError(f"{config_path} does not match the configuration schema: {details}")

    def _warn(self, package: str, event: str, message: str) -> None:
        self._emit("warn", message)
        record_structured_event(
            self._settings,
            event,
            payload={"package": package, "message": message},
            level="warn",
            component="sync",
        )

    def _record_document(
        self,
        package: str,
        path: Path,
        status: str,
        error: Optional[SyncRdmeError],
        duration_ms: float,
    ) -> None:
        payload: Dict[str, Any] = {"package": package, "path": path.as_posix()}
        if error is not None:
            payload["code"] = error.code
        record_structured_event(
            self._settings,
            "sync.document",
            payload=payload,
            level="error" if error is not None else "info",
            status=status,
            component="sync",
            duration_ms=duration_ms,
        )

    def _emit(self, level: str, message: str) -> None:
        if self._progress is not None:
            self._progress(level, message)
