"""cargo-backed workspace discovery and rustdoc JSON generation."""

from __future__ import annotations

import json
import shlex
import subprocess
from pathlib import Path
from typing import Callable, Dict, List, Optional

from syncrdme.domain.errors import SyncRdmeError
from syncrdme.domain.rustdoc import DocTree
from syncrdme.domain.workspace import FeatureSelection, Package, Workspace, WorkspaceError
from syncrdme.ports.rustdoc import DocTreeProvider, RustdocError
from syncrdme.ports.workspace import WorkspaceProvider

Runner = Callable[..., subprocess.CompletedProcess]


def cargo_command(toolchain: Optional[str] = None) -> List[str]:
    if toolchain:
        return ["rustup", "run", toolchain, "cargo"]
    return ["cargo"]


class CargoWorkspaceProvider(WorkspaceProvider):
    def __init__(self, *, runner: Runner = subprocess.run) -> None:
        self._run = runner

    def load(self, manifest_path: Optional[Path] = None) -> Workspace:
        command = ["cargo", "metadata", "--format-version", "1", "--no-deps"]
        if manifest_path is not None:
            command.extend(["--manifest-path", str(manifest_path)])
        try:
            result = self._run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=True,
                text=True,
            )
        except (subprocess.CalledProcessError, FileNotFoundError) as exc:
            detail = getattr(exc, "stderr", None) or str(exc)
            raise WorkspaceError(f"failed to get package metadata: {detail.strip()}") from exc
        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError as exc:
            raise WorkspaceError(f"`cargo metadata` printed invalid JSON: {exc}") from exc
        return Workspace.from_metadata(data, manifest_path=manifest_path.resolve() if manifest_path else None)


class CargoRustdocProvider(DocTreeProvider):
    """Runs ``cargo rustdoc`` with JSON output, at most once per package."""

    def __init__(
        self,
        *,
        toolchain: Optional[str] = None,
        features: FeatureSelection = FeatureSelection(),
        runner: Runner = subprocess.run,
        on_command: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._toolchain = toolchain
        self._features = features
        self._run = runner
        self._on_command = on_command
        self._cache: Dict[str, DocTree] = {}
        self._failures: Dict[str, SyncRdmeError] = {}

    def command(self, package: Package) -> List[str]:
        return [
            *cargo_command(self._toolchain),
            "rustdoc",
            "--package",
            package.name,
            *self._features.cargo_args(),
            "--",
            "-Z",
            "unstable-options",
            "--output-format",
            "json",
        ]

    def output_path(self, workspace: Workspace, package: Package) -> Path:
        return workspace.target_dir / "doc" / f"{package.doc_stem}.json"

    def doc_tree(self, workspace: Workspace, package: Package) -> DocTree:
        cached = self._cache.get(package.id)
        if cached is not None:
            return cached
        if package.id in self._failures:
            raise self._failures[package.id]
        try:
            self._generate(workspace, package)
            tree = DocTree.load(self.output_path(workspace, package))
        except SyncRdmeError as exc:
            self._failures[package.id] = exc
            raise
        self._cache[package.id] = tree
        return tree

    def _generate(self, workspace: Workspace, package: Package) -> None:
        command = self.command(package)
        if self._on_command is not None:
            self._on_command(shlex.join(command))
        try:
            result = self._run(command, cwd=workspace.root)
        except OSError as exc:
            raise RustdocError(f"failed to create rustdoc process: {exc}") from exc
        if result.returncode != 0:
            raise RustdocError(f"rustdoc exited with non-zero status code: {result.returncode}")


class StaticDocTreeProvider(DocTreeProvider):
    """Serves a prebuilt rustdoc JSON file instead of running cargo."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._tree: Optional[DocTree] = None

    def doc_tree(self, workspace: Workspace, package: Package) -> DocTree:
        if self._tree is None:
            self._tree = DocTree.load(self._path)
        return self._tree
