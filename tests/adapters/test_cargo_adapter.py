from __future__ import annotations

import json
import subprocess
from pathlib import Path

import pytest

from syncrdme.adapters.cargo import CargoRustdocProvider, CargoWorkspaceProvider, StaticDocTreeProvider, cargo_command
from syncrdme.domain.workspace import FeatureSelection, Package, Workspace, WorkspaceError
from syncrdme.ports.rustdoc import RustdocError

DOC_TREE = {
    "root": "0",
    "index": {"0": {"name": "demo", "crate_id": 0, "docs": "Demo crate.", "links": {}, "inner": {"module": {"items": []}}}},
    "paths": {"0": {"crate_id": 0, "kind": "module", "path": ["demo"]}},
    "external_crates": {},
}


def make_workspace(root: Path) -> tuple[Workspace, Package]:
    package = Package(id="demo 0.1.0", name="demo-lib", manifest_path=root / "Cargo.toml")
    workspace = Workspace(root=root, target_dir=root / "target", packages=(package,), members=(package.id,))
    return workspace, package


class FakeRustdoc:
    def __init__(self, returncode: int = 0, tree: dict | None = DOC_TREE) -> None:
        self.returncode = returncode
        self.tree = tree
        self.calls = []

    def __call__(self, command, **kwargs):
        self.calls.append(command)
        cwd = Path(kwargs["cwd"])
        if self.tree is not None:
            output = cwd / "target" / "doc" / "demo_lib.json"
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(json.dumps(self.tree), encoding="utf-8")
        return subprocess.CompletedProcess(command, self.returncode)


def test_cargo_command_with_toolchain() -> None:
    assert cargo_command() == ["cargo"]
    assert cargo_command("nightly") == ["rustup", "run", "nightly", "cargo"]


def test_rustdoc_command_line(tmp_path: Path) -> None:
    _, package = make_workspace(tmp_path)
    provider = CargoRustdocProvider(toolchain="nightly", features=FeatureSelection(features=("full",), no_default_features=True))
    assert provider.command(package) == [
        "rustup",
        "run",
        "nightly",
        "cargo",
        "rustdoc",
        "--package",
        "demo-lib",
        "--features",
        "full",
        "--no-default-features",
        "--",
        "-Z",
        "unstable-options",
        "--output-format",
        "json",
    ]


def test_doc_tree_is_generated_once(tmp_path: Path) -> None:
    workspace, package = make_workspace(tmp_path)
    fake = FakeRustdoc()
    commands = []
    provider = CargoRustdocProvider(runner=fake, on_command=commands.append)

    first = provider.doc_tree(workspace, package)
    second = provider.doc_tree(workspace, package)

    assert first is second
    assert first.root_item.docs == "Demo crate."
    assert len(fake.calls) == 1
    assert commands == ["cargo rustdoc --package demo-lib -- -Z unstable-options --output-format json"]


def test_failures_are_cached(tmp_path: Path) -> None:
    workspace, package = make_workspace(tmp_path)
    fake = FakeRustdoc(returncode=101, tree=None)
    provider = CargoRustdocProvider(runner=fake)

    with pytest.raises(RustdocError) as first:
        provider.doc_tree(workspace, package)
    with pytest.raises(RustdocError) as second:
        provider.doc_tree(workspace, package)

    assert first.value is second.value
    assert first.value.code == "RUSTDOC_FAILED"
    assert len(fake.calls) == 1


def test_missing_cargo_binary(tmp_path: Path) -> None:
    workspace, package = make_workspace(tmp_path)

    def missing(command, **kwargs):
        raise FileNotFoundError("cargo")

    with pytest.raises(RustdocError):
        CargoRustdocProvider(runner=missing).doc_tree(workspace, package)


def test_static_provider_reads_file(tmp_path: Path) -> None:
    workspace, package = make_workspace(tmp_path)
    path = tmp_path / "doc.json"
    path.write_text(json.dumps(DOC_TREE), encoding="utf-8")
    provider = StaticDocTreeProvider(path)
    assert provider.doc_tree(workspace, package).root == "0"


def test_workspace_metadata(tmp_path: Path) -> None:
    metadata = {
        "workspace_root": str(tmp_path),
        "target_directory": str(tmp_path / "target"),
        "packages": [{"id": "demo 0.1.0", "name": "demo", "manifest_path": str(tmp_path / "Cargo.toml")}],
        "workspace_members": ["demo 0.1.0"],
    }
    seen = []

    def runner(command, **kwargs):
        seen.append(command)
        return subprocess.CompletedProcess(command, 0, stdout=json.dumps(metadata), stderr="")

    workspace = CargoWorkspaceProvider(runner=runner).load(tmp_path / "Cargo.toml")

    assert seen[0][:5] == ["cargo", "metadata", "--format-version", "1", "--no-deps"]
    assert seen[0][-2:] == ["--manifest-path", str(tmp_path / "Cargo.toml")]
    assert [package.name for package in workspace.select()] == ["demo"]


def test_workspace_metadata_failure() -> None:
    def runner(command, **kwargs):
        raise subprocess.CalledProcessError(101, command, stderr="error: could not find `Cargo.toml`\n")

    with pytest.raises(WorkspaceError, match="could not find"):
        CargoWorkspaceProvider(runner=runner).load()
