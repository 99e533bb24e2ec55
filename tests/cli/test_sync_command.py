from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import pytest

import syncrdme.cli.main as cli_main
from syncrdme.domain.workspace import Package, Workspace, WorkspaceError
from syncrdme.ports.vcs import Vcs, VcsDiscovery
from syncrdme.ports.workspace import WorkspaceProvider
from syncrdme.settings import RuntimeSettings

README = "# old\n<!-- sync-rdme title -->\n<!-- sync-rdme doc-summary -->\n"
DOC_TREE = {
    "root": "0",
    "index": {"0": {"name": "demo", "crate_id": 0, "docs": "Demo crate.", "links": {}, "inner": {"module": {"items": []}}}},
    "paths": {"0": {"crate_id": 0, "kind": "module", "path": ["demo"]}},
    "external_crates": {},
}
SYNCED = (
    "# old\n"
    "<!-- sync-rdme title [[ -->\n# demo\n<!-- sync-rdme ]] -->\n"
    "<!-- sync-rdme doc-summary [[ -->\nDemo crate.\n<!-- sync-rdme ]] -->\n"
)


class NoVcs(VcsDiscovery):
    def discover(self, path: Path) -> Optional[Vcs]:
        return None


@pytest.fixture()
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    root = tmp_path / "demo"
    root.mkdir()
    (root / "Cargo.toml").write_text('[package]\nname = "demo"\n', encoding="utf-8")
    (root / "README.md").write_text(README, encoding="utf-8")
    (tmp_path / "doc.json").write_text(json.dumps(DOC_TREE), encoding="utf-8")
    package = Package(id="demo 0.1.0", name="demo", manifest_path=root / "Cargo.toml")
    workspace = Workspace(root=root, target_dir=root / "target", packages=(package,), members=(package.id,))

    class Workspaces(WorkspaceProvider):
        def load(self, manifest_path: Optional[Path] = None) -> Workspace:
            return workspace

    home = tmp_path / "home"
    monkeypatch.setattr(cli_main, "SETTINGS", RuntimeSettings(home_dir=home, log_dir=home / "logs"))
    monkeypatch.setattr(cli_main, "CargoWorkspaceProvider", Workspaces)
    monkeypatch.setattr(cli_main, "GitDiscovery", NoVcs)
    return root


def sync(tmp_path: Path, *extra: str) -> int:
    return cli_main.main(["sync", "--rustdoc-json", str(tmp_path / "doc.json"), *extra])


def test_sync_updates_readme(project: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert sync(tmp_path, "--allow-no-vcs") == 0
    assert (project / "README.md").read_text(encoding="utf-8") == SYNCED
    out = capsys.readouterr().out
    assert f"updated {project / 'README.md'}" in out

    assert sync(tmp_path, "--allow-no-vcs") == 0
    assert f"already up-to-date {project / 'README.md'}" in capsys.readouterr().out


def test_sync_refuses_without_vcs(project: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert sync(tmp_path) == 1
    assert "error: no VCS detected for README" in capsys.readouterr().err
    assert (project / "README.md").read_text(encoding="utf-8") == README


def test_check_prints_diff(project: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert sync(tmp_path, "--check") == 1
    err = capsys.readouterr().err
    assert "error: README is not synced" in err
    assert "+Demo crate." in err


def test_quiet_hides_progress(project: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert sync(tmp_path, "--allow-no-vcs", "-q") == 0
    assert capsys.readouterr().out == ""


def test_json_report(project: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert sync(tmp_path, "--allow-no-vcs", "--json") == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["ok"] is True
    assert payload["summary"]["updated"] == 1
    assert payload["documents"][0]["path"] == (project / "README.md").as_posix()


def test_workspace_failure_as_json(
    project: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    class Broken(WorkspaceProvider):
        def load(self, manifest_path: Optional[Path] = None) -> Workspace:
            raise WorkspaceError("failed to get package metadata: no Cargo.toml")

    monkeypatch.setattr(cli_main, "CargoWorkspaceProvider", Broken)
    assert sync(tmp_path, "--json") == 1
    payload = json.loads(capsys.readouterr().out)
    assert payload == {
        "ok": False,
        "error": {
            "code": "WORKSPACE_METADATA_FAILED",
            "message": "failed to get package metadata: no Cargo.toml",
            "remediation": payload["error"]["remediation"],
        },
    }


def test_unknown_package(project: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert sync(tmp_path, "-p", "other") == 1
    assert "package not found: other" in capsys.readouterr().err


@pytest.mark.parametrize("argv", [["sync", "--workspace", "-p", "demo"], ["sync", "-v", "-q"], ["frobnicate"]])
def test_usage_errors_exit_with_two(argv) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_main.main(argv)
    assert excinfo.value.code == 2


def test_features_are_split() -> None:
    assert cli_main._split_features(["a,b", "c d", ""]) == ("a", "b", "c", "d")


def test_cargo_provider_gets_features() -> None:
    args = cli_main.build_parser().parse_args(["sync", "-F", "serde,cli", "--no-default-features", "--toolchain", "nightly"])
    provider = cli_main._doc_tree_provider(args, lambda level, message: None)
    package = Package(id="demo", name="demo", manifest_path=Path("Cargo.toml"))
    assert provider.command(package)[:9] == [
        "rustup",
        "run",
        "nightly",
        "cargo",
        "rustdoc",
        "--package",
        "demo",
        "--features",
        "serde",
    ]
    assert "--no-default-features" in provider.command(package)
