from __future__ import annotations

from pathlib import Path

import pytest

from syncrdme.domain.config import ConfigKeyNotSetError, ManifestError, PackageManifest


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_reads_package_facts(tmp_path: Path) -> None:
    manifest_path = write(
        tmp_path / "Cargo.toml",
        """
[package]
name = "demo"
readme = "docs/README.md"
license = "MIT OR Apache-2.0"
repository = "https://github.com/owner/demo"
rust-version = "1.70"

[badges.maintenance]
status = "actively-developed"
""",
    )
    manifest = PackageManifest.load(manifest_path)
    assert manifest.name == "demo"
    assert manifest.readme == "docs/README.md"
    assert manifest.require("package.license") == "MIT OR Apache-2.0"
    assert manifest.require("package.repository") == "https://github.com/owner/demo"
    assert manifest.require("package.rust-version") == "1.70"
    assert manifest.require("badges.maintenance.status") == "actively-developed"


def test_readme_defaults_to_existing_file(tmp_path: Path) -> None:
    manifest_path = write(tmp_path / "Cargo.toml", '[package]\nname = "demo"\n')
    assert PackageManifest.load(manifest_path).readme is None
    write(tmp_path / "README.txt", "hello\n")
    assert PackageManifest.load(manifest_path).readme == "README.txt"


@pytest.mark.parametrize(("value", "expected"), [("true", "README.md"), ("false", None)])
def test_readme_booleans(tmp_path: Path, value: str, expected) -> None:
    write(tmp_path / "README.md", "hello\n")
    manifest_path = write(tmp_path / "Cargo.toml", f'[package]\nname = "demo"\nreadme = {value}\n')
    assert PackageManifest.load(manifest_path).readme == expected


def test_workspace_inheritance(tmp_path: Path) -> None:
    root = write(
        tmp_path / "Cargo.toml",
        '[workspace]\nmembers = ["crates/demo"]\n\n[workspace.package]\nlicense = "MIT"\nrust-version = "1.74"\n',
    )
    member = write(
        tmp_path / "crates" / "demo" / "Cargo.toml",
        '[package]\nname = "demo"\nlicense.workspace = true\nrust-version = { workspace = true }\n',
    )
    manifest = PackageManifest.load(member, workspace_manifest=root)
    assert manifest.license == "MIT"
    assert manifest.rust_version == "1.74"


def test_inheritance_without_workspace_value(tmp_path: Path) -> None:
    root = write(tmp_path / "Cargo.toml", '[workspace]\nmembers = ["demo"]\n')
    member = write(tmp_path / "demo" / "Cargo.toml", '[package]\nname = "demo"\nlicense.workspace = true\n')
    with pytest.raises(ManifestError):
        PackageManifest.load(member, workspace_manifest=root)


def test_missing_key_reports_key(tmp_path: Path) -> None:
    manifest_path = write(tmp_path / "Cargo.toml", '[package]\nname = "demo"\n')
    with pytest.raises(ConfigKeyNotSetError) as excinfo:
        PackageManifest.load(manifest_path).require("package.repository")
    assert excinfo.value.code == "CONFIG_KEY_NOT_SET"
    assert excinfo.value.key == "package.repository"


def test_sync_metadata_table(tmp_path: Path) -> None:
    manifest_path = write(
        tmp_path / "Cargo.toml",
        '[package]\nname = "demo"\n\n[package.metadata.sync-rdme.badge.badges]\nlicense = true\n',
    )
    assert PackageManifest.load(manifest_path).sync_metadata == {"badge": {"badges": {"license": True}}}
    assert PackageManifest.load(write(tmp_path / "b" / "Cargo.toml", '[package]\nname = "b"\n')).sync_metadata is None


@pytest.mark.parametrize(
    "text",
    [
        "[package\n",
        '[workspace]\nmembers = []\n',
        '[package]\nname = "demo"\nlicense = 3\n',
        '[package]\nname = "demo"\n[badges.maintenance]\nstatus = "abandoned"\n',
        '[package]\nname = "demo"\nmetadata = { sync-rdme = "yes" }\n',
    ],
)
def test_invalid_manifests(tmp_path: Path, text: str) -> None:
    manifest_path = write(tmp_path / "Cargo.toml", text)
    with pytest.raises(ManifestError) as excinfo:
        PackageManifest.load(manifest_path)
    assert excinfo.value.code == "MANIFEST_INVALID"


def test_unreadable_manifest(tmp_path: Path) -> None:
    with pytest.raises(ManifestError):
        PackageManifest.load(tmp_path / "Cargo.toml")
