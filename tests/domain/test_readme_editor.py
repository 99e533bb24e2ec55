from __future__ import annotations

import os
from pathlib import Path

import pytest

from syncrdme.domain.readme.editor import ReadmeIOError, read_readme, write_readme


def test_read_preserves_line_endings(tmp_path: Path) -> None:
    target = tmp_path / "README.md"
    target.write_bytes(b"a\r\nb\n")
    assert read_readme(target).text == "a\r\nb\n"


def test_missing_file_is_reported(tmp_path: Path) -> None:
    with pytest.raises(ReadmeIOError) as excinfo:
        read_readme(tmp_path / "missing.md")
    assert excinfo.value.code == "README_READ_FAILED"


def test_write_replaces_file_and_keeps_mode(tmp_path: Path) -> None:
    target = tmp_path / "README.md"
    target.write_text("old\n", encoding="utf-8")
    os.chmod(target, 0o640)
    write_readme(target, "new\n")
    assert target.read_text(encoding="utf-8") == "new\n"
    assert target.stat().st_mode & 0o777 == 0o640
    assert [entry.name for entry in tmp_path.iterdir()] == ["README.md"]


def test_write_failure_has_write_code(tmp_path: Path) -> None:
    with pytest.raises(ReadmeIOError) as excinfo:
        write_readme(tmp_path / "missing-dir" / "README.md", "text\n")
    assert excinfo.value.code == "README_WRITE_FAILED"
