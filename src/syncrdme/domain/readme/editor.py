"""README reading and crash-safe replacement."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from syncrdme.domain.errors import SyncRdmeError

from .scanner import ReadmeFile


class ReadmeIOError(SyncRdmeError):
    default_code = "README_READ_FAILED"


def read_readme(path: Path) -> ReadmeFile:
    try:
        # newline="" keeps \r\n intact so untouched text round-trips exactly
        with path.open("r", encoding="utf-8", newline="") as fh:
            text = fh.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise ReadmeIOError(f"failed to read markdown file: {path}: {exc}") from exc
    return ReadmeFile(path=str(path), text=text)


def write_readme(path: Path, text: str) -> None:
    """Replace ``path`` with ``text`` so readers see either version, never half."""

    try:
        atomic_write(path, text)
    except OSError as exc:
        raise ReadmeIOError(f"failed to write markdown file: {path}: {exc}", code="README_WRITE_FAILED") from exc


def atomic_write(path: Path, data: str) -> None:
    directory = path.parent
    fd, tmp_path = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(directory))
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data.encode("utf-8"))
            fh.flush()
            os.fsync(fh.fileno())
        if path.exists():
            os.chmod(tmp_path, path.stat().st_mode & 0o7777)
        os.replace(tmp_path, path)
        _fsync_directory(directory)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)


def _fsync_directory(directory: Path) -> None:
    if os.name != "posix":
        return
    dir_fd = os.open(str(directory), os.O_RDONLY)
    try:
        os.fsync(dir_fd)
    finally:
        os.close(dir_fd)
