"""git-backed file status checks."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable, Optional

from syncrdme.domain.errors import SyncRdmeError
from syncrdme.ports.vcs import FileStatus, Vcs, VcsDiscovery

Runner = Callable[..., subprocess.CompletedProcess]


class GitError(SyncRdmeError):
    default_code = "VCS_NOT_FOUND"


def parse_porcelain(output: str) -> FileStatus:
    """Fold ``git status --porcelain`` lines for one path into a single state."""

    status = FileStatus.CLEAN
    for line in output.splitlines():
        if len(line) < 2:
            continue
        index, worktree = line[0], line[1]
        if line.startswith("??") or worktree != " ":
            return FileStatus.DIRTY
        if index != " ":
            status = FileStatus.STAGED
    return status


class GitRepository(Vcs):
    def __init__(self, workdir: Path, *, runner: Runner = subprocess.run) -> None:
        self.workdir = workdir
        self._run = runner

    def status(self, path: Path) -> FileStatus:
        try:
            relative = path.resolve().relative_to(self.workdir)
        except ValueError as exc:
            raise GitError(f"{path} is outside the repository at {self.workdir}") from exc
        try:
            result = self._run(
                ["git", "status", "--porcelain", "--", relative.as_posix()],
                cwd=self.workdir,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=True,
                text=True,
            )
        except (subprocess.CalledProcessError, FileNotFoundError) as exc:
            raise GitError(f"failed to get VCS status for {path}: {exc}") from exc
        return parse_porcelain(result.stdout)


class GitDiscovery(VcsDiscovery):
    def __init__(self, *, runner: Runner = subprocess.run) -> None:
        self._run = runner

    def discover(self, path: Path) -> Optional[Vcs]:
        directory = path.resolve().parent
        try:
            result = self._run(
                ["git", "rev-parse", "--show-toplevel"],
                cwd=directory,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=True,
                text=True,
            )
        except (subprocess.CalledProcessError, FileNotFoundError):
            return None
        return GitRepository(Path(result.stdout.strip()).resolve(), runner=self._run)
