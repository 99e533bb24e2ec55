"""Port for asking version control about a file's state."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional


class FileStatus(enum.Enum):
    CLEAN = "clean"
    STAGED = "staged"
    DIRTY = "dirty"


class Vcs(ABC):
    @abstractmethod
    def status(self, path: Path) -> FileStatus:
        """Working-tree state of ``path``."""


class VcsDiscovery(ABC):
    @abstractmethod
    def discover(self, path: Path) -> Optional[Vcs]:
        """Repository containing ``path``, or ``None`` outside version control."""
