"""Port for discovering the cargo workspace."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from syncrdme.domain.workspace import Workspace


class WorkspaceProvider(ABC):
    """Resolves the workspace containing a manifest."""

    @abstractmethod
    def load(self, manifest_path: Optional[Path] = None) -> Workspace:
        """Return the workspace for ``manifest_path`` (or the current directory)."""
