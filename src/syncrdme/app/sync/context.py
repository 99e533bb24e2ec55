"""Per-package state shared by the content generators of one run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional

from syncrdme.domain.config import PackageManifest, SyncConfig
from syncrdme.domain.rustdoc import DocTree
from syncrdme.domain.workspace import Package, Workspace
from syncrdme.ports.rustdoc import DocTreeProvider

DOCS_RS_ROOT = "https://docs.rs/{name}/latest/"


@dataclass
class PackageContext:
    workspace: Workspace
    package: Package
    manifest: PackageManifest
    config: SyncConfig
    doc_trees: DocTreeProvider
    on_warning: Optional[Callable[[str, str], None]] = None
    warnings: List[str] = field(default_factory=list)
    _summary: Optional[str] = field(default=None, repr=False)

    @property
    def name(self) -> str:
        return self.package.name

    @property
    def html_root_url(self) -> str:
        return self.config.html_root_url or DOCS_RS_ROOT.format(name=self.package.name)

    def doc_tree(self) -> DocTree:
        return self.doc_trees.doc_tree(self.workspace, self.package)

    def warn(self, message: str, *, event: str = "sync.warning") -> None:
        self.warnings.append(message)
        if self.on_warning is not None:
            self.on_warning(event, message)

    def cached_summary(self) -> Optional[str]:
        return self._summary

    def remember_summary(self, text: str) -> None:
        self._summary = text
