"""Port for obtaining a package's rustdoc JSON tree."""

from __future__ import annotations

from abc import ABC, abstractmethod

from syncrdme.domain.errors import ContentsError
from syncrdme.domain.rustdoc import DocTree
from syncrdme.domain.workspace import Package, Workspace


class DocTreeProvider(ABC):
    @abstractmethod
    def doc_tree(self, workspace: Workspace, package: Package) -> DocTree:
        """Produce (or locate) and load the documentation tree of ``package``."""


class RustdocError(ContentsError):
    """Raised when rustdoc cannot produce the documentation tree."""

    default_code = "RUSTDOC_FAILED"
