"""Keep README files in sync with crate metadata and documentation."""

from __future__ import annotations

__version__ = "0.4.0"

__all__ = ["__version__"]
