"""Packaged resources for sync-rdme."""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from typing import Any, Dict

__all__ = ["load_schema"]


@lru_cache(maxsize=None)
def load_schema(name: str) -> Dict[str, Any]:
    """Return the JSON schema ``name`` shipped with the package."""

    resource = resources.files(__name__) / name
    with resources.as_file(resource) as schema_path:
        return json.loads(schema_path.read_text(encoding="utf-8"))
