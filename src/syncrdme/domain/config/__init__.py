"""Package configuration: ``.sync-rdme.yaml`` and ``Cargo.toml`` facts."""

from __future__ import annotations

from .manifest import ConfigKeyNotSetError, ManifestError, PackageManifest
from .value_objects import BadgeGroup, BadgeItem, SyncConfig, SyncConfigError, Workflow

__all__ = [
    "BadgeGroup",
    "BadgeItem",
    "ConfigKeyNotSetError",
    "ManifestError",
    "PackageManifest",
    "SyncConfig",
    "SyncConfigError",
    "Workflow",
]
