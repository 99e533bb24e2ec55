"""README synchronization application service."""

from __future__ import annotations

from .service import DocumentOutcome, SyncReport, SyncService, UpdateNotAllowedError, UpdatePolicy

__all__ = ["DocumentOutcome", "SyncReport", "SyncService", "UpdateNotAllowedError", "UpdatePolicy"]
