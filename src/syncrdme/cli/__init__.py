"""Command line interface for sync-rdme."""
