"""Boundaries to cargo, rustdoc and version control."""
