"""Subprocess-backed implementations of the ports."""
