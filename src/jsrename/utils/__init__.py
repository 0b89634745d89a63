"""Utility modules: configuration constants and file I/O."""
