"""Shared helpers (subprocess handling, YAML I/O)."""
