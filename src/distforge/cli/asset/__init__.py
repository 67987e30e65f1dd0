"""Inspect the loaded assets."""
