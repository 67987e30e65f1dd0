"""Test helpers for distforge."""
