"""Run asset-provided tasks."""
