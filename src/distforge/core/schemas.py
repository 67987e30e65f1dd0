"""Shared schema validation utilities.

distforge validates the JSON documents assets print during discovery using
JSON Schema. Schemas are stored as YAML files under ``distforge.data/schemas/``
and loaded in a single, consistent way.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, List

from jsonschema import Draft202012Validator

from distforge.data import read_yaml


@lru_cache(maxsize=8)
def load_schema(schema_name: str) -> Dict[str, Any]:
    """Load a bundled schema by name.

    Automatically appends ``.schema.yaml`` if no extension is present.

    Raises:
        FileNotFoundError: If the schema file doesn't exist.
        ValueError: If the schema is not a YAML mapping.
    """
    lowered = schema_name.lower()
    if not (lowered.endswith(".yaml") or lowered.endswith(".yml")):
        schema_name = f"{schema_name}.schema.yaml"
    schema = read_yaml("schemas", schema_name)
    if not isinstance(schema, dict) or not schema:
        raise ValueError(f"Schema must be a YAML mapping: {schema_name}")
    return schema


def validation_errors(payload: Any, schema_name: str) -> List[str]:
    """Validate ``payload`` and return readable error messages (empty if valid)."""
    validator = Draft202012Validator(load_schema(schema_name))
    errors: List[str] = []
    for error in sorted(validator.iter_errors(payload), key=lambda e: [str(p) for p in e.path]):
        if error.path:
            path_str = ".".join(str(p) for p in error.path)
            errors.append(f"{path_str}: {error.message}")
        else:
            errors.append(error.message)
    return errors


__all__ = [
    "load_schema",
    "validation_errors",
]
