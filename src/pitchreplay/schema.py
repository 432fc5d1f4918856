"""JSON Schema validation for SkillCorner match metadata."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

import jsonschema
from jsonschema import Draft7Validator


def _load_schema() -> dict[str, Any]:
    """Load the match metadata JSON schema shipped with the package.

    Raises:
        FileNotFoundError: If schema file is missing.
        json.JSONDecodeError: If schema file is invalid JSON.
    """
    schema_path = Path(__file__).parent / "schemas" / "match_metadata.schema.json"

    if not schema_path.exists():
        raise FileNotFoundError(f"Schema file not found: {schema_path}")

    with open(schema_path, encoding="utf-8") as f:
        return json.load(f)


@lru_cache(maxsize=1)
def _create_validator() -> Draft7Validator:
    return Draft7Validator(_load_schema())


def _format_validation_error(error: jsonschema.ValidationError) -> str:
    """Format a validation error into a clear, actionable message."""
    path_str = ""
    if error.absolute_path:
        path_parts = []
        for part in error.absolute_path:
            if isinstance(part, int):
                path_parts.append(f"[{part}]")
            elif path_parts:
                path_parts.append(f".{part}")
            else:
                path_parts.append(str(part))
        path_str = f" at path '{''.join(path_parts)}'"

    if error.validator == "required":
        missing_props = error.message.split("'")[1::2]
        return f"Missing required field(s): {', '.join(missing_props)}{path_str}"

    elif error.validator == "type":
        expected_type = error.validator_value
        actual_type = type(error.instance).__name__
        return (
            f"Invalid type{path_str}. Expected {expected_type}, "
            f"got {actual_type}: {error.instance}"
        )

    elif error.validator == "minimum":
        return f"Value{path_str} must be >= {error.validator_value}. Got: {error.instance}"

    return f"{error.message}{path_str}"


def validate_match_metadata(obj: dict[str, Any]) -> None:
    """Validate a decoded <match_id>_match.json document.

    Args:
        obj: The match metadata dictionary.

    Raises:
        jsonschema.ValidationError: If the metadata is invalid, with a message
            naming the offending path.
        TypeError: If obj is not a dictionary.
    """
    if not isinstance(obj, dict):
        raise TypeError(f"Match metadata must be a dictionary, got {type(obj).__name__}")

    validator = _create_validator()

    try:
        validator.validate(obj)
    except jsonschema.ValidationError as e:
        raise jsonschema.ValidationError(_format_validation_error(e)) from e
