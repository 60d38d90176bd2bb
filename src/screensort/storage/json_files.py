"""
Atomic JSON file persistence with schema validation.
"""

import json
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import jsonschema

from ..core.exceptions import SchemaValidationError, StorageOperationError
from ..core.logging import get_logger

logger = get_logger(__name__)


def _json_default(obj):
    if isinstance(obj, datetime):
        return obj.isoformat()
    raise TypeError(f"Object of type {obj.__class__.__name__} is not JSON serializable")


def validate_against_schema(data: Any, schema: Dict[str, Any], file_path: Optional[Path] = None) -> None:
    """
    Validate data against a JSON schema.

    Raises:
        SchemaValidationError: If validation fails
    """
    try:
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as e:
        location = f" in {file_path}" if file_path else ""
        raise SchemaValidationError(f"Schema validation failed{location}: {e.message}")


def atomic_write_json(file_path: Path, data: Any, schema: Optional[Dict[str, Any]] = None) -> None:
    """
    Atomically write data as JSON: write a temp file in the same directory, then replace.

    Args:
        file_path: Path to write to
        data: JSON-serializable data
        schema: Optional schema the data must satisfy before it is written

    Raises:
        SchemaValidationError: If the data does not match the schema
        StorageOperationError: If the write fails
    """
    if schema is not None:
        validate_against_schema(data, schema, file_path)

    file_path = Path(file_path)
    temp_path = None
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=file_path.parent,
            prefix=f"{file_path.stem}_",
            suffix=".tmp"
        )
        temp_path = Path(temp_path_str)

        with os.fdopen(temp_fd, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False, default=_json_default)

        temp_path.replace(file_path)
        logger.debug(f"Atomically wrote file: {file_path}")
    except (OSError, TypeError, ValueError) as e:
        if temp_path is not None and temp_path.exists():
            temp_path.unlink(missing_ok=True)
        raise StorageOperationError(f"Failed to write file {file_path}: {e}", str(file_path), "write")


def read_json(file_path: Path, default: Any = None, schema: Optional[Dict[str, Any]] = None) -> Any:
    """
    Read a JSON file, returning ``default`` when it does not exist.

    Raises:
        SchemaValidationError: If the content is not valid JSON or fails the schema
        StorageOperationError: If the file cannot be read
    """
    file_path = Path(file_path)
    if not file_path.exists():
        return default
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise SchemaValidationError(f"Invalid JSON in file {file_path}: {e}")
    except OSError as e:
        raise StorageOperationError(f"Failed to read file {file_path}: {e}", str(file_path), "read")

    if schema is not None:
        validate_against_schema(data, schema, file_path)
    return data
