"""Loading of the matcher's pattern snapshot from a JSON file."""

import json
import jsonschema
from pathlib import Path
from typing import Any, List, Tuple, Union
import logging

from ..exceptions import ConfigurationError
from ..models import Pattern

logger = logging.getLogger(__name__)

PATTERN_FILE_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "id": {"type": "integer"},
            "pattern": {"type": "string"},
            "component": {"type": "string"},
            "version": {"type": "integer"},
            "owner": {"type": "integer"}
        },
        "required": ["pattern"]
    }
}


def _load_json(file_path: Path) -> Any:
    """Load and parse a JSON file."""
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Error loading {file_path}: {str(e)}")
        raise ConfigurationError(f"Failed to load {file_path}: {str(e)}") from e


def parse_patterns(data: Any) -> Tuple[Pattern, ...]:
    """
    Validate pattern definitions and compile them.

    Args:
        data: Decoded JSON array of pattern objects

    Returns:
        Compiled patterns, in file order

    Raises:
        ConfigurationError: If the data does not fit the pattern file schema
        CompileError: If any expression fails to compile
    """
    try:
        jsonschema.validate(instance=data, schema=PATTERN_FILE_SCHEMA)
    except jsonschema.exceptions.ValidationError as e:
        raise ConfigurationError(f"Invalid pattern file: {e.message}") from e

    patterns: List[Pattern] = [Pattern.from_dict(item) for item in data]
    return tuple(patterns)


def load_patterns(file_path: Union[str, Path]) -> Tuple[Pattern, ...]:
    """Load, validate and compile the patterns in a JSON file."""
    file_path = Path(file_path)
    patterns = parse_patterns(_load_json(file_path))
    logger.info(f"Loaded {len(patterns)} patterns from {file_path}")
    return patterns
