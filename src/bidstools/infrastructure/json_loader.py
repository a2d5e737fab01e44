"""
JSON loading for sidecars and dataset_description.json.
"""

import json
from pathlib import Path
from typing import Any

from .logging_config import get_logger

logger = get_logger(__name__)


def load_json_ordered(file_path: Path) -> dict[str, Any]:
    """
    Load a JSON object, keeping the key order of the file.

    Args:
        file_path: Path to the JSON file.

    Returns:
        Dictionary in file key order.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not valid JSON or not a JSON object.
    """
    with open(file_path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in {file_path}, got {type(data).__name__}")

    logger.debug(f"Loaded {len(data)} keys from {Path(file_path).name}")
    return data
