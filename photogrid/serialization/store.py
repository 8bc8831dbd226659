"""Reading and writing layout records as JSON files."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Union

from utils.validation import validate_layout_input_path, validate_layout_output_path

from .. import config
from ..errors import LayoutFormatError


LOGGER = logging.getLogger(__name__)


def save_layout_to_file(layout: Mapping[str, Any], filepath: Union[str, Path]) -> Path:
    """Write ``layout`` to ``filepath`` and return the resolved path.

    Raises:
        ValueError: If the target directory is missing or not writable, or the extension is not ``.json``
    """
    path = validate_layout_output_path(filepath, config.LAYOUT_FILE_EXTENSIONS)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(dict(layout), f, indent=2, ensure_ascii=False)
    LOGGER.info("Saved layout to %s", path)
    return path


def load_layout_from_file(filepath: Union[str, Path]) -> Dict[str, Any]:
    """Load a layout record from a JSON file.

    Raises:
        ValueError: If the file is missing, empty, too large or not a ``.json`` file
        LayoutFormatError: If the file does not hold a JSON object
    """
    path = validate_layout_input_path(
        filepath, config.LAYOUT_FILE_EXTENSIONS, config.MAX_LAYOUT_FILE_BYTES
    )
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise LayoutFormatError(f"{path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise LayoutFormatError(f"{path} does not contain a layout object")
    return data
