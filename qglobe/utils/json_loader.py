from __future__ import annotations

import json
from pathlib import Path
from typing import Any


class SettingsError(RuntimeError):
    """Raised when a JSON file cannot be loaded as an object."""


def _parse_json(text: str, path: Path) -> dict[str, Any]:
    """Parse JSON text and ensure the top-level value is an object."""
    data = json.loads(text)
    if not isinstance(data, dict):
        raise SettingsError(f"JSON must be an object at top-level: {path}")
    return data


def read_json_dict(path: Path, *, logger: Any = None) -> dict[str, Any]:
    """
    Read a JSON file whose top-level value is an object.

    The file is never modified.
    :param path: JSON file
    :param logger: Optional logger; failures are logged at debug before raising
    :return: Parsed object
    :raises SettingsError: if the file is missing, unreadable, broken or not an object
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        msg = f"JSON file missing: {path}"
        exc: Exception = e
    except OSError as e:
        msg = f"Failed to read JSON from {path}: ({e})"
        exc = e
    else:
        try:
            return _parse_json(text, path)
        except json.JSONDecodeError as e:
            msg = f"Failed to parse JSON from {path}: ({e})"
            exc = e

    if logger is not None:
        logger.debug(msg)
    raise SettingsError(msg) from exc
