"""File utility functions for the auditor's persisted state and image exports."""

from __future__ import annotations

import json
import os
import time
from pathlib import Path
from typing import Any, Optional

from ..core.logger import log


def ensure_directory(directory_path: str) -> str:
    """Ensure a directory exists, creating it if necessary.

    Returns:
        Absolute path to the directory.
    """
    path = Path(directory_path).resolve()
    path.mkdir(parents=True, exist_ok=True)
    return str(path)


def get_timestamp() -> str:
    """Timestamp string in format YYYY-MM-DD_HH-MM-SS, used for export filenames."""
    return time.strftime("%Y-%m-%d_%H-%M-%S")


def get_timestamp_ms() -> int:
    """Current wall-clock time in milliseconds (transcript timestamps)."""
    return int(time.time() * 1000)


def save_json(data: Any, filepath: str, indent: int = 2) -> bool:
    """Serialize *data* to *filepath* atomically.

    The blob is written to a sibling temp file and moved into place so a crash
    mid-write never leaves a truncated stats file behind.

    Returns:
        True if save successful, False otherwise.
    """
    try:
        directory = os.path.dirname(filepath)
        if directory:
            ensure_directory(directory)

        tmp_path = f"{filepath}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=indent, ensure_ascii=False, default=str)
        os.replace(tmp_path, filepath)

        log.debug(f"Data saved to {filepath}")
        return True

    except (OSError, TypeError, ValueError) as e:
        log.error(f"Failed to save JSON to {filepath}: {e}")
        return False


def load_json(filepath: str) -> Optional[Any]:
    """Load data from a JSON file.

    Returns:
        Loaded data, or None if the file is missing or unreadable.
    """
    if not os.path.exists(filepath):
        log.debug(f"JSON file not found: {filepath}")
        return None

    try:
        with open(filepath, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        log.error(f"Failed to load JSON from {filepath}: {e}")
        return None

    log.debug(f"Data loaded from {filepath}")
    return data


def save_image_bytes(image_data: bytes, filepath: str) -> bool:
    """Write encoded image bytes (captured frame or remediation) to disk."""
    try:
        directory = os.path.dirname(filepath)
        if directory:
            ensure_directory(directory)

        with open(filepath, "wb") as f:
            f.write(image_data)

        log.debug(f"Image saved to {filepath}")
        return True

    except OSError as e:
        log.error(f"Failed to save image to {filepath}: {e}")
        return False
