"""
JSON file helpers shared by the local stores.

Writes are atomic (write to temp file, then rename) so a crash mid-write
never leaves a half-written document behind.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

# Sentinel for "file missing or unreadable"
MISSING = object()


def read_json(path: Path) -> Any:
    """
    Read a JSON document.

    Args:
        path: File to read.

    Returns:
        Parsed document, or MISSING if the file does not exist or is corrupt.
    """
    if not path.exists():
        return MISSING

    try:
        with open(path, 'r') as f:
            return json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError, IOError, OSError) as e:
        logger.warning(f"Failed to read {path.name}: {e}")
        return MISSING


def write_json_atomic(path: Path, data: Any, prefix: str = "focushub_") -> None:
    """
    Write a JSON document atomically.

    Args:
        path: Destination file.
        data: JSON-serializable document.
        prefix: Temp file prefix (useful when debugging leftovers).

    Raises:
        OSError: If the directory or file cannot be written.
        TypeError, ValueError: If data is not JSON-serializable.
    """
    # Serialize first so an unserializable document never touches disk
    payload = json.dumps(data, indent=2)

    path.parent.mkdir(parents=True, exist_ok=True)
    temp_fd, temp_path = tempfile.mkstemp(suffix='.tmp', prefix=prefix, dir=path.parent)

    try:
        with os.fdopen(temp_fd, 'w') as f:
            f.write(payload)

        # Atomic rename (POSIX) or replace (cross-platform)
        try:
            os.replace(temp_path, path)
        except OSError:
            # Fallback for systems where replace doesn't work
            if path.exists():
                path.unlink()
            os.rename(temp_path, path)
    except Exception:
        # Clean up temp file on error
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise
