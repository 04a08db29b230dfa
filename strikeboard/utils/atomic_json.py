"""
Utility functions for atomic JSON file operations.

Prevents corruption by ensuring files are never left in a half-written state.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any


def atomic_json_save(data: dict[str, Any], output_file: str | Path) -> Path:
    """
    Save JSON data to file using atomic write operations.

    1. Write to a temporary file in the target directory
    2. Validate the temp file parses back as JSON
    3. Atomically replace the final path with the temp file

    If any step fails the temp file is removed and the target is untouched.

    Args:
        data: Dictionary to save as JSON
        output_file: Target file path

    Returns:
        Path of the written file

    Raises:
        OSError: If the directory cannot be created or the file cannot be written
        TypeError: If data is not JSON serializable
    """
    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    temp_fd, temp_path = tempfile.mkstemp(suffix=".json.tmp", dir=output_path.parent, text=True)

    try:
        with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        with open(temp_path, encoding="utf-8") as f:
            json.load(f)

        os.replace(temp_path, output_path)
        return output_path

    except BaseException:
        if os.path.exists(temp_path):
            os.remove(temp_path)
        raise
