"""File I/O utilities for JSON and JSON-lines persistence."""
import json
from pathlib import Path
from typing import Any, Iterator, Optional
import logging

logger = logging.getLogger(__name__)


def save_json(file_path: Path, data: Any, ensure_dir: bool = True) -> bool:
    """
    Save data to JSON file with error handling.

    Writes to a temporary sibling first and renames it into place, so an
    interrupted write never leaves a truncated checkpoint behind.

    Args:
        file_path: Path to save JSON file
        data: Data to serialize
        ensure_dir: If True, create parent directories

    Returns:
        True if successful, False otherwise
    """
    file_path = Path(file_path)
    tmp_path = file_path.with_name(file_path.name + ".tmp")
    try:
        if ensure_dir:
            file_path.parent.mkdir(parents=True, exist_ok=True)

        with open(tmp_path, 'w') as f:
            json.dump(data, f, indent=2)
        tmp_path.replace(file_path)
        return True
    except (OSError, TypeError, ValueError) as e:
        logger.error(f"Failed to save JSON to {file_path}: {e}")
        return False


def load_json(file_path: Path, default: Optional[Any] = None) -> Any:
    """
    Load data from JSON file with error handling.

    Args:
        file_path: Path to JSON file
        default: Value to return if file doesn't exist or fails to load

    Returns:
        Loaded data or default value
    """
    file_path = Path(file_path)
    try:
        if not file_path.exists():
            return default

        with open(file_path, 'r') as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load JSON from {file_path}: {e}")
        return default


def append_json_line(file_path: Path, data: Any, ensure_dir: bool = True) -> bool:
    """Append one JSON object as a line. Returns False (and logs) on failure."""
    file_path = Path(file_path)
    try:
        if ensure_dir:
            file_path.parent.mkdir(parents=True, exist_ok=True)
        with open(file_path, 'a') as f:
            f.write(json.dumps(data) + "\n")
        return True
    except (OSError, TypeError, ValueError) as e:
        logger.error(f"Failed to append JSON line to {file_path}: {e}")
        return False


def read_json_lines(file_path: Path) -> Iterator[Any]:
    """
    Yield one parsed object per non-blank line.

    Raises:
        OSError: if the file can't be read
        ValueError: on a malformed line (with its line number)
    """
    with open(file_path, 'r') as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError as e:
                raise ValueError(f"{file_path}:{line_no}: invalid JSON: {e}") from e
