"""File operation utilities."""

from pathlib import Path
from typing import Optional, Union


def ensure_dir(path: Path) -> Path:
    """Ensure directory exists, creating it if necessary.

    Args:
        path: Directory path to ensure exists

    Returns:
        The path object
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def read_existing_file(path: Union[str, Path]) -> Optional[bytes]:
    """Read a file's bytes, or return None if it does not exist.

    Args:
        path: File path

    Returns:
        File contents, or None when the path is missing or not a file
    """
    path = Path(path)
    if not path.is_file():
        return None
    return path.read_bytes()
