"""
Path Security Utilities
Prevents a requested filename from escaping the directory it is served from.
"""

import os
from pathlib import Path
from typing import Union


class UnsafePathError(ValueError):
    """Raised when a requested path resolves outside its base directory."""


def is_within(target: Union[str, Path], root: Union[str, Path]) -> bool:
    """
    Check whether target lies strictly inside root.

    Both paths are resolved (symlinks and .. segments) before comparison, so
    a symlink inside root that points elsewhere is rejected too.
    """
    target_path = Path(target).resolve(strict=False)
    root_path = Path(root).resolve(strict=False)

    try:
        common = os.path.commonpath([str(target_path), str(root_path)])
    except ValueError:
        # Paths are on different drives (Windows) or incompatible
        return False

    return Path(common) == root_path and target_path != root_path


def resolve_within(base_dir: Union[str, Path], filename: str) -> Path:
    """
    Join filename onto base_dir and return the canonical result.

    Raises:
        UnsafePathError: If filename is empty, contains a NUL byte or
            resolves outside base_dir (or to base_dir itself).
    """
    if not filename or "\0" in filename:
        raise UnsafePathError("Invalid filename")

    # An absolute filename replaces base_dir here and fails the check below
    resolved = (Path(base_dir) / filename).resolve(strict=False)
    if not is_within(resolved, base_dir):
        raise UnsafePathError(f"Path escapes its directory: {filename}")

    return resolved
