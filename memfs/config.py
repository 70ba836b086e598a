"""Configuration for in-memory filesystems.

Provides the MemoryFSConfig dataclass and the connect_fs factory function
for building a configured MemoryFS.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .memory import MemoryFS

# Linux MAXSYMLINKS
DEFAULT_MAX_SYMLINK_DEPTH = 40


@dataclass
class MemoryFSConfig:
    """Configuration for the in-memory filesystem.

    Attributes:
        max_symlink_depth: Maximum number of symlinks followed while resolving
            one path before failing with ELOOP.
        strict_read_dir: If True, read_dir() on a regular file raises
            NotADirectoryError. If False, it returns an empty listing.
        temp_dir: Directory used by temp_file() when none is given.
    """

    max_symlink_depth: int = DEFAULT_MAX_SYMLINK_DEPTH
    strict_read_dir: bool = True
    temp_dir: str = "/tmp"

    def __post_init__(self) -> None:
        if self.max_symlink_depth < 1:
            raise ValueError(
                f"max_symlink_depth must be at least 1, got {self.max_symlink_depth}"
            )
        if not self.temp_dir:
            raise ValueError("temp_dir must not be empty")


def connect_fs(**kwargs) -> "MemoryFS":
    """Create a configured in-memory filesystem.

    Args:
        **kwargs: MemoryFSConfig fields (max_symlink_depth, strict_read_dir,
            temp_dir).

    Returns:
        A new, empty MemoryFS.

    Examples:
        >>> fs = connect_fs(strict_read_dir=False)
        >>> fs.config.strict_read_dir
        False
    """
    known = {f.name for f in fields(MemoryFSConfig)}
    unexpected = [key for key in kwargs if key not in known]
    if unexpected:
        raise ValueError(f"Unexpected arguments for memory fs: {unexpected}")

    from .memory import MemoryFS

    return MemoryFS(config=MemoryFSConfig(**kwargs))
