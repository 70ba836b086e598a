"""Base filesystem interfaces and dataclasses.

Defines the capability contract a filesystem implementation (MemoryFS) offers,
the file-like surface its handles expose, and the portable FileInfo record.
"""

from __future__ import annotations

import enum
import stat as stat_mod
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, runtime_checkable


class Capability(enum.IntFlag):
    """Features a filesystem advertises to its callers."""

    WRITE = 1
    READ = 2
    READ_AND_WRITE = 4
    SEEK = 8
    TRUNCATE = 16
    LOCK = 32


@dataclass
class FileInfo:
    """Portable metadata for a single file, directory or symlink.

    Attributes:
        name: Base name of the entry (or of the path that was queried).
        size: Content length in bytes (0 for directories, target length
            for symlinks read with lstat).
        mode: ``st_mode`` value: file type bits plus permission bits.
        mtime: Last modification time (UTC).
    """

    name: str
    size: int
    mode: int
    mtime: datetime

    @property
    def is_dir(self) -> bool:
        return stat_mod.S_ISDIR(self.mode)

    @property
    def is_symlink(self) -> bool:
        return stat_mod.S_ISLNK(self.mode)

    @property
    def is_file(self) -> bool:
        return stat_mod.S_ISREG(self.mode)

    @property
    def perm(self) -> int:
        return stat_mod.S_IMODE(self.mode)

    @property
    def sys(self) -> None:
        """Native stat data; virtual entries have none."""
        return None

    # os.stat_result-compatible properties

    @property
    def st_size(self) -> int:
        return self.size

    @property
    def st_mode(self) -> int:
        return self.mode

    @property
    def st_mtime(self) -> float:
        return self.mtime.timestamp()


@runtime_checkable
class File(Protocol):
    """File-like surface returned by ``FileSystem.open_file``."""

    name: str

    def read(self, size: int = -1) -> bytes: ...

    def read_at(self, size: int, offset: int) -> bytes: ...

    def write(self, data: bytes) -> int: ...

    def write_at(self, data: bytes, offset: int) -> int: ...

    def seek(self, offset: int, whence: int = 0) -> int: ...

    def close(self) -> None: ...

    def truncate(self, size: int) -> None: ...

    def lock(self) -> None: ...

    def unlock(self) -> None: ...

    def stat(self) -> FileInfo: ...


@runtime_checkable
class FileSystem(Protocol):
    """Capability contract shared by filesystem implementations.

    Wrappers such as a root-confining layer are coded against this
    interface, so MemoryFS can stand in for a disk-backed implementation.
    """

    def open(self, path: str) -> File:
        """Open a file read-only."""
        ...

    def create(self, path: str) -> File:
        """Create or truncate a file, opened read-write."""
        ...

    def open_file(self, path: str, flag: int, perm: int = 0o666) -> File:
        """Open a file with ``os.O_*`` flags."""
        ...

    def stat(self, path: str) -> FileInfo:
        """Get metadata, following symlinks."""
        ...

    def lstat(self, path: str) -> FileInfo:
        """Get metadata without following symlinks."""
        ...

    def read_dir(self, path: str) -> list[FileInfo]:
        """List a directory, sorted by name."""
        ...

    def mkdir_all(self, path: str, perm: int = 0o777) -> None:
        """Create a directory and any missing parents."""
        ...

    def rename(self, src: str, dst: str) -> None:
        """Rename/move a file or directory."""
        ...

    def remove(self, path: str) -> None:
        """Remove a file, symlink or empty directory."""
        ...

    def join(self, *elem: str) -> str:
        """Join path elements."""
        ...

    def symlink(self, target: str, link: str) -> None:
        """Create a symbolic link."""
        ...

    def readlink(self, link: str) -> str:
        """Return a symbolic link's target."""
        ...

    def temp_file(self, dir: str = "", prefix: str = "") -> File:
        """Create a new uniquely named file."""
        ...

    def capabilities(self) -> Capability:
        """Features supported by this filesystem."""
        ...
