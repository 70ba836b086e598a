"""File handle implementation over shared in-memory content."""

from __future__ import annotations

import errno
import io
import os
import posixpath

from .base import FileInfo
from .flags import is_append, is_readable, is_truncate, is_writable
from .storage import Entry


class MemoryFile:
    """File-like handle bound to one storage entry.

    Handles opened on the same entry share its ``Content`` buffer, so a
    write through one is visible to all others at once. Each handle keeps
    its own position and open flags.

    Attributes:
        name: Path the handle was opened on (after symlink resolution).
        flag: The ``os.O_*`` flags the handle was opened with.
    """

    def __init__(self, entry: Entry, name: str, flag: int):
        """Open a new handle on ``entry``.

        ``O_TRUNC`` empties the shared buffer immediately and ``O_APPEND``
        starts the handle at the end of the buffer.

        Args:
            entry: The regular-file or symlink entry to bind to.
            name: Path used to open the file.
            flag: Open flags.
        """
        if entry.content is None:
            raise IsADirectoryError(errno.EISDIR, "Is a directory", name)

        self._entry = entry
        self._content = entry.content
        self.name = name
        self.flag = flag
        self._position = 0
        self._closed = False

        if is_truncate(flag):
            self._content.clear()
            self._entry.touch()

        if is_append(flag):
            self._position = len(self._content)

    def _check_open(self) -> None:
        if self._closed:
            raise ValueError(f"I/O operation on closed file: {self.name}")

    def _check_readable(self) -> None:
        self._check_open()
        if not is_readable(self.flag):
            raise io.UnsupportedOperation("read")

    def _check_writable(self) -> None:
        self._check_open()
        if not is_writable(self.flag):
            raise io.UnsupportedOperation("write")

    def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes from the current position.

        Returns ``b""`` only once no bytes remain.
        """
        data = self.read_at(size, self._position)
        self._position += len(data)
        return data

    def readinto(self, b: bytearray | memoryview) -> int:
        data = self.read(len(b))
        n = len(data)
        b[:n] = data
        return n

    def read_at(self, size: int, offset: int) -> bytes:
        """Read up to ``size`` bytes at ``offset`` without moving the position."""
        self._check_readable()
        return self._content.read_at(size, offset)

    def write(self, data: bytes) -> int:
        """Write ``data`` at the current position (or at the end for O_APPEND)."""
        self._check_writable()
        if is_append(self.flag):
            self._position = len(self._content)
        return self.write_at(data, self._position)

    def write_at(self, data: bytes, offset: int) -> int:
        """Write ``data`` at ``offset`` and move the position past it."""
        self._check_writable()
        n = self._content.write_at(data, offset)
        self._position = offset + n
        self._entry.touch()
        return n

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        """Move the position. The result is not clamped to the buffer."""
        self._check_open()
        if whence == os.SEEK_SET:
            self._position = offset
        elif whence == os.SEEK_CUR:
            self._position += offset
        elif whence == os.SEEK_END:
            self._position = len(self._content) + offset
        else:
            raise ValueError(f"Invalid whence ({whence})")
        return self._position

    def tell(self) -> int:
        self._check_open()
        return self._position

    def truncate(self, size: int) -> None:
        """Resize the shared buffer, zero-padding when it grows."""
        self._check_writable()
        self._content.truncate(size)
        self._entry.touch()

    def flush(self) -> None:
        """Flush is a no-op (writes go straight to the shared buffer)."""
        self._check_open()

    def lock(self) -> None:
        """Lock is a no-op; no mutual exclusion is provided."""

    def unlock(self) -> None:
        """Unlock is a no-op."""

    def stat(self) -> FileInfo:
        self._check_open()
        return self._entry.stat(name=posixpath.basename(self.name))

    def readable(self) -> bool:
        return is_readable(self.flag)

    def writable(self) -> bool:
        return is_writable(self.flag)

    def seekable(self) -> bool:
        return True

    def close(self) -> None:
        """Close the handle. Closing twice raises ValueError."""
        self._check_open()
        self._closed = True

    @property
    def closed(self) -> bool:
        """Return True if the file is closed."""
        return self._closed

    def __enter__(self) -> "MemoryFile":
        return self

    def __exit__(self, *args: object) -> None:
        if not self._closed:
            self.close()

    def __repr__(self) -> str:
        return f"<MemoryFile name={self.name!r} flag={self.flag:#o}>"
