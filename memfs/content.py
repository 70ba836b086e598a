"""Resizable byte buffer backing regular files and symlinks."""

from __future__ import annotations

import errno


class Content:
    """A single growable byte sequence.

    The buffer length is the file size. A ``Content`` is shared by reference:
    every handle opened on the same entry reads and writes this one object.
    """

    def __init__(self, data: bytes = b"") -> None:
        self._bytes = bytearray(data)

    def __len__(self) -> int:
        return len(self._bytes)

    def len(self) -> int:
        return len(self._bytes)

    def getvalue(self) -> bytes:
        return bytes(self._bytes)

    def read_at(self, size: int, offset: int) -> bytes:
        """Return up to ``size`` bytes starting at ``offset``.

        A negative ``size`` reads to the end. Reading at or past the end
        returns ``b""``.
        """
        if offset < 0:
            raise OSError(errno.EINVAL, "negative offset")
        if offset >= len(self._bytes):
            return b""
        if size < 0:
            return bytes(self._bytes[offset:])
        return bytes(self._bytes[offset : offset + size])

    def write_at(self, data: bytes, offset: int) -> int:
        """Write ``data`` at ``offset``, zero-filling any gap past the end."""
        if offset < 0:
            raise OSError(errno.EINVAL, "negative offset")
        data = memoryview(data).cast("B")
        gap = offset - len(self._bytes)
        if gap > 0:
            self._bytes.extend(bytes(gap))
        self._bytes[offset : offset + len(data)] = data
        return len(data)

    def truncate(self, size: int) -> None:
        if size < 0:
            raise OSError(errno.EINVAL, "negative size")
        if size < len(self._bytes):
            del self._bytes[size:]
        else:
            self._bytes.extend(bytes(size - len(self._bytes)))

    def clear(self) -> None:
        self._bytes.clear()
