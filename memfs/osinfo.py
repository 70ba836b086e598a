"""Low-level identity metadata for real filesystem entries.

Virtual entries have no inode, owner or device. Collaborators that sit next
to a real-disk filesystem use ``get_os_file_info`` to pull those fields out
of an ``os.stat_result``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass(frozen=True)
class OSFileInfo:
    """Identity fields decoded from a native stat result.

    Attributes:
        nlink: Number of hard links.
        uid: Owning user id.
        gid: Owning group id.
        major: Device major number (from ``st_rdev``).
        minor: Device minor number (from ``st_rdev``).
        ino: Inode number.
        atime_ns: Access time in nanoseconds since the epoch.
        ctime_ns: Status change time in nanoseconds since the epoch.
    """

    nlink: int
    uid: int
    gid: int
    major: int
    minor: int
    ino: int
    atime_ns: int
    ctime_ns: int

    @property
    def atime(self) -> datetime:
        return _from_ns(self.atime_ns)

    @property
    def ctime(self) -> datetime:
        return _from_ns(self.ctime_ns)


def _from_ns(ns: int) -> datetime:
    seconds, nanos = divmod(ns, 1_000_000_000)
    return datetime.fromtimestamp(seconds, timezone.utc).replace(microsecond=nanos // 1000)


def get_os_file_info(info: object) -> OSFileInfo | None:
    """Decode identity fields from an ``os.stat_result``.

    Returns None when ``info`` is not a native stat result or the platform
    doesn't provide device numbers (e.g. Windows).
    """
    if not isinstance(info, os.stat_result):
        return None
    if not hasattr(info, "st_rdev") or not hasattr(os, "major"):
        return None

    return OSFileInfo(
        nlink=info.st_nlink,
        uid=info.st_uid,
        gid=info.st_gid,
        major=os.major(info.st_rdev),
        minor=os.minor(info.st_rdev),
        ino=info.st_ino,
        atime_ns=info.st_atime_ns,
        ctime_ns=info.st_ctime_ns,
    )
