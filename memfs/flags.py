"""Helpers for decoding ``os.O_*`` open flags and ``st_mode`` file types."""

import os
import stat as stat_mod

# O_RDONLY=0, O_WRONLY=1, O_RDWR=2
_ACCMODE = 0o3


def is_create(flag: int) -> bool:
    return flag & os.O_CREAT != 0


def is_exclusive(flag: int) -> bool:
    return flag & os.O_EXCL != 0


def is_append(flag: int) -> bool:
    return flag & os.O_APPEND != 0


def is_truncate(flag: int) -> bool:
    return flag & os.O_TRUNC != 0


def is_readable(flag: int) -> bool:
    """True if the access mode grants reads (O_RDONLY or O_RDWR)."""
    return flag & _ACCMODE in (os.O_RDONLY, os.O_RDWR)


def is_writable(flag: int) -> bool:
    """True if the access mode grants writes (O_WRONLY or O_RDWR)."""
    return flag & _ACCMODE in (os.O_WRONLY, os.O_RDWR)


def is_dir(mode: int) -> bool:
    return stat_mod.S_ISDIR(mode)


def is_symlink(mode: int) -> bool:
    return stat_mod.S_ISLNK(mode)


def is_regular(mode: int) -> bool:
    return stat_mod.S_ISREG(mode)


def file_type(mode: int) -> int:
    """Return the type bits of ``mode``, defaulting to a regular file."""
    return stat_mod.S_IFMT(mode) or stat_mod.S_IFREG
