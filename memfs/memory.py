"""In-memory filesystem implementation."""

from __future__ import annotations

import errno as _errno
import logging
import os
import posixpath
import random
import stat as stat_mod
from datetime import datetime, timezone

from .base import Capability, FileInfo
from .config import MemoryFSConfig
from .flags import is_create, is_exclusive, is_regular, is_symlink
from .memoryfile import MemoryFile
from .storage import Entry, Storage, normalize

logger = logging.getLogger(__name__)

_TEMP_FILE_ATTEMPTS = 10_000


def _base(path: str) -> str:
    return posixpath.basename(path) or "/"


class MemoryFS:
    """Filesystem held entirely in memory.

    Entries (files, directories, symlinks) live in a path-indexed
    ``Storage`` tree. Files are opened as ``MemoryFile`` handles that
    behave like file descriptors: several handles on one file share its
    bytes but keep their own position and open flags.

    Paths are absolute; relative paths are anchored at ``/``. Wrap this
    class in a root-confining layer to map caller paths onto it.

    Example:
        >>> fs = MemoryFS()
        >>> fs.mkdir_all("/a/b")
        >>> with fs.create("/a/b/f.txt") as f:
        ...     f.write(b"hello")
        5
        >>> fs.stat("/a/b/f.txt").size
        5
        >>> [info.name for info in fs.read_dir("/a/b")]
        ['f.txt']
    """

    def __init__(self, config: MemoryFSConfig | None = None) -> None:
        self.config = config if config is not None else MemoryFSConfig()
        self._storage = Storage()
        self._random = random.Random()

    # -------------------------------------------------------------------------
    # Opening files
    # -------------------------------------------------------------------------

    def open(self, path: str) -> MemoryFile:
        """Open a file for reading."""
        return self.open_file(path, os.O_RDONLY)

    def create(self, path: str) -> MemoryFile:
        """Create (or truncate) a file and open it for reading and writing."""
        return self.open_file(path, os.O_RDWR | os.O_CREAT | os.O_TRUNC, 0o666)

    def open_file(self, path: str, flag: int, perm: int = 0o666) -> MemoryFile:
        """Open a file with ``os.O_*`` flags.

        Symlinks are followed. With ``O_CREAT`` a missing file (or the
        missing target of a dangling symlink) is created with ``perm``.

        Args:
            path: File path to open.
            flag: Combination of os.O_CREAT, O_EXCL, O_TRUNC, O_APPEND and
                one of O_RDONLY, O_WRONLY, O_RDWR.
            perm: Permission bits for a newly created file. Passing
                ``stat.S_IFLNK`` type bits creates a symlink entry.

        Returns:
            A new MemoryFile handle.

        Raises:
            FileNotFoundError: If the file doesn't exist and O_CREAT is unset.
            FileExistsError: If the path exists and O_EXCL is set.
            IsADirectoryError: If the path is a directory.
            OSError: ELOOP if symlinks nest deeper than max_symlink_depth.
        """
        path = normalize(path)
        if is_exclusive(flag) and self._storage.has(path):
            raise FileExistsError(_errno.EEXIST, "File exists", path)

        target, entry = self._resolve(path)
        if entry is None:
            if not is_create(flag):
                raise FileNotFoundError(_errno.ENOENT, "No such file or directory", path)
            if is_symlink(perm):
                mode = stat_mod.S_IFLNK | stat_mod.S_IMODE(perm)
            else:
                mode = stat_mod.S_IFREG | stat_mod.S_IMODE(perm)
            entry = self._storage.new(target, mode, flag)

        if entry.is_dir:
            raise IsADirectoryError(_errno.EISDIR, "Is a directory", path)

        return MemoryFile(entry, target, flag)

    def temp_file(self, dir: str = "", prefix: str = "") -> MemoryFile:
        """Create a new, uniquely named file opened read-write.

        Args:
            dir: Directory to create the file in (default: config.temp_dir).
            prefix: Leading part of the generated name.
        """
        dir = dir or self.config.temp_dir
        for _ in range(_TEMP_FILE_ATTEMPTS):
            name = self.join(dir, f"{prefix}{self._random.randrange(10**9):09d}")
            try:
                return self.open_file(name, os.O_RDWR | os.O_CREAT | os.O_EXCL, 0o600)
            except FileExistsError:
                continue
        raise FileExistsError(_errno.EEXIST, "No unique temporary name available", dir)

    def read_file(self, path: str) -> bytes:
        """Read a whole file as bytes."""
        with self.open(path) as f:
            return f.read()

    def write_file(self, path: str, content: bytes, perm: int = 0o666) -> None:
        """Create or replace a file with ``content``."""
        with self.open_file(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, perm) as f:
            f.write(content)

    # -------------------------------------------------------------------------
    # Metadata
    # -------------------------------------------------------------------------

    def stat(self, path: str) -> FileInfo:
        """Get metadata, following symlinks.

        The returned name is always the base name of ``path``, even when
        the rest of the metadata describes a symlink's target.

        Raises:
            FileNotFoundError: If the path or a symlink target doesn't exist.
        """
        _, entry = self._resolve(path)
        if entry is None:
            raise FileNotFoundError(_errno.ENOENT, "No such file or directory", path)
        return entry.stat(name=_base(normalize(path)))

    def lstat(self, path: str) -> FileInfo:
        """Get metadata without following a final symlink."""
        return self._lookup(path).stat()

    def exists(self, path: str) -> bool:
        return self._find(path) is not None

    def isfile(self, path: str) -> bool:
        entry = self._find(path)
        return entry is not None and is_regular(entry.mode)

    def isdir(self, path: str) -> bool:
        entry = self._find(path)
        return entry is not None and entry.is_dir

    def islink(self, path: str) -> bool:
        entry = self._storage.get(path)
        return entry is not None and entry.is_symlink

    def chmod(self, path: str, mode: int) -> None:
        """Replace the permission bits of a path (stored, never enforced)."""
        _, entry = self._resolve(path)
        if entry is None:
            raise FileNotFoundError(_errno.ENOENT, "No such file or directory", path)
        entry.mode = stat_mod.S_IFMT(entry.mode) | stat_mod.S_IMODE(mode)

    def chown(self, path: str, uid: int, gid: int) -> None:
        """Change file owner (no-op: virtual entries have no owner)."""
        if not self.exists(path):
            raise FileNotFoundError(_errno.ENOENT, "No such file or directory", path)

    def lchown(self, path: str, uid: int, gid: int) -> None:
        """Change symlink owner (no-op: virtual entries have no owner)."""
        self._lookup(path)

    def chtimes(
        self, path: str, atime: datetime | float, mtime: datetime | float
    ) -> None:
        """Set the modification time of a path.

        Entries only track mtime, so ``atime`` is accepted and ignored.
        """
        _, entry = self._resolve(path)
        if entry is None:
            raise FileNotFoundError(_errno.ENOENT, "No such file or directory", path)
        if not isinstance(mtime, datetime):
            mtime = datetime.fromtimestamp(mtime, timezone.utc)
        entry.mtime = mtime

    # -------------------------------------------------------------------------
    # Directories
    # -------------------------------------------------------------------------

    def read_dir(self, path: str) -> list[FileInfo]:
        """List the entries of a directory, sorted by name.

        A symlink to a directory is followed.

        Raises:
            FileNotFoundError: If the path doesn't exist.
            NotADirectoryError: If the path is a file and
                config.strict_read_dir is set.
        """
        target, entry = self._resolve(path)
        if entry is None:
            raise FileNotFoundError(_errno.ENOENT, "No such file or directory", path)
        if not entry.is_dir:
            if self.config.strict_read_dir:
                raise NotADirectoryError(_errno.ENOTDIR, "Not a directory", path)
            return []
        return [child.stat() for child in self._storage.children(target)]

    def mkdir_all(self, path: str, perm: int = 0o777) -> None:
        """Create a directory and any missing parents.

        Succeeds silently if the directory already exists.

        Raises:
            FileExistsError: If the path exists and is not a directory.
            NotADirectoryError: If an ancestor is not a directory.
        """
        self._storage.new(path, stat_mod.S_IFDIR | stat_mod.S_IMODE(perm))

    def rename(self, src: str, dst: str) -> None:
        """Rename/move a file, symlink or directory."""
        self._storage.rename(src, dst)

    def remove(self, path: str) -> None:
        """Remove a file, symlink or empty directory.

        Raises:
            FileNotFoundError: If the path doesn't exist.
            OSError: ENOTEMPTY if the directory has children.
        """
        self._storage.remove(path)

    def join(self, *elem: str) -> str:
        """Join path elements and clean the result.

        Empty elements are ignored; joining nothing returns ``""``.
        """
        parts = [e for e in elem if e]
        if not parts:
            return ""
        joined = posixpath.normpath("/".join(parts))
        if joined.startswith("//"):
            joined = "/" + joined.lstrip("/")
        return joined

    # -------------------------------------------------------------------------
    # Symlinks
    # -------------------------------------------------------------------------

    def symlink(self, target: str, link: str) -> None:
        """Create a symlink at ``link`` pointing to ``target``.

        ``target`` is stored verbatim and need not exist. A relative
        target is resolved against the link's directory when followed.

        Raises:
            FileExistsError: If anything (including a dangling symlink)
                already exists at ``link``.
        """
        if self._storage.has(link):
            raise FileExistsError(_errno.EEXIST, "File exists", link)
        self.write_file(link, target.encode("utf-8"), stat_mod.S_IFLNK | 0o777)
        logger.debug("Linked %s -> %s", link, target)

    def readlink(self, link: str) -> str:
        """Return the target stored in a symlink.

        Raises:
            FileNotFoundError: If the link doesn't exist.
            OSError: EINVAL if the path is not a symlink.
        """
        entry = self._lookup(link)
        if not entry.is_symlink:
            raise OSError(_errno.EINVAL, "Not a symbolic link", link)
        return entry.content.getvalue().decode("utf-8")

    def capabilities(self) -> Capability:
        """Features supported by MemoryFS. Locking is not advertised."""
        return (
            Capability.WRITE
            | Capability.READ
            | Capability.READ_AND_WRITE
            | Capability.SEEK
            | Capability.TRUNCATE
        )

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def _lookup(self, path: str) -> Entry:
        entry = self._storage.get(path)
        if entry is None:
            raise FileNotFoundError(_errno.ENOENT, "No such file or directory", path)
        return entry

    def _find(self, path: str) -> Entry | None:
        """Resolve ``path`` for the boolean predicates; a symlink loop counts as absent."""
        try:
            return self._resolve(path)[1]
        except OSError as e:
            if e.errno != _errno.ELOOP:
                raise
            return None

    def _resolve(self, path: str) -> tuple[str, Entry | None]:
        """Follow symlinks starting at ``path``.

        Returns the final path and its entry, or None for the entry when
        the path (or the end of a dangling symlink chain) doesn't exist.
        """
        current = normalize(path)
        for _ in range(self.config.max_symlink_depth + 1):
            entry = self._storage.get(current)
            if entry is None or not entry.is_symlink:
                return current, entry
            target = entry.content.getvalue().decode("utf-8")
            if not target.startswith("/"):
                target = posixpath.join(posixpath.dirname(current), target)
            current = normalize(target)

        logger.warning("Symlink loop detected while resolving %s", path)
        raise OSError(_errno.ELOOP, "Too many levels of symbolic links", path)
