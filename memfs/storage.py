"""Path-indexed entry tree backing MemoryFS.

Entries live in a flat ``dict`` keyed by normalized absolute path. A second
index maps every directory path to its direct children by name, so listings
do not scan the whole tree.
"""

from __future__ import annotations

import errno as _errno
import logging
import posixpath
import stat as stat_mod
from dataclasses import dataclass, field
from datetime import datetime, timezone

from .base import FileInfo
from .content import Content
from .flags import file_type, is_dir, is_exclusive, is_symlink

logger = logging.getLogger(__name__)

ROOT = "/"


def normalize(path: str) -> str:
    """Clean ``path`` into the absolute form used as a storage key.

    Resolves ``.`` and ``..`` components, collapses repeated slashes and
    anchors relative paths at the root.
    """
    return posixpath.normpath("/" + path.lstrip("/"))


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Entry:
    """One named node of the tree: a file, directory or symlink.

    Attributes:
        name: Base name of the entry's current path.
        mode: ``st_mode`` value (type bits plus permission bits).
        mtime: Last modification time (UTC).
        content: Byte buffer for files and symlinks, None for directories.
    """

    name: str
    mode: int
    mtime: datetime = field(default_factory=_now)
    content: Content | None = None

    @property
    def is_dir(self) -> bool:
        return is_dir(self.mode)

    @property
    def is_symlink(self) -> bool:
        return is_symlink(self.mode)

    @property
    def size(self) -> int:
        return len(self.content) if self.content is not None else 0

    def touch(self) -> None:
        self.mtime = _now()

    def stat(self, name: str | None = None) -> FileInfo:
        return FileInfo(
            name=name if name is not None else self.name,
            size=self.size,
            mode=self.mode,
            mtime=self.mtime,
        )


class Storage:
    """Registry of entries keyed by normalized path.

    The root directory always exists. Every other key's parent is a
    directory entry; missing parents are created on demand, like
    ``mkdir -p``.
    """

    def __init__(self) -> None:
        self._files: dict[str, Entry] = {
            ROOT: Entry(name=ROOT, mode=stat_mod.S_IFDIR | 0o755)
        }
        self._children: dict[str, dict[str, Entry]] = {ROOT: {}}

    def __len__(self) -> int:
        return len(self._files)

    def has(self, path: str) -> bool:
        return normalize(path) in self._files

    def get(self, path: str) -> Entry | None:
        """Look up an entry by path. Returns None if absent."""
        return self._files.get(normalize(path))

    def new(self, path: str, mode: int, flag: int = 0) -> Entry:
        """Create an entry at ``path``, creating missing parent directories.

        An existing entry of the same type is returned as-is unless
        ``O_EXCL`` is set in ``flag``.

        Raises:
            FileExistsError: If the path exists and ``O_EXCL`` is set, or it
                exists with a different type.
            NotADirectoryError: If an ancestor exists but is not a directory.
        """
        path = normalize(path)
        mode = file_type(mode) | stat_mod.S_IMODE(mode)

        existing = self._files.get(path)
        if existing is not None:
            if is_exclusive(flag) or file_type(existing.mode) != file_type(mode):
                raise FileExistsError(_errno.EEXIST, "File exists", path)
            return existing

        self._check_parents(path)
        parent_perm = stat_mod.S_IMODE(mode) if is_dir(mode) else 0o755
        self._make_parents(path, parent_perm)

        content = None if is_dir(mode) else Content()
        entry = Entry(name=posixpath.basename(path), mode=mode, content=content)
        self._insert(path, entry)
        logger.debug("Created %s (mode %o)", path, mode)
        return entry

    def children(self, path: str) -> list[Entry]:
        """Return the direct children of ``path`` sorted by name."""
        kids = self._children.get(normalize(path), {})
        return [kids[name] for name in sorted(kids)]

    def rename(self, src: str, dst: str) -> None:
        """Move the entry at ``src`` (and everything below it) to ``dst``.

        Entries keep their content; only their keys change. An existing
        file or empty directory at ``dst`` is replaced.

        Raises:
            FileNotFoundError: If ``src`` doesn't exist.
            OSError: ENOTEMPTY if ``dst`` is a non-empty directory, EINVAL
                if ``dst`` lies inside ``src``, EBUSY for the root.
        """
        src = normalize(src)
        dst = normalize(dst)

        entry = self._files.get(src)
        if entry is None:
            raise FileNotFoundError(_errno.ENOENT, "No such file or directory", src)
        if src == dst:
            return
        if ROOT in (src, dst):
            raise OSError(_errno.EBUSY, "Device or resource busy", ROOT)
        if dst.startswith(src + "/"):
            raise OSError(_errno.EINVAL, "Invalid argument", dst)

        target = self._files.get(dst)
        if target is not None:
            if target.is_dir and not entry.is_dir:
                raise IsADirectoryError(_errno.EISDIR, "Is a directory", dst)
            if entry.is_dir and not target.is_dir:
                raise NotADirectoryError(_errno.ENOTDIR, "Not a directory", dst)
            if self._children.get(dst):
                raise OSError(_errno.ENOTEMPTY, "Directory not empty", dst)
        self._check_parents(dst)

        prefix = src + "/"
        moves = [(src, dst)] + [
            (old, dst + old[len(src) :]) for old in self._files if old.startswith(prefix)
        ]

        if target is not None:
            self._discard(dst)
        self._discard(src)
        moved = [(new, self._files.pop(old)) for old, new in moves[1:]]
        subdirs = [
            (new, self._children.pop(old)) for old, new in moves[1:] if old in self._children
        ]
        own_children = self._children.pop(src, None)

        self._make_parents(dst, 0o755)
        entry.name = posixpath.basename(dst)
        self._insert(dst, entry)
        if own_children is not None:
            self._children[dst] = own_children
        self._files.update(moved)
        self._children.update(subdirs)
        logger.debug("Renamed %s -> %s (%d entries)", src, dst, len(moves))

    def remove(self, path: str) -> None:
        """Delete the entry at ``path``.

        Raises:
            FileNotFoundError: If ``path`` doesn't exist.
            OSError: ENOTEMPTY for a non-empty directory, EBUSY for the root.
        """
        path = normalize(path)
        if path == ROOT:
            raise OSError(_errno.EBUSY, "Device or resource busy", path)
        entry = self._files.get(path)
        if entry is None:
            raise FileNotFoundError(_errno.ENOENT, "No such file or directory", path)
        if entry.is_dir and self._children.get(path):
            raise OSError(_errno.ENOTEMPTY, "Directory not empty", path)

        self._discard(path)
        self._children.pop(path, None)
        logger.debug("Removed %s", path)

    def _insert(self, path: str, entry: Entry) -> None:
        self._files[path] = entry
        self._children.setdefault(posixpath.dirname(path), {})[entry.name] = entry
        if entry.is_dir:
            self._children.setdefault(path, {})

    def _discard(self, path: str) -> None:
        """Drop ``path`` from the flat index and from its parent's listing."""
        self._files.pop(path, None)
        siblings = self._children.get(posixpath.dirname(path))
        if siblings is not None:
            siblings.pop(posixpath.basename(path), None)

    def _check_parents(self, path: str) -> None:
        """Raise NotADirectoryError if an existing ancestor is not a directory."""
        parent = posixpath.dirname(path)
        while parent != ROOT:
            entry = self._files.get(parent)
            if entry is not None:
                if not entry.is_dir:
                    raise NotADirectoryError(_errno.ENOTDIR, "Not a directory", parent)
                return
            parent = posixpath.dirname(parent)

    def _make_parents(self, path: str, perm: int) -> None:
        missing = []
        parent = posixpath.dirname(path)
        while parent not in self._files:
            missing.append(parent)
            parent = posixpath.dirname(parent)
        for dirpath in reversed(missing):
            entry = Entry(name=posixpath.basename(dirpath), mode=stat_mod.S_IFDIR | perm)
            self._insert(dirpath, entry)
            logger.debug("Created parent directory %s", dirpath)
