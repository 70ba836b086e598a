"""memfs: In-memory virtual filesystem with POSIX-like file handles."""

from .base import Capability, File, FileInfo, FileSystem
from .config import MemoryFSConfig, connect_fs
from .content import Content
from .memory import MemoryFS
from .memoryfile import MemoryFile
from .osinfo import OSFileInfo, get_os_file_info
from .storage import Entry, Storage, normalize

__all__ = [
    "Capability",
    "connect_fs",
    "Content",
    "Entry",
    "File",
    "FileInfo",
    "FileSystem",
    "get_os_file_info",
    "MemoryFile",
    "MemoryFS",
    "MemoryFSConfig",
    "normalize",
    "OSFileInfo",
    "Storage",
]
