"""Filesystem operations scoped to a local root directory."""

__version__ = "0.1.0"

from local_filesystem.config import (
    DefaultPermissions,
    FilesystemConfig,
    TransferOptions,
    WriteOptions,
)
from local_filesystem.filesystem import FilesystemError, LocalFilesystem
from local_filesystem.helpers import fileperms_to_octal_value, normalize_path
from local_filesystem.types import GlobFlag, WriteFlag

__all__ = [
    "__version__",
    "DefaultPermissions",
    "FilesystemConfig",
    "FilesystemError",
    "GlobFlag",
    "LocalFilesystem",
    "TransferOptions",
    "WriteFlag",
    "WriteOptions",
    "fileperms_to_octal_value",
    "normalize_path",
]
