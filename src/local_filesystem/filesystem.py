"""Filesystem facade scoped to a single root directory.

Every public method takes a path relative to the facade's location,
resolves it with ``resolve_path`` and performs one OS call (a bounded
sequence of them for recursive delete). ``OSError`` raised by the OS is
converted into ``FilesystemError`` at the call site.
"""

from __future__ import annotations

import glob
import itertools
import logging
import os
import shutil
from collections.abc import Iterator
from pathlib import Path
from typing import IO, Any, BinaryIO

from local_filesystem.config import FilesystemConfig, TransferOptions, WriteOptions
from local_filesystem.helpers import detect_mime_type, expand_braces, normalize_path
from local_filesystem.types import GlobFlag, WriteFlag

logger = logging.getLogger(__name__)

# Chunk size for copying stream content into a file
STREAM_CHUNK_SIZE = 64 * 1024


class FilesystemError(Exception):
    """Error during a local filesystem operation.

    Attributes:
        reason: The bare reason, without the common prefix.
    """

    def __init__(self, reason: str = "unknown error") -> None:
        super().__init__(f"Local filesystem error: {reason}")
        self.reason = reason

    @classmethod
    def from_os_error(cls, error: OSError) -> FilesystemError:
        """Build an error from the message the OS reported."""
        return cls(describe_os_error(error))


def describe_os_error(error: OSError) -> str:
    """Format an OSError as "<strerror>: <path>[ -> <path2>]".

    Falls back to ``str(error)``, then to "unknown error".
    """
    if not error.strerror:
        return str(error) or "unknown error"

    message = error.strerror
    if error.filename is not None:
        message += f": {os.fsdecode(error.filename)}"
        if error.filename2 is not None:
            message += f" -> {os.fsdecode(error.filename2)}"
    return message


class LocalFilesystem:
    """Filesystem operations relative to a fixed root location.

    Callers pass paths relative to ``location``; separators in any style
    are normalized. Failures raise ``FilesystemError``, except for the
    existence checks which return False.
    """

    def __init__(
        self,
        location: str | os.PathLike[str],
        config: FilesystemConfig | None = None,
    ) -> None:
        """Initialize the facade.

        Args:
            location: Directory all relative paths are resolved against.
            config: Default permissions. Defaults to 0o755 / 0o644.

        Note:
            Prefer using factory methods `create()` or `from_config_file()` for construction.
        """
        config = config or FilesystemConfig()
        self._location = os.path.abspath(os.fspath(location))
        self._default_directory_permissions = config.default_permissions.directory
        self._default_file_permissions = config.default_permissions.file

    @classmethod
    def create(
        cls,
        location: str | os.PathLike[str],
        config: FilesystemConfig | None = None,
    ) -> LocalFilesystem:
        """Create a facade rooted at ``location``.

        Args:
            location: Root directory.
            config: Optional configuration.

        Returns:
            Configured LocalFilesystem instance.
        """
        return cls(location, config=config)

    @classmethod
    def from_config_file(
        cls,
        location: str | os.PathLike[str],
        config_file: Path,
    ) -> LocalFilesystem:
        """Create a facade with defaults loaded from a YAML config file.

        Args:
            location: Root directory.
            config_file: Path to the config file.

        Returns:
            LocalFilesystem configured from the file.

        Raises:
            FileNotFoundError: If the config file doesn't exist.
            ValueError: If the config file is invalid.
        """
        return cls(location, config=FilesystemConfig.from_file(config_file))

    @property
    def location(self) -> str:
        """Absolute root directory."""
        return self._location

    @property
    def default_directory_permissions(self) -> int:
        return self._default_directory_permissions

    @property
    def default_file_permissions(self) -> int:
        return self._default_file_permissions

    def resolve_path(self, path: str) -> str:
        """Build the normalized absolute path for a relative path.

        Example:
            >>> LocalFilesystem("/srv/data").resolve_path("docs//a.txt")  # doctest: +SKIP
            '/srv/data/docs/a.txt'

        Args:
            path: Path relative to the location.

        Returns:
            Absolute path.
        """
        return normalize_path(self._location + os.sep + path)

    # ==========================================================================
    # Queries
    # ==========================================================================

    def file_exists(self, path: str) -> bool:
        """Check if a regular file exists at the path."""
        return os.path.isfile(self.resolve_path(path))

    def directory_exists(self, path: str) -> bool:
        """Check if a directory exists at the path."""
        return os.path.isdir(self.resolve_path(path))

    def get_permissions(self, path: str) -> int:
        """Get the mode of a file or directory.

        The value includes the file type bits, e.g. ``0o100644``. Use
        ``fileperms_to_octal_value`` to get the permission digits only.

        Args:
            path: Relative path.

        Returns:
            Mode as reported by ``os.stat``.

        Raises:
            FilesystemError: If the path is missing or inaccessible.
        """
        try:
            return os.stat(self.resolve_path(path)).st_mode
        except OSError as e:
            raise FilesystemError.from_os_error(e) from e

    def list_pathnames(self, pattern: str, flags: int = 0) -> list[str]:
        """Find pathnames matching a glob pattern.

        Args:
            pattern: Glob pattern relative to the location.
            flags: GlobFlag bits.

        Returns:
            Matching absolute paths, sorted unless ``GlobFlag.NOSORT`` is set.
            Empty when nothing matches.

        Raises:
            FilesystemError: If ``flags`` contains unknown bits.
        """
        if flags < 0 or flags & ~GlobFlag.all_bits():
            raise FilesystemError(f"Invalid glob flags: {flags}")

        full_pattern = self.resolve_path(pattern)
        patterns = expand_braces(full_pattern) if flags & GlobFlag.BRACE else [full_pattern]

        results: list[str] = []
        seen: set[str] = set()
        for expanded in patterns:
            matches = glob.glob(expanded)
            if not flags & GlobFlag.NOSORT:
                matches.sort()
            for match in matches:
                is_dir = os.path.isdir(match)
                if flags & GlobFlag.ONLYDIR and not is_dir:
                    continue
                if flags & GlobFlag.MARK and is_dir and not match.endswith(os.sep):
                    match += os.sep
                if match not in seen:
                    seen.add(match)
                    results.append(match)

        if not results and flags & GlobFlag.NOCHECK:
            return [full_pattern]
        return results

    def get_file_size(self, path: str) -> int:
        """Get the size of a file in bytes.

        Raises:
            FilesystemError: If the path is missing or inaccessible.
        """
        try:
            return os.path.getsize(self.resolve_path(path))
        except OSError as e:
            raise FilesystemError.from_os_error(e) from e

    def get_file_mime_type(self, path: str) -> str:
        """Get the MIME type of a file.

        Raises:
            FilesystemError: If the path is missing or unreadable.
        """
        try:
            return detect_mime_type(self.resolve_path(path))
        except OSError as e:
            raise FilesystemError.from_os_error(e) from e

    def get_file_last_modified_time(self, path: str) -> int:
        """Get the last modification time as a unix timestamp in seconds.

        Raises:
            FilesystemError: If the path is missing or inaccessible.
        """
        try:
            return int(os.stat(self.resolve_path(path)).st_mtime)
        except OSError as e:
            raise FilesystemError.from_os_error(e) from e

    # ==========================================================================
    # Permissions
    # ==========================================================================

    def set_permissions(self, path: str, permissions: int) -> None:
        """Apply a mode to an existing file or directory.

        Raises:
            FilesystemError: If the path is missing or the mode cannot be applied.
        """
        self._set_permissions_by_full_path(self.resolve_path(path), permissions)

    # ==========================================================================
    # Files
    # ==========================================================================

    def write_to_file(
        self,
        path: str,
        content: bytes | str | IO[Any],
        options: WriteOptions | None = None,
    ) -> None:
        """Write content to a file, creating its parent directory if needed.

        The file mode is applied after every write, including writes to an
        existing file. Content is checked, and the first chunk of a stream
        read, before the target is opened, so bad content leaves an existing
        file untouched.

        Args:
            path: Relative path of the file.
            content: Bytes, text (written as UTF-8) or a readable stream.
            options: Permission overrides and WriteFlag bits.

        Raises:
            FilesystemError: If the content type can't be written, the parent
                directory can't be created, or the write fails.
        """
        options = options or WriteOptions()
        flags = int(options.flags)
        if flags & ~WriteFlag.all_bits():
            raise FilesystemError(f"Invalid write flags: {flags}")

        chunks = _content_chunks(content)
        full_path = self.resolve_path(path)
        file_permissions = self._file_permissions(options)

        self._ensure_parent_directory(full_path, self._directory_permissions(options))

        open_flags = os.O_WRONLY | os.O_CREAT | getattr(os, "O_BINARY", 0) | flags
        if not flags & WriteFlag.APPEND:
            open_flags |= os.O_TRUNC

        try:
            fd = os.open(full_path, open_flags, file_permissions)
            with os.fdopen(fd, "wb") as handle:
                for chunk in chunks:
                    handle.write(chunk)
        except OSError as e:
            raise FilesystemError.from_os_error(e) from e

        logger.debug("Wrote %s", full_path)
        self._set_permissions_by_full_path(full_path, file_permissions)

    def read_file(self, path: str) -> bytes:
        """Read the whole content of a file.

        Raises:
            FilesystemError: If the file is missing or unreadable.
        """
        try:
            with open(self.resolve_path(path), "rb") as handle:
                return handle.read()
        except OSError as e:
            raise FilesystemError.from_os_error(e) from e

    def read_file_as_stream(self, path: str) -> BinaryIO:
        """Open a file for binary reading.

        The caller owns the returned handle and must close it, preferably
        with a ``with`` block.

        Raises:
            FilesystemError: If the file is missing or can't be opened.
        """
        try:
            return open(self.resolve_path(path), "rb")
        except OSError as e:
            raise FilesystemError.from_os_error(e) from e

    def delete_file(self, path: str) -> None:
        """Remove a file.

        Raises:
            FilesystemError: If the file is missing or can't be removed.
        """
        self._delete_file_by_full_path(self.resolve_path(path))

    def copy_file(
        self,
        old_path: str,
        new_path: str,
        options: TransferOptions | None = None,
    ) -> None:
        """Copy a file, creating the destination's parent directory if needed.

        Args:
            old_path: Relative path of the source file.
            new_path: Relative path of the destination file.
            options: Permission overrides.

        Raises:
            FilesystemError: If the source is missing or the copy fails.
        """
        options = options or TransferOptions()
        source = self.resolve_path(old_path)
        destination = self.resolve_path(new_path)

        self._ensure_parent_directory(destination, self._directory_permissions(options))

        try:
            shutil.copyfile(source, destination)
        except OSError as e:
            raise FilesystemError.from_os_error(e) from e

        logger.debug("Copied %s to %s", source, destination)
        self._set_permissions_by_full_path(destination, self._file_permissions(options))

    def move_file(
        self,
        old_path: str,
        new_path: str,
        options: TransferOptions | None = None,
    ) -> None:
        """Rename a file, creating the destination's parent directory if needed.

        Moves across filesystems are not emulated; the OS error is raised.

        Args:
            old_path: Relative path of the source file.
            new_path: Relative path of the destination file.
            options: Permission overrides.

        Raises:
            FilesystemError: If the source is missing or the rename fails.
        """
        options = options or TransferOptions()
        source = self.resolve_path(old_path)
        destination = self.resolve_path(new_path)

        self._ensure_parent_directory(destination, self._directory_permissions(options))

        try:
            os.rename(source, destination)
        except OSError as e:
            raise FilesystemError.from_os_error(e) from e

        logger.debug("Moved %s to %s", source, destination)
        self._set_permissions_by_full_path(destination, self._file_permissions(options))

    # ==========================================================================
    # Directories
    # ==========================================================================

    def create_directory(self, path: str, permissions: int | None = None) -> None:
        """Create a directory along with any missing ancestors.

        Args:
            path: Relative path of the directory.
            permissions: Mode for every created directory. Defaults to the
                configured directory permissions.

        Raises:
            FilesystemError: If the directory already exists or can't be created.
        """
        if permissions is None:
            permissions = self._default_directory_permissions
        self._create_directory_by_full_path(self.resolve_path(path), permissions)

    def delete_directory(self, path: str) -> None:
        """Delete a directory and everything below it.

        Entries are removed children first. A failure stops the deletion
        and leaves whatever was not yet removed in place.

        Raises:
            FilesystemError: If the path is not a directory or a removal fails.
        """
        full_path = self.resolve_path(path)
        if not os.path.isdir(full_path):
            raise FilesystemError("The specified path is not a directory.")

        try:
            for entry_path, is_dir in _walk_children_first(full_path):
                if is_dir:
                    os.rmdir(entry_path)
                else:
                    os.unlink(entry_path)
            os.rmdir(full_path)
        except OSError as e:
            raise FilesystemError.from_os_error(e) from e

        logger.debug("Deleted directory tree %s", full_path)

    # ==========================================================================
    # Internals
    # ==========================================================================

    def _directory_permissions(self, options: TransferOptions) -> int:
        if options.directory_permissions is None:
            return self._default_directory_permissions
        return options.directory_permissions

    def _file_permissions(self, options: TransferOptions) -> int:
        if options.file_permissions is None:
            return self._default_file_permissions
        return options.file_permissions

    def _ensure_parent_directory(self, full_file_path: str, permissions: int) -> None:
        parent = os.path.dirname(full_file_path)
        if os.path.isdir(parent):
            return
        self._create_directory_by_full_path(parent, permissions)

    def _create_directory_by_full_path(self, full_path: str, permissions: int) -> None:
        # The requested mode is re-applied with chmod so the umask can't narrow it
        missing = _missing_directories(full_path)
        try:
            for directory in missing:
                os.mkdir(directory, permissions)
                os.chmod(directory, permissions)
        except OSError as e:
            raise FilesystemError.from_os_error(e) from e

        logger.debug("Created directory %s (mode %o)", full_path, permissions)

    def _set_permissions_by_full_path(self, full_path: str, permissions: int) -> None:
        try:
            os.chmod(full_path, permissions)
        except OSError as e:
            raise FilesystemError.from_os_error(e) from e

        logger.debug("Set mode %o on %s", permissions, full_path)

    def _delete_file_by_full_path(self, full_path: str) -> None:
        try:
            os.unlink(full_path)
        except OSError as e:
            raise FilesystemError.from_os_error(e) from e

        logger.debug("Deleted %s", full_path)


def _missing_directories(full_path: str) -> list[str]:
    """List the directories to create for ``full_path``, outermost first.

    ``full_path`` itself is always included so that creating an existing
    directory fails in ``os.mkdir``.
    """
    target = full_path.rstrip(os.sep) or os.sep
    missing = [target]
    current = os.path.dirname(target)
    while current and not os.path.exists(current):
        missing.append(current)
        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent
    missing.reverse()
    return missing


def _walk_children_first(directory: str) -> Iterator[tuple[str, bool]]:
    """Yield ``(path, is_dir)`` for every entry below ``directory``.

    Subdirectories are yielded after their contents. Symlinks are never
    followed and are reported as non-directories.
    """
    with os.scandir(directory) as entries:
        children = [(entry.path, entry.is_dir(follow_symlinks=False)) for entry in entries]

    for path, is_dir in children:
        if is_dir:
            yield from _walk_children_first(path)
        yield path, is_dir


def _content_chunks(content: Any) -> list[bytes] | Iterator[bytes]:
    """Turn writable content into byte chunks.

    For streams the first chunk is read right away, so a stream that
    can't be read fails before the target file is opened.

    Raises:
        FilesystemError: If the content has no byte representation or
            can't be read or encoded.
    """
    if isinstance(content, (bytes, bytearray, memoryview)):
        return [bytes(content)]
    if isinstance(content, str):
        return [_encode(content)]
    if callable(getattr(content, "read", None)):
        first = _read_chunk(content)
        if first is None:
            return []
        return itertools.chain([first], _stream_chunks(content))
    raise FilesystemError(f"Cannot write content of type {type(content).__name__}")


def _stream_chunks(stream: IO[Any]) -> Iterator[bytes]:
    while True:
        chunk = _read_chunk(stream)
        if chunk is None:
            return
        yield chunk


def _read_chunk(stream: IO[Any]) -> bytes | None:
    """Read the next chunk of a stream as bytes, or None at the end."""
    try:
        chunk = stream.read(STREAM_CHUNK_SIZE)
    except (OSError, ValueError) as e:
        # ValueError covers closed streams and UnicodeDecodeError
        raise FilesystemError(f"Cannot read content stream: {e}") from e

    if not chunk:
        return None
    if isinstance(chunk, str):
        return _encode(chunk)
    if not isinstance(chunk, (bytes, bytearray, memoryview)):
        raise FilesystemError(f"Cannot write stream chunk of type {type(chunk).__name__}")
    return bytes(chunk)


def _encode(text: str) -> bytes:
    try:
        return text.encode("utf-8")
    except UnicodeEncodeError as e:
        raise FilesystemError(f"Cannot encode content as UTF-8: {e}") from e
