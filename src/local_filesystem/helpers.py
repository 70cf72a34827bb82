"""Path, permission and content helpers used by the filesystem facade.

Everything here is stateless. Only ``detect_mime_type`` touches the disk;
it lets ``OSError`` propagate so the facade can wrap it.
"""

from __future__ import annotations

import mimetypes
import os
import re
import stat

from binaryornot.check import is_binary

__all__ = [
    "detect_mime_type",
    "expand_braces",
    "fileperms_to_octal_value",
    "normalize_path",
]

# Any run of forward and/or back slashes
_SEPARATOR_RUN = re.compile(r"[\\/]+")

DIRECTORY_MIME_TYPE = "directory"
EMPTY_MIME_TYPE = "application/x-empty"
BINARY_MIME_TYPE = "application/octet-stream"
TEXT_MIME_TYPE = "text/plain"


def normalize_path(path: str) -> str:
    """Normalize separators in a path.

    Surrounding whitespace is trimmed, then every run of ``/`` and ``\\``
    characters is replaced with a single ``os.sep``. The result does not
    depend on how the separators were mixed or doubled, and normalizing
    twice gives the same string.

    Example:
        >>> normalize_path("/var//www\\\\html/ ")  # doctest: +SKIP
        '/var/www/html/'

    Args:
        path: Path to normalize.

    Returns:
        Normalized path.
    """
    return _SEPARATOR_RUN.sub(lambda _: os.sep, path.strip())


def fileperms_to_octal_value(fileperms: int) -> str:
    """Render the permission part of a mode as a four digit octal string.

    Example:
        >>> fileperms_to_octal_value(0o100644)
        '0644'

    Args:
        fileperms: Mode as returned by ``LocalFilesystem.get_permissions``.

    Returns:
        Last four octal digits of the mode.
    """
    return f"{fileperms:04o}"[-4:]


def expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` alternatives in a glob pattern.

    Groups may be nested. An unbalanced ``{`` is kept literally.

    Args:
        pattern: Glob pattern possibly containing brace groups.

    Returns:
        Expanded patterns in left-to-right order.
    """
    start = pattern.find("{")
    while start != -1:
        end, alternatives = _split_brace_group(pattern, start)
        if alternatives is not None:
            prefix, suffix = pattern[:start], pattern[end + 1 :]
            expanded: list[str] = []
            for alternative in alternatives:
                expanded.extend(expand_braces(prefix + alternative + suffix))
            return expanded
        start = pattern.find("{", start + 1)
    return [pattern]


def _split_brace_group(pattern: str, start: int) -> tuple[int, list[str] | None]:
    """Split the brace group opening at ``start`` on its top-level commas.

    Returns:
        Index of the closing brace and the alternatives, or ``(-1, None)``
        when the group is never closed.
    """
    depth = 0
    pieces: list[str] = []
    piece_start = start + 1
    for index in range(start, len(pattern)):
        char = pattern[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                pieces.append(pattern[piece_start:index])
                return index, pieces
        elif char == "," and depth == 1:
            pieces.append(pattern[piece_start:index])
            piece_start = index + 1
    return -1, None


def detect_mime_type(full_path: str) -> str:
    """Detect the MIME type of a file.

    Directories and empty files get fixed types. Otherwise the extension
    decides, and only files with an unknown extension are classified as
    text or binary by sniffing their first bytes. Content never overrides a
    known extension: a ``.txt`` file holding PNG bytes reports
    ``text/plain``.

    Args:
        full_path: Absolute path to the file.

    Returns:
        MIME type string.

    Raises:
        OSError: If the path does not exist or cannot be read.
    """
    status = os.stat(full_path)
    if stat.S_ISDIR(status.st_mode):
        return DIRECTORY_MIME_TYPE
    if status.st_size == 0:
        return EMPTY_MIME_TYPE

    guessed, _ = mimetypes.guess_type(full_path, strict=False)
    if guessed:
        return guessed

    return BINARY_MIME_TYPE if is_binary(full_path) else TEXT_MIME_TYPE
