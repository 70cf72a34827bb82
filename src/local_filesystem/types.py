"""Flag types shared by the filesystem facade."""

from __future__ import annotations

import enum
import os

__all__ = ["GlobFlag", "WriteFlag"]


class WriteFlag(enum.IntFlag):
    """Flags accepted by ``LocalFilesystem.write_to_file``.

    Values are the ``os.open`` constants themselves, so raw ``os.O_APPEND``
    and ``os.O_EXCL`` ints are passed straight through to the OS. There is
    no lock flag: the facade never locks files, and any other bit is
    rejected as invalid.

    Attributes:
        APPEND: Append to the file instead of truncating it.
        EXCLUSIVE: Fail if the target file already exists.
    """

    APPEND = os.O_APPEND
    EXCLUSIVE = os.O_EXCL

    @classmethod
    def all_bits(cls) -> int:
        """Return the union of every known flag value."""
        return int(cls.APPEND | cls.EXCLUSIVE)


class GlobFlag(enum.IntFlag):
    """Flags accepted by ``LocalFilesystem.list_pathnames``.

    Attributes:
        MARK: Append a path separator to every matched directory.
        NOSORT: Return matches in the order the OS lists them.
        NOCHECK: Return the pattern itself when nothing matches.
        BRACE: Expand ``{a,b,c}`` alternatives before matching.
        ONLYDIR: Return directories only.
    """

    MARK = 1 << 0
    NOSORT = 1 << 1
    NOCHECK = 1 << 2
    BRACE = 1 << 3
    ONLYDIR = 1 << 4

    @classmethod
    def all_bits(cls) -> int:
        """Return the union of every known flag value."""
        return int(cls.MARK | cls.NOSORT | cls.NOCHECK | cls.BRACE | cls.ONLYDIR)
