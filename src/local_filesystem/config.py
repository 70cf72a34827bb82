"""Configuration models for the filesystem facade."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = [
    "DEFAULT_DIRECTORY_PERMISSIONS",
    "DEFAULT_FILE_PERMISSIONS",
    "DefaultPermissions",
    "FilesystemConfig",
    "TransferOptions",
    "WriteOptions",
]

DEFAULT_DIRECTORY_PERMISSIONS = 0o755
DEFAULT_FILE_PERMISSIONS = 0o644

# Highest value chmod accepts (setuid, setgid, sticky and rwx bits)
MAX_PERMISSIONS = 0o7777


def _parse_permissions(value: Any) -> Any:
    """Accept octal strings such as "0755" or "0o755" for permission fields."""
    if isinstance(value, str):
        text = value.strip().lower()
        if text.startswith("0o"):
            text = text[2:]
        try:
            return int(text, 8)
        except ValueError as e:
            raise ValueError(f"Invalid octal permissions: {value!r}") from e
    return value


def _check_permissions(value: int | None) -> int | None:
    if value is not None and not 0 <= value <= MAX_PERMISSIONS:
        raise ValueError(f"Permissions out of range: {value:o}")
    return value


class DefaultPermissions(BaseModel):
    """Modes applied when an operation gets no explicit override."""

    model_config = ConfigDict(frozen=True)

    directory: int = DEFAULT_DIRECTORY_PERMISSIONS
    file: int = DEFAULT_FILE_PERMISSIONS

    @field_validator("directory", "file", mode="before")
    @classmethod
    def parse_octal(cls, value: Any) -> Any:
        return _parse_permissions(value)

    @field_validator("directory", "file")
    @classmethod
    def check_range(cls, value: int) -> int:
        return _check_permissions(value)


class FilesystemConfig(BaseModel):
    """Settings for a LocalFilesystem instance.

    Accepts the camelCase layout used in config files::

        defaultPermissions:
          directory: 0755
          file: 0644
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    default_permissions: DefaultPermissions = Field(
        default_factory=DefaultPermissions, alias="defaultPermissions"
    )

    @classmethod
    def from_file(cls, path: Path) -> FilesystemConfig:
        """Load configuration from a YAML (or JSON) file.

        Args:
            path: Path to the config file.

        Returns:
            Parsed FilesystemConfig.

        Raises:
            FileNotFoundError: If file doesn't exist.
            IsADirectoryError: If the path is a directory (PermissionError on Windows).
            PermissionError: If the file can't be read.
            ValueError: If the file is not valid YAML or has invalid values.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Filesystem config not found: {path}")

        try:
            data = yaml.safe_load(path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid filesystem config {path}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Invalid filesystem config {path}: expected a mapping")

        return cls.model_validate(data)


class TransferOptions(BaseModel):
    """Per-call permission overrides for copy and move.

    Attributes:
        directory_permissions: Mode for a parent directory created on the way.
        file_permissions: Mode applied to the target file.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    directory_permissions: int | None = Field(default=None, alias="directoryPermissions")
    file_permissions: int | None = Field(default=None, alias="filePermissions")

    @field_validator("directory_permissions", "file_permissions", mode="before")
    @classmethod
    def parse_octal(cls, value: Any) -> Any:
        return _parse_permissions(value)

    @field_validator("directory_permissions", "file_permissions")
    @classmethod
    def check_range(cls, value: int | None) -> int | None:
        return _check_permissions(value)


class WriteOptions(TransferOptions):
    """Per-call overrides for writes.

    Attributes:
        flags: WriteFlag bits (or the equivalent raw ``os.O_*`` ints).
    """

    flags: int = Field(default=0, ge=0)
