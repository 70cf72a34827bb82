"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from local_filesystem import FilesystemConfig, LocalFilesystem


@pytest.fixture
def location(tmp_path: Path) -> Path:
    """Create the root directory for a filesystem under test."""
    root = tmp_path / "root"
    root.mkdir()
    return root


@pytest.fixture
def filesystem(location: Path) -> LocalFilesystem:
    """Create a LocalFilesystem with default permissions."""
    return LocalFilesystem(location)


@pytest.fixture
def permissive_filesystem(location: Path) -> LocalFilesystem:
    """Create a LocalFilesystem with world-writable defaults."""
    config = FilesystemConfig.model_validate(
        {"defaultPermissions": {"directory": 0o777, "file": 0o666}}
    )
    return LocalFilesystem(location, config=config)


@pytest.fixture
def populated_tree(location: Path) -> Path:
    """Create a nested tree of files and directories under test-dir."""
    root = location / "test-dir"
    (root / "nested" / "deeper").mkdir(parents=True)
    (root / "empty").mkdir()
    (root / "test.txt").write_text("Test\nfile")
    (root / "nested" / "a.txt").write_text("a")
    (root / "nested" / "deeper" / "b.bin").write_bytes(b"\x00\x01")
    return root
