"""Tests for cache directory creation."""

from __future__ import annotations

from pathlib import Path

import pytest_mock

from imagecache.cache.provisioning import GUARD_FILE_CONTENT, GUARD_FILE_NAME, CacheDirectoryProvisioner
from imagecache.cache.storage import atomic_write_bytes


def test_ensure_creates_directories_with_guard_files(tmp_path: Path) -> None:
    provisioner = CacheDirectoryProvisioner(tmp_path)

    assert provisioner.ensure("images/hbnimages/w300/photos/a.webp")

    for relative in ("images", "images/hbnimages", "images/hbnimages/w300", "images/hbnimages/w300/photos"):
        guard = tmp_path / relative / GUARD_FILE_NAME
        assert guard.read_text(encoding="utf-8") == GUARD_FILE_CONTENT
    assert not (tmp_path / GUARD_FILE_NAME).exists()


def test_ensure_is_idempotent(tmp_path: Path, mocker: pytest_mock.MockerFixture) -> None:
    provisioner = CacheDirectoryProvisioner(tmp_path)
    assert provisioner.ensure("images/hbnimages/w300/a.webp")

    mkdir = mocker.spy(Path, "mkdir")
    assert provisioner.ensure("images/hbnimages/w300/a.webp")

    mkdir.assert_not_called()


def test_existing_directories_receive_guard_files(tmp_path: Path) -> None:
    (tmp_path / "images").mkdir()
    provisioner = CacheDirectoryProvisioner(tmp_path)

    assert provisioner.ensure("images/hbnimages/w10/a.webp")

    assert (tmp_path / "images" / GUARD_FILE_NAME).exists()


def test_failure_keeps_already_created_directories(tmp_path: Path) -> None:
    (tmp_path / "images").mkdir()
    (tmp_path / "images" / "hbnimages").write_text("not a directory", encoding="utf-8")
    provisioner = CacheDirectoryProvisioner(tmp_path)

    assert not provisioner.ensure("images/hbnimages/w10/a.webp")

    assert (tmp_path / "images" / GUARD_FILE_NAME).exists()
    assert not (tmp_path / "images" / "hbnimages" / "w10").exists()


def test_atomic_write_replaces_file_without_leftovers(tmp_path: Path) -> None:
    target = tmp_path / "a.webp"
    target.write_bytes(b"old")

    atomic_write_bytes(target, b"new")

    assert target.read_bytes() == b"new"
    assert [p.name for p in tmp_path.iterdir()] == ["a.webp"]
