"""Shared pytest fixtures for vault-publish tests."""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from dotenv import load_dotenv

from vault_publish.sync.engine import SyncEngine
from vault_publish.sync.state import ManifestStore

load_dotenv()

PUBLISHED = "---\n可发布: true\n---\n"
UNPUBLISHED = "---\n可发布: false\n---\n"

# Environment variables read by load_config()/setup_logging().
_ENV_VARS = (
    "OBSIDIAN_DIR",
    "QUARTZ_CONTENT_DIR",
    "VAULT_PUBLISH_MANIFEST",
    "VAULT_PUBLISH_IMAGES_DIR",
    "VAULT_PUBLISH_CONFIG",
    "LOG_LEVEL",
    "LOG_FILE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's .env / shell settings out of the tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def vault(tmp_path: Path) -> Path:
    """An empty Obsidian vault with its shared ``image/`` directory."""
    root = tmp_path / "obsidian"
    (root / "image").mkdir(parents=True)
    return root


@pytest.fixture
def content(tmp_path: Path) -> Path:
    """An empty Quartz content directory."""
    root = tmp_path / "quartz" / "content"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def manifest_path(tmp_path: Path) -> Path:
    return tmp_path / ".vault_publish" / "sync-manifest.json"


@pytest.fixture
def engine(vault: Path, content: Path, manifest_path: Path) -> SyncEngine:
    return SyncEngine(
        source_root=vault,
        content_root=content,
        manifest_store=ManifestStore(manifest_path),
    )


@pytest.fixture
def write_note(vault: Path):
    """Factory: write a note into the vault and return its path.

    ``publish=True`` prepends a ``可发布: true`` front matter block,
    ``publish=False`` a ``可发布: false`` one and ``publish=None`` none.
    """

    def _write(rel: str, body: str = "", publish: bool | None = True) -> Path:
        path = vault / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        header = {True: PUBLISHED, False: UNPUBLISHED, None: ""}[publish]
        path.write_text(header + body, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def write_image(vault: Path):
    """Factory: write a binary file under the vault (default ``image/``)."""

    def _write(name: str, data: bytes = b"\x89PNG", folder: str = "image") -> Path:
        path = vault / folder / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path

    return _write


@pytest.fixture
def bump_mtime():
    """Factory: move a file's modification time forward."""

    def _bump(path: Path, seconds: float = 10.0) -> None:
        stat = path.stat()
        os.utime(path, (stat.st_atime, stat.st_mtime + seconds))

    return _bump
