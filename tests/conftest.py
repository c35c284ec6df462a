"""Shared test fixtures."""

import json
import os
import tempfile

import pytest

from tps_admin.content.paths import CONTENT_PATH_ENV, ContentPathConfig
from tps_admin.content.store import DEFAULT_IMAGE_CONTENT, ContentStore


@pytest.fixture(autouse=True)
def clear_content_override(monkeypatch):
    """Keep a developer's shell override from leaking into tests."""
    monkeypatch.delenv(CONTENT_PATH_ENV, raising=False)


@pytest.fixture
def project_root(tmp_path):
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def content_config(project_root):
    """Config resolving to the default location under a temp project root."""
    return ContentPathConfig(project_root=project_root)


@pytest.fixture
def store(content_config):
    return ContentStore(content_config)


@pytest.fixture
def default_document():
    return json.loads(DEFAULT_IMAGE_CONTENT)


@pytest.fixture
def sample_document():
    return {
        "hero": {
            "primary": {
                "id": "hero-primary",
                "label": "Spring gala",
                "url": "https://example.com/gala.jpg",
                "alt": "Ballroom with string lights",
            },
        },
        "spotlights": [],
        "gallery": [{"id": "g1", "url": "https://example.com/1.jpg", "alt": "Tables"}],
    }


@pytest.fixture
def socket_path():
    """Short unique socket path (AF_UNIX paths are length-limited)."""
    fd, path = tempfile.mkstemp(suffix=".sock")
    os.close(fd)
    os.unlink(path)
    yield path
    if os.path.exists(path):
        os.unlink(path)
