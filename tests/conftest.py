"""Shared pytest fixtures for all tests."""

import pytest

from mygit.logger import configure_structlog
from mygit.repository import Repository


@pytest.fixture(autouse=True, scope="session")
def structured_logging():
    configure_structlog()


@pytest.fixture
def author(monkeypatch):
    monkeypatch.setenv("MYGIT_AUTHOR_NAME", "Ada Lovelace")
    monkeypatch.setenv("MYGIT_AUTHOR_EMAIL", "ada@example.com")
    return "Ada Lovelace <ada@example.com>"


@pytest.fixture
def repo(tmp_path, monkeypatch, author):
    """An initialized repository in tmp_path, which is also the cwd."""
    monkeypatch.chdir(tmp_path)
    repo, _ = Repository.init(tmp_path)
    return repo


@pytest.fixture
def write_file(tmp_path):
    def _write(rel_path, content):
        path = tmp_path / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            content = content.encode()
        path.write_bytes(content)
        return path
    return _write
