"""Shared pytest fixtures for all tests."""

from pathlib import Path

import pytest

from cli.config import Config
from server.database import init_database
from tests.blob_fakes import InMemoryBlobStore


@pytest.fixture
def blob_store():
    return InMemoryBlobStore()


@pytest.fixture
def test_db(monkeypatch, tmp_path) -> Path:
    """
    Point the server at a fresh SQLite database for each test.
    """
    db_path = tmp_path / "test.db"
    monkeypatch.setattr("server.config.DATABASE_PATH", str(db_path))
    init_database()
    return db_path


@pytest.fixture
def users(test_db):
    """
    Two registered users, returned as {name: user_id}.
    """
    from server.services.auth_service import AuthService

    auth_service = AuthService()
    _, alice_id = auth_service.register_user("alice", "alice-password")
    _, bob_id = auth_service.register_user("bob", "bob-password")
    return {"alice": alice_id, "bob": bob_id}


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Returns:
        Path to temporary .chatvault directory
    """
    config_dir = tmp_path / '.chatvault'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir, tmp_path):
    """
    Config instance backed by a temp file, downloading into tmp_path.
    """
    config = Config(temp_config_dir / 'config.json')
    config.data['download_dir'] = str(tmp_path / 'downloads')
    config.data['max_retries'] = 0
    return config


@pytest.fixture
def sample_file(tmp_path):
    """
    Create a sample file for testing uploads.

    Returns:
        Path to sample text file
    """
    file_path = tmp_path / 'test.txt'
    file_path.write_text('Sample content for testing')
    return file_path
