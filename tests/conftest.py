"""Shared pytest fixtures for all tests."""

import pytest

from cli.config import Config
from common.types import Session
from fakes import FakeIdentity, FakeStorage
from vault.client import VaultClient

BUCKET_ID = "bucket-files"
SHARE_ORIGIN = "https://files.example.com"


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to temporary .filevault directory
    """
    config_dir = tmp_path / '.filevault'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir):
    """
    Create temporary config instance.

    Returns:
        Config instance with temp config file
    """
    return Config(temp_config_dir / 'config.json')


@pytest.fixture
def sample_file(tmp_path):
    """
    Create a 10 KiB text file for upload tests.

    Returns:
        Path to sample text file
    """
    file_path = tmp_path / 'notes.txt'
    file_path.write_text('x' * 10 * 1024)
    return file_path


@pytest.fixture
def image_file(tmp_path):
    file_path = tmp_path / 'photo.png'
    file_path.write_bytes(b'\x89PNG\r\n\x1a\n' + b'\x00' * 2048)
    return file_path


@pytest.fixture
def identity():
    identity = FakeIdentity()
    identity.add_account('Ada Lovelace', 'ada@example.com', 'correct-horse', user_id='user-ada')
    return identity


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def client(identity, storage):
    """VaultClient over in-memory services, not logged in."""
    return VaultClient(identity, storage, bucket_id=BUCKET_ID, share_origin=SHARE_ORIGIN)


@pytest.fixture
def logged_in_client(client, identity):
    """VaultClient whose state already holds a session for Ada."""
    session = Session(session_id='session-0', user_id='user-ada', name='Ada Lovelace', email='ada@example.com')
    identity.current = session
    client.state.authenticate(session)
    return client
