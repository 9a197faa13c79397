"""Tests for CLI configuration module."""

import json

from cli.config import Config


def test_config_creates_default_file(tmp_path):
    """Test that config file is created with defaults if missing."""
    config_path = tmp_path / '.chatvault' / 'config.json'
    config = Config(config_path)

    assert config_path.exists()

    assert config.data['server_host'] == 'localhost'
    assert config.data['server_port'] == 8000
    assert config.data['timeout'] == 30
    assert config.data['max_retries'] == 3
    assert config.data['retry_backoff_multiplier'] == 2
    assert 'api_key' not in config.data


def test_config_loads_existing_file(tmp_path):
    config_path = tmp_path / '.chatvault' / 'config.json'
    config_path.parent.mkdir(parents=True)
    with open(config_path, 'w') as f:
        json.dump({'api_key': 'cv_test123', 'server_host': 'example.com', 'server_port': 9000}, f)

    config = Config(config_path)

    assert config.data['api_key'] == 'cv_test123'
    assert config.get_base_url() == 'http://example.com:9000'
    # missing keys fall back to defaults
    assert config.data['timeout'] == 30


def test_config_save_and_clear_api_key(tmp_path):
    config = Config(tmp_path / 'config.json')
    assert config.get_api_key() is None

    config.set_api_key('cv_abc123')
    with open(config.config_path) as f:
        assert json.load(f)['api_key'] == 'cv_abc123'

    config.clear_api_key()
    assert config.get_api_key() is None
    with open(config.config_path) as f:
        assert 'api_key' not in json.load(f)


def test_config_handles_corrupted_file(tmp_path):
    """Test recovery from corrupted config file."""
    config_path = tmp_path / '.chatvault' / 'config.json'
    config_path.parent.mkdir(parents=True)
    config_path.write_text('{ invalid json content')

    config = Config(config_path)

    assert config.data['server_host'] == 'localhost'
    assert config_path.with_suffix('.json.bak').exists()


def test_config_retry_and_timeout(tmp_path):
    config = Config(tmp_path / 'config.json')

    assert config.get_timeout() == 30
    assert config.get_retry_config() == {'max_retries': 3, 'retry_backoff_multiplier': 2}

    config.data['max_retries'] = 5
    assert config.get_retry_config()['max_retries'] == 5


def test_config_directory_created_if_missing(tmp_path):
    config_path = tmp_path / 'nested' / 'deep' / '.chatvault' / 'config.json'

    Config(config_path)

    assert config_path.exists()
