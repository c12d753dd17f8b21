"""Tests for CLI configuration module."""

import json

from cli.config import Config


def test_config_creates_default_file(tmp_path):
    """Config file is created with defaults if missing."""
    config_path = tmp_path / '.tagvault' / 'config.json'
    config = Config(config_path)

    assert config_path.exists()
    assert config.data['server_port'] == 8081
    assert config.data['timeout'] == 30
    assert config.data['max_retries'] == 3
    assert config.data['retry_backoff_multiplier'] == 2


def test_config_loads_existing_file(tmp_path, monkeypatch):
    monkeypatch.delenv("TAGVAULT_SERVER_HOST", raising=False)
    monkeypatch.delenv("TAGVAULT_PORT", raising=False)
    config_path = tmp_path / '.tagvault' / 'config.json'
    config_path.parent.mkdir(parents=True)
    config_path.write_text(json.dumps({'server_host': 'example.com', 'server_port': 9000}))

    config = Config(config_path)

    assert config.get_base_url() == 'http://example.com:9000'
    assert config.get_timeout() == 30


def test_config_handles_corrupted_file(tmp_path):
    """A corrupt file is backed up and defaults are used."""
    config_path = tmp_path / '.tagvault' / 'config.json'
    config_path.parent.mkdir(parents=True)
    config_path.write_text('{ invalid json content')

    config = Config(config_path)

    assert config.data['server_port'] == 8081
    assert config_path.with_suffix('.json.bak').exists()


def test_config_save(temp_config):
    temp_config.data['server_host'] = 'storage.local'
    temp_config.save()

    with open(temp_config.config_path) as f:
        assert json.load(f)['server_host'] == 'storage.local'


def test_retry_config(temp_config):
    temp_config.data['max_retries'] = 5
    assert temp_config.get_retry_config() == {'max_retries': 5, 'retry_backoff_multiplier': 2}


def test_env_overrides_file_without_saving(tmp_path, monkeypatch):
    monkeypatch.setenv("TAGVAULT_SERVER_HOST", "vault.internal")
    monkeypatch.setenv("TAGVAULT_PORT", "9100")
    config_path = tmp_path / '.tagvault' / 'config.json'

    config = Config(config_path)

    assert config.get_base_url() == 'http://vault.internal:9100'
    config.save()
    assert json.loads(config_path.read_text())['server_host'] == 'localhost'


def test_invalid_port_override_ignored(tmp_path, monkeypatch):
    monkeypatch.delenv("TAGVAULT_SERVER_HOST", raising=False)
    monkeypatch.setenv("TAGVAULT_PORT", "not-a-port")

    config = Config(tmp_path / '.tagvault' / 'config.json')

    assert config.get_base_url() == 'http://localhost:8081'
