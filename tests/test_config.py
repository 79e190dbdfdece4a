"""Tests for configuration loading."""

import json

import pytest

from duech.config import (
    DEV_SECRET,
    AuthConfig,
    ConfigManager,
    DatabaseConfig,
    SiteConfig,
)


class TestDatabaseConfig:
    """Database configuration validation"""

    def test_missing_host(self):
        with pytest.raises(ValueError, match='host'):
            DatabaseConfig(host='', port=5432, database='duech', user='u', password='p')

    def test_invalid_port(self):
        with pytest.raises(ValueError, match='port'):
            DatabaseConfig(host='localhost', port=70000, database='duech', user='u', password='p')

    def test_connection_string_hides_password(self):
        config = DatabaseConfig(host='db', port=5432, database='duech', user='u', password='secret')
        assert 'secret' not in config.get_connection_string()
        assert 'secret' in config.get_connection_string(hide_password=False)
        assert config.to_dict()['dbname'] == 'duech'


class TestConfigManager:

    def test_defaults(self, tmp_path, monkeypatch):
        monkeypatch.delenv('AUTH_SECRET', raising=False)
        manager = ConfigManager(tmp_path / 'missing.json')
        assert manager.get_database_config().host == 'localhost'
        assert manager.get_auth_config().secret_key == DEV_SECRET
        assert manager.get_site_config().editor_host == 'editor.localhost'
        assert not manager.get_auth_config().secure_cookies

    def test_environment_wins(self, tmp_path, monkeypatch):
        monkeypatch.setenv('DB_HOST', 'db.example.cl')
        monkeypatch.setenv('DB_USER', 'duech')
        monkeypatch.setenv('DB_PASSWORD', 'pw')
        monkeypatch.setenv('DB_NAME', 'duech_prod')
        monkeypatch.setenv('DB_PORT', '6543')
        monkeypatch.setenv('DUECH_ENV', 'production')
        monkeypatch.setenv('EDITOR_HOST', 'editor.duech.cl')
        monkeypatch.setenv('DEMO_USER_ENABLED', 'false')

        manager = ConfigManager(tmp_path / 'missing.json')
        db = manager.get_database_config()
        assert (db.host, db.port, db.database) == ('db.example.cl', 6543, 'duech_prod')
        assert manager.get_auth_config().secure_cookies
        assert not manager.get_auth_config().demo_user_enabled
        assert manager.get_site_config().editor_host == 'editor.duech.cl'
        assert manager.get_config_info()['database'].startswith('postgresql://duech:***@')

    def test_config_file(self, tmp_path):
        path = tmp_path / 'config.json'
        path.write_text(json.dumps({
            'database': {'host': 'filehost', 'port': 5433, 'database': 'd', 'user': 'u', 'password': 'p'},
            'site': {'editor_path_prefix': '/panel'},
        }), encoding='utf-8')
        manager = ConfigManager(path)
        assert manager.get_database_config().host == 'filehost'
        assert manager.get_site_config().editor_path_prefix == '/panel'
        assert manager.get_config_info()['backend'] == 'postgresql'


def test_site_and_auth_validation():
    with pytest.raises(ValueError):
        SiteConfig(editor_path_prefix='editor')
    with pytest.raises(ValueError):
        AuthConfig(secret_key='')
    with pytest.raises(ValueError):
        AuthConfig(session_max_age=0)
