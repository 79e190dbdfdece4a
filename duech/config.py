#!/usr/bin/env python3
"""
Configuration Management for the DUECh dictionary
Supports environment variables, a config.json file and development defaults
"""

import os
import json
import logging
from typing import Dict, Optional, Any
from pathlib import Path
from dataclasses import dataclass, asdict

logger = logging.getLogger(__name__)

DEFAULT_SESSION_MAX_AGE = 60 * 60 * 24 * 7  # 7 days
DEV_SECRET = "dev-secret-change-me"


@dataclass
class DatabaseConfig:
    """Database configuration with validation"""
    host: str
    port: int
    database: str
    user: str
    password: str
    schema: str = 'public'
    pool_size: int = 10
    timeout: int = 30

    def __post_init__(self):
        """Validate configuration after initialization"""
        if not self.host:
            raise ValueError("Database host is required")
        if not self.user:
            raise ValueError("Database user is required")
        if not self.password:
            raise ValueError("Database password is required")
        if not (1 <= self.port <= 65535):
            raise ValueError("Database port must be between 1 and 65535")

    def get_connection_string(self, hide_password: bool = True) -> str:
        """Get connection string representation"""
        password = "***" if hide_password else self.password
        conninfo = (
            f"postgresql://{self.user}:{password}@{self.host}:{self.port}/{self.database}"
        )
        if self.schema:
            conninfo += f"?options=-c%20search_path%3D{self.schema}"
        return conninfo


@dataclass
class AuthConfig:
    """Session cookie and password settings"""
    secret_key: str = DEV_SECRET
    algorithm: str = 'HS256'
    session_max_age: int = DEFAULT_SESSION_MAX_AGE
    cookie_name: str = 'duech_session'
    secure_cookies: bool = False
    demo_user_enabled: bool = True
    demo_user_email: str = 'admin@example.com'
    demo_user_password: str = 'admin123'

    def __post_init__(self):
        if not self.secret_key:
            raise ValueError("Auth secret key is required")
        if self.session_max_age <= 0:
            raise ValueError("Session lifetime must be positive")


@dataclass
class SiteConfig:
    """Host routing, storage backend and logging settings"""
    editor_host: str = 'editor.localhost'
    localhost: str = 'localhost'
    editor_path_prefix: str = '/editor'
    data_file: Optional[str] = None
    log_level: str = 'INFO'
    environment: str = 'development'

    def __post_init__(self):
        if not self.editor_path_prefix.startswith('/'):
            raise ValueError("Editor path prefix must start with '/'")
        self.editor_path_prefix = self.editor_path_prefix.rstrip('/') or '/editor'

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == 'production'


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == '':
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class ConfigManager:
    """Configuration manager with environment variable support"""

    def __init__(self, config_file: Optional[Path] = None):
        self._db_config: Optional[DatabaseConfig] = None
        self._auth_config: Optional[AuthConfig] = None
        self._site_config: Optional[SiteConfig] = None
        self._config_file = config_file or Path(__file__).parent / 'config.json'
        self._file_data: Optional[Dict[str, Any]] = None

    def _read_file(self) -> Dict[str, Any]:
        if self._file_data is None:
            self._file_data = {}
            if self._config_file.exists():
                try:
                    with open(self._config_file, 'r', encoding='utf-8') as f:
                        self._file_data = json.load(f)
                    logger.info(f"Loaded configuration file {self._config_file}")
                except (OSError, json.JSONDecodeError) as e:
                    logger.error(f"Error loading config file: {e}")
        return self._file_data

    def get_database_config(self) -> DatabaseConfig:
        """
        Get database configuration from multiple sources in priority order:
        1. Environment variables
        2. config.json file
        3. Default hardcoded values (development only)
        """
        if self._db_config is None:
            self._db_config = self._load_database_config()
        return self._db_config

    def _has_env_database_config(self) -> bool:
        required_vars = ['DB_HOST', 'DB_USER', 'DB_PASSWORD', 'DB_NAME']
        return all(os.getenv(var) for var in required_vars)

    def _load_database_config(self) -> DatabaseConfig:
        if self._has_env_database_config():
            logger.info("Loading database config from environment variables")
            return DatabaseConfig(
                host=os.getenv('DB_HOST'),
                port=int(os.getenv('DB_PORT', '5432')),
                database=os.getenv('DB_NAME'),
                user=os.getenv('DB_USER'),
                password=os.getenv('DB_PASSWORD'),
                schema=os.getenv('DB_SCHEMA', 'public'),
                pool_size=int(os.getenv('DB_POOL_SIZE', '10')),
                timeout=int(os.getenv('DB_TIMEOUT', '30')),
            )

        db_data = self._read_file().get('database')
        if db_data:
            return DatabaseConfig(**db_data)

        logger.warning("Using default database configuration - not recommended for production")
        return DatabaseConfig(
            host='localhost',
            port=5432,
            database='duech',
            user='duech',
            password='duech-dev-password',
        )

    def get_auth_config(self) -> AuthConfig:
        if self._auth_config is None:
            data = dict(self._read_file().get('auth', {}))
            secret = os.getenv('AUTH_SECRET') or os.getenv('SECRET_KEY')
            if secret:
                data['secret_key'] = secret
            if os.getenv('SESSION_MAX_AGE'):
                data['session_max_age'] = int(os.getenv('SESSION_MAX_AGE'))
            if os.getenv('DEMO_USER_EMAIL'):
                data['demo_user_email'] = os.getenv('DEMO_USER_EMAIL')
            if os.getenv('DEMO_USER_PASSWORD'):
                data['demo_user_password'] = os.getenv('DEMO_USER_PASSWORD')
            data['demo_user_enabled'] = _env_bool(
                'DEMO_USER_ENABLED', data.get('demo_user_enabled', True)
            )
            data['secure_cookies'] = self.get_site_config().is_production
            self._auth_config = AuthConfig(**data)
            if self._auth_config.secret_key == DEV_SECRET:
                logger.warning("Using development auth secret - set AUTH_SECRET in production")
        return self._auth_config

    def get_site_config(self) -> SiteConfig:
        if self._site_config is None:
            data = dict(self._read_file().get('site', {}))
            overrides = {
                'editor_host': os.getenv('EDITOR_HOST'),
                'localhost': os.getenv('PUBLIC_HOST'),
                'editor_path_prefix': os.getenv('EDITOR_PATH_PREFIX'),
                'data_file': os.getenv('DUECH_DATA_FILE'),
                'log_level': os.getenv('LOG_LEVEL'),
                'environment': os.getenv('DUECH_ENV'),
            }
            data.update({key: value for key, value in overrides.items() if value})
            self._site_config = SiteConfig(**data)
        return self._site_config

    def get_config_info(self) -> Dict[str, Any]:
        """Get configuration information (without sensitive data)"""
        db = self.get_database_config()
        site = self.get_site_config()
        return {
            'database': db.get_connection_string(hide_password=True),
            'backend': 'json' if site.data_file else 'postgresql',
            'site': asdict(site),
            'config_sources': {
                'env_variables': self._has_env_database_config(),
                'config_file': self._config_file.exists(),
            },
        }


# Global configuration manager instance
config_manager = ConfigManager()


def get_database_config() -> DatabaseConfig:
    return config_manager.get_database_config()


def get_auth_config() -> AuthConfig:
    return config_manager.get_auth_config()


def get_site_config() -> SiteConfig:
    return config_manager.get_site_config()


def reset_config(manager: Optional[ConfigManager] = None) -> ConfigManager:
    """Replace the global configuration manager (used after env changes)"""
    global config_manager
    config_manager = manager or ConfigManager()
    return config_manager
