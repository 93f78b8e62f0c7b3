import os
import secrets
from dataclasses import dataclass
from dotenv import load_dotenv
from typing import Any, Mapping, Optional

# Find the absolute path of the root directory
basedir = os.path.abspath(os.path.dirname(__file__))

# Load the .env file from the root directory
load_dotenv(os.path.join(basedir, '.env'))

# Message threads expire 24 hours after the last write
DEFAULT_MESSAGE_CACHE_TTL = 86400


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid"""
    pass


class Config:
    """
    Base configuration class. Contains default configuration settings
    and settings applicable to all environments.
    """
    SECRET_KEY = os.environ.get('SECRET_KEY') or secrets.token_hex(32)
    FLASK_ENV = os.environ.get('FLASK_ENV')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Database settings
    SQLALCHEMY_DATABASE_URI = os.environ.get('POSTGRES_URI') or \
        'sqlite:///' + os.path.join(basedir, 'messages.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Cache settings. No REDIS_URL means the message cache is disabled and
    # every read goes straight to the database.
    REDIS_URL = os.environ.get('REDIS_URL')
    CACHE_PREFIX = os.environ.get('CACHE_PREFIX', '')
    MESSAGE_CACHE_TTL = int(os.environ.get('MESSAGE_CACHE_TTL', str(DEFAULT_MESSAGE_CACHE_TTL)))

    @classmethod
    def validate_required_config(cls) -> None:
        """Validate that all required configuration is present"""
        # Skip validation in testing environment or during migrations
        if os.environ.get('FLASK_ENV') == 'testing' or os.environ.get('SKIP_ENV_VALIDATION'):
            return

        if os.environ.get('DATABASE_URL') or os.environ.get('POSTGRES_URI'):
            return

        raise ConfigurationError(
            "Missing required environment variables: DATABASE_URL or POSTGRES_URI"
        )

    @staticmethod
    def get_required_env(key: str) -> str:
        """Get required environment variable or raise error"""
        value = os.environ.get(key)
        if not value:
            raise ConfigurationError(f"Required environment variable {key} is not set")
        return value

    @classmethod
    def init_app(cls, app):
        """Initialize application with this config"""
        pass


class DevelopmentConfig(Config):
    """Development environment configuration"""
    DEBUG = True
    TESTING = False

    SQLALCHEMY_DATABASE_URI = os.environ.get('DEV_DATABASE_URL') or \
        Config.SQLALCHEMY_DATABASE_URI
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class TestingConfig(Config):
    """Testing environment configuration"""
    TESTING = True
    DEBUG = True

    # Use in-memory SQLite for tests
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'

    # Tests inject their own redis client; never connect to a real server
    REDIS_URL = None
    CACHE_PREFIX = 'test:'
    MESSAGE_CACHE_TTL = DEFAULT_MESSAGE_CACHE_TTL


class ProductionConfig(Config):
    """Production environment configuration"""
    DEBUG = False
    TESTING = False

    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', '')
    REDIS_URL = os.environ.get('REDIS_URL')

    @classmethod
    def init_app(cls, app):
        """Production-specific initialization"""
        if not cls.SQLALCHEMY_DATABASE_URI:
            cls.SQLALCHEMY_DATABASE_URI = cls.get_required_env('POSTGRES_URI')
            app.config['SQLALCHEMY_DATABASE_URI'] = cls.SQLALCHEMY_DATABASE_URI

        cls.validate_required_config()


@dataclass(frozen=True)
class CacheSettings:
    """
    Cache configuration handed to every component that touches redis.

    Built once at startup so that key derivation and TTLs agree across
    the thread store, the identity cache and the in-flight tracker.
    """
    key_prefix: str = ''
    redis_url: Optional[str] = None
    message_ttl_seconds: int = DEFAULT_MESSAGE_CACHE_TTL

    @property
    def enabled(self) -> bool:
        return bool(self.redis_url)

    @classmethod
    def from_config(cls, mapping: Mapping[str, Any]) -> 'CacheSettings':
        """Build settings from a Flask config (or any mapping)."""
        return cls(
            key_prefix=mapping.get('CACHE_PREFIX') or '',
            redis_url=mapping.get('REDIS_URL') or None,
            message_ttl_seconds=int(mapping.get('MESSAGE_CACHE_TTL') or DEFAULT_MESSAGE_CACHE_TTL),
        )


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}


def get_config(config_name: Optional[str] = None) -> type[Config]:
    """Get configuration class based on environment"""
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    return config.get(config_name, DevelopmentConfig)
