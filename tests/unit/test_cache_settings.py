"""
Tests for cache configuration and redis client creation
"""

import pytest
from unittest.mock import patch

from config import DEFAULT_MESSAGE_CACHE_TTL, CacheSettings, ConfigurationError, Config, TestingConfig, get_config
from extensions import create_redis_client


class TestCacheSettings:

    def test_defaults_disable_cache(self):
        settings = CacheSettings()

        assert settings.enabled is False
        assert settings.key_prefix == ''
        assert settings.message_ttl_seconds == DEFAULT_MESSAGE_CACHE_TTL == 86400

    def test_from_config_mapping(self):
        settings = CacheSettings.from_config({
            'REDIS_URL': 'redis://localhost:6379/0',
            'CACHE_PREFIX': 'stage:',
            'MESSAGE_CACHE_TTL': '600',
        })

        assert settings.enabled is True
        assert settings.key_prefix == 'stage:'
        assert settings.message_ttl_seconds == 600

    def test_blank_values_fall_back_to_defaults(self):
        settings = CacheSettings.from_config({'REDIS_URL': '', 'CACHE_PREFIX': None})

        assert settings.enabled is False
        assert settings.key_prefix == ''
        assert settings.message_ttl_seconds == 86400

    def test_testing_config_never_points_at_real_redis(self):
        assert TestingConfig.REDIS_URL is None
        assert get_config('testing') is TestingConfig

    def test_unknown_config_name_falls_back_to_development(self):
        assert get_config('staging').__name__ == 'DevelopmentConfig'


class TestRequiredEnv:

    def test_missing_required_env_raises(self, monkeypatch):
        monkeypatch.delenv('SOME_REQUIRED_KEY', raising=False)

        with pytest.raises(ConfigurationError):
            Config.get_required_env('SOME_REQUIRED_KEY')

    def test_present_required_env_is_returned(self, monkeypatch):
        monkeypatch.setenv('SOME_REQUIRED_KEY', 'value')

        assert Config.get_required_env('SOME_REQUIRED_KEY') == 'value'


class TestCreateRedisClient:

    def test_disabled_settings_give_no_client(self):
        assert create_redis_client(CacheSettings()) is None

    @patch('extensions.redis.from_url')
    def test_plain_url_is_used_as_is(self, mock_from_url):
        create_redis_client(CacheSettings(redis_url='redis://localhost:6379/0'))

        mock_from_url.assert_called_once_with('redis://localhost:6379/0', decode_responses=True)

    @patch('extensions.redis.from_url')
    def test_tls_url_skips_cert_validation(self, mock_from_url):
        create_redis_client(CacheSettings(redis_url='rediss://user:pw@host:25061'))

        mock_from_url.assert_called_once_with(
            'rediss://user:pw@host:25061?ssl_cert_reqs=CERT_NONE', decode_responses=True)
