"""Tests for shared/config.py."""

import pytest
from unittest.mock import patch
import os

from shared.config import Settings, get_settings


class TestSettings:
    def test_default_values(self):
        """Settings should have sensible defaults."""
        settings = Settings(_env_file=None)
        assert settings.app_name == "Vibe Homework"
        assert settings.debug is False
        assert settings.app_version == "0.1.0"
        assert settings.auth_session_timeout == 10.0
        assert settings.auth_profile_timeout == 10.0
        assert settings.auth_request_timeout == 10.0
        assert settings.auth_fallback_delay == 5.0

    def test_loads_supabase_config_from_env(self):
        """Settings should load Supabase configuration from environment variables."""
        with patch.dict(os.environ, {
            "SUPABASE_URL": "https://test.supabase.co",
            "SUPABASE_ANON_KEY": "test-anon-key",
        }):
            settings = Settings(_env_file=None)
            assert settings.supabase_url == "https://test.supabase.co"
            assert settings.supabase_anon_key == "test-anon-key"

    def test_accepts_frontend_env_names(self):
        """The VITE_* names used by the web build should work too."""
        env = {
            "VITE_SUPABASE_URL": "https://vite.supabase.co",
            "VITE_SUPABASE_ANON_KEY": "vite-anon-key",
        }
        with patch.dict(os.environ, env):
            os.environ.pop("SUPABASE_URL", None)
            os.environ.pop("SUPABASE_ANON_KEY", None)
            settings = Settings(_env_file=None)
            assert settings.supabase_url == "https://vite.supabase.co"
            assert settings.supabase_anon_key == "vite-anon-key"

    def test_loads_timeouts_from_env(self):
        """Timeouts should be configurable independently."""
        with patch.dict(os.environ, {"AUTH_SESSION_TIMEOUT": "3", "AUTH_FALLBACK_DELAY": "7.5"}):
            settings = Settings(_env_file=None)
            assert settings.auth_session_timeout == 3.0
            assert settings.auth_fallback_delay == 7.5
            assert settings.auth_profile_timeout == 10.0


class TestBackendConfigured:
    def test_configured(self):
        settings = Settings(
            _env_file=None,
            supabase_url="https://abcdefgh.supabase.co",
            supabase_anon_key="anon-key",
        )
        assert settings.backend_configured is True

    @pytest.mark.parametrize(
        "url,key",
        [
            ("", ""),
            ("", "anon-key"),
            ("https://abcdefgh.supabase.co", ""),
            ("https://placeholder.supabase.co", "anon-key"),
            ("https://abcdefgh.supabase.co", "placeholder-key"),
            ("https://Placeholder.supabase.co", "anon-key"),
        ],
    )
    def test_not_configured(self, url, key):
        """Missing or placeholder values should count as unconfigured."""
        settings = Settings(_env_file=None, supabase_url=url, supabase_anon_key=key)
        assert settings.backend_configured is False


class TestGetSettings:
    def test_get_settings_returns_settings_instance(self):
        """get_settings should return a Settings instance."""
        get_settings.cache_clear()
        settings = get_settings()
        assert isinstance(settings, Settings)

    def test_get_settings_caches(self):
        """get_settings should return cached instance."""
        get_settings.cache_clear()
        settings1 = get_settings()
        settings2 = get_settings()
        assert settings1 is settings2
