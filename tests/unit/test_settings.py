"""
Unit tests for the configuration settings module.

Tests cover:
- Default configuration
- Field validation (log level, CORS origins, speed range)
- Environment detection and env file selection
- Settings caching and startup validation
"""

import os
import pytest
from unittest.mock import patch

from config.settings import (
    Settings,
    Environment,
    ConfigurationError,
    _detect_environment,
    _get_env_files,
    clear_settings_cache,
    create_settings_for_environment,
    get_settings,
    validate_startup,
)


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Make sure no test sees settings cached by another."""
    clear_settings_cache()
    yield
    clear_settings_cache()


class TestSettings:
    """Tests for the Settings class."""
    
    def test_default_values_are_applied(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)
            
            assert settings.environment == Environment.DEVELOPMENT
            assert settings.port == 3000
            assert settings.min_speed == 40.0
            assert settings.max_speed == 150.0
            assert settings.log_level == "INFO"
            assert settings.otel_endpoint is None
            assert settings.otel_service_name == "telemetry-log-backend"
            assert settings.cors_origins == ["http://localhost:3000"]
    
    def test_values_are_read_from_environment(self):
        env_vars = {
            "MIN_SPEED": "30",
            "MAX_SPEED": "120.5",
            "PORT": "8080",
            "LOG_LEVEL": "debug",
            "ENVIRONMENT": "staging",
        }
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings(_env_file=None)
            
            assert settings.min_speed == 30.0
            assert settings.max_speed == 120.5
            assert settings.port == 8080
            assert settings.log_level == "DEBUG"
            assert settings.environment == Environment.STAGING
    
    def test_invalid_log_level_raises_error(self):
        with patch.dict(os.environ, {"LOG_LEVEL": "VERBOSE"}, clear=True):
            with pytest.raises(Exception) as exc_info:
                Settings(_env_file=None)
            
            assert "log_level" in str(exc_info.value).lower()
    
    @pytest.mark.parametrize("min_speed, max_speed", [("150", "40"), ("60", "60")])
    def test_min_speed_must_be_below_max_speed(self, min_speed, max_speed):
        env_vars = {"MIN_SPEED": min_speed, "MAX_SPEED": max_speed}
        with patch.dict(os.environ, env_vars, clear=True):
            with pytest.raises(Exception) as exc_info:
                Settings(_env_file=None)
            
            assert "min_speed" in str(exc_info.value)
    
    def test_negative_min_speed_raises_error(self):
        with patch.dict(os.environ, {"MIN_SPEED": "-1"}, clear=True):
            with pytest.raises(Exception):
                Settings(_env_file=None)
    
    def test_cors_origins_list_parsing(self):
        env_vars = {"CORS_ORIGINS": '["https://dash.example.com", "http://localhost:5173"]'}
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings(_env_file=None)
            
            assert settings.cors_origins == ["https://dash.example.com", "http://localhost:5173"]
    
    @pytest.mark.parametrize("origin", ["*", "https://*.example.com", "dash.example.com"])
    def test_cors_origins_rejects_wildcards_and_bad_urls(self, origin):
        with patch.dict(os.environ, {"CORS_ORIGINS": f'["{origin}"]'}, clear=True):
            with pytest.raises(Exception):
                Settings(_env_file=None)


class TestConfigurationError:
    """Tests for the ConfigurationError exception."""
    
    def test_error_message_with_missing_fields(self):
        error = ConfigurationError("Config failed", missing_fields=["port"])
        
        assert "Config failed" in str(error)
        assert "Missing required fields: port" in str(error)
    
    def test_error_message_with_invalid_fields(self):
        error = ConfigurationError("Config failed", invalid_fields={"log_level": "bad level"})
        
        assert "Invalid field values" in str(error)
        assert "log_level: bad level" in str(error)


class TestEnvironmentDetection:
    """Tests for environment detection and env file selection."""
    
    def test_detect_environment_from_env_var(self):
        with patch.dict(os.environ, {"ENVIRONMENT": "Production "}, clear=True):
            assert _detect_environment() == Environment.PRODUCTION
    
    def test_detect_environment_defaults_to_development(self):
        with patch.dict(os.environ, {}, clear=True):
            assert _detect_environment() == Environment.DEVELOPMENT
    
    def test_detect_environment_handles_invalid_value(self):
        with patch.dict(os.environ, {"ENVIRONMENT": "qa"}, clear=True):
            assert _detect_environment() == Environment.DEVELOPMENT
    
    @pytest.mark.parametrize("environment", list(Environment))
    def test_get_env_files(self, environment):
        assert _get_env_files(environment) == (".env", f".env.{environment.value}")


class TestCreateSettings:
    """Tests for create_settings_for_environment and get_settings."""
    
    def test_loads_environment_specific_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".env").write_text("MIN_SPEED=20\nMAX_SPEED=100\n")
        (tmp_path / ".env.staging").write_text("MAX_SPEED=130\n")
        
        with patch.dict(os.environ, {}, clear=True):
            settings = create_settings_for_environment(Environment.STAGING)
        
        assert settings.min_speed == 20.0
        assert settings.max_speed == 130.0
    
    def test_invalid_configuration_raises_configuration_error(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        
        with patch.dict(os.environ, {"LOG_LEVEL": "LOUD", "PORT": "0"}, clear=True):
            with pytest.raises(ConfigurationError) as exc_info:
                create_settings_for_environment()
        
        assert set(exc_info.value.invalid_fields) == {"log_level", "port"}
    
    def test_get_settings_is_cached(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        
        with patch.dict(os.environ, {"MIN_SPEED": "10"}, clear=True):
            first = get_settings()
        with patch.dict(os.environ, {"MIN_SPEED": "20"}, clear=True):
            assert get_settings() is first
            
            clear_settings_cache()
            assert get_settings().min_speed == 20.0


class TestValidateStartup:
    """Tests for validate_startup."""
    
    def test_development_with_localhost_origins_is_valid(self):
        with patch.dict(os.environ, {}, clear=True):
            validate_startup(Settings(_env_file=None))
    
    def test_production_requires_non_localhost_origins(self):
        with patch.dict(os.environ, {"ENVIRONMENT": "production"}, clear=True):
            settings = Settings(_env_file=None)
        
        with pytest.raises(ConfigurationError) as exc_info:
            validate_startup(settings)
        
        assert "cors_origins" in exc_info.value.invalid_fields
    
    def test_production_with_real_origin_is_valid(self):
        env_vars = {
            "ENVIRONMENT": "production",
            "CORS_ORIGINS": '["https://dash.example.com"]',
        }
        with patch.dict(os.environ, env_vars, clear=True):
            validate_startup(Settings(_env_file=None))
