"""Unit tests for configuration loading and logging configuration."""

import pytest
import yaml
from pydantic import ValidationError

from route_proxy.config import (
    ConfigLoader,
    ProxySettings,
    TimeoutConfig,
    get_config,
    reload_config,
)
from route_proxy.config.logging import StructuredLogger, get_logging_config


def write_yaml(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data))


class TestProxySettings:
    """Test cases for the ProxySettings model."""

    def test_settings_defaults(self):
        settings = ProxySettings()

        assert settings.environment == "development"
        assert settings.log_level == "INFO"
        assert settings.log_format == "json"
        assert settings.upstream_base_url is None
        assert settings.timeout == TimeoutConfig()
        assert settings.default_headers == {}

    def test_log_level_is_upper_cased(self):
        assert ProxySettings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_format(self):
        with pytest.raises(ValidationError):
            ProxySettings(log_format="xml")

    def test_extra_config(self):
        settings = ProxySettings(
            default_headers={"x-api-key": "k"},
            default_params={"tenant": "t1"},
            timeout={"read": 10.0}
        )

        assert settings.extra_config() == {
            "timeout": {"connect": 5.0, "read": 10.0, "write": 5.0, "pool": 5.0},
            "headers": {"x-api-key": "k"},
            "params": {"tenant": "t1"},
        }

    def test_extra_config_without_defaults(self):
        assert set(ProxySettings().extra_config()) == {"timeout"}


class TestConfigLoader:
    """Test cases for YAML configuration loading."""

    def test_load_config_without_files(self, tmp_path):
        settings = ConfigLoader(tmp_path).load_config("test")

        assert settings == ProxySettings(environment="test")

    def test_load_config_merges_environment_file(self, tmp_path):
        write_yaml(tmp_path / "proxy.yaml", {
            "log_level": "info",
            "timeout": {"connect": 1.0, "read": 2.0},
            "default_headers": {"x-base": "1"}
        })
        write_yaml(tmp_path / "production.yaml", {
            "timeout": {"read": 20.0},
            "default_headers": {"x-env": "prod"}
        })

        settings = ConfigLoader(tmp_path).load_config("production")

        assert settings.environment == "production"
        assert settings.timeout.connect == 1.0
        assert settings.timeout.read == 20.0
        assert settings.default_headers == {"x-base": "1", "x-env": "prod"}

    def test_load_config_substitutes_env_vars(self, tmp_path, monkeypatch):
        monkeypatch.setenv("UPSTREAM_HOST", "orders.internal")
        write_yaml(tmp_path / "proxy.yaml", {
            "upstream_base_url": "https://${UPSTREAM_HOST}",
            "default_headers": {"x-region": "${REGION:eu-west-1}"}
        })

        settings = ConfigLoader(tmp_path).load_config("test")

        assert settings.upstream_base_url == "https://orders.internal"
        assert settings.default_headers == {"x-region": "eu-west-1"}

    def test_environment_overrides_win(self, tmp_path, monkeypatch):
        write_yaml(tmp_path / "proxy.yaml", {"log_level": "info", "log_format": "json"})
        monkeypatch.setenv("ROUTE_PROXY_LOG_LEVEL", "debug")
        monkeypatch.setenv("ROUTE_PROXY_LOG_FORMAT", "text")

        settings = ConfigLoader(tmp_path).load_config("test")

        assert settings.log_level == "DEBUG"
        assert settings.log_format == "text"

    def test_log_file_from_environment(self, tmp_path, monkeypatch):
        log_file = str(tmp_path / "proxy.log")
        monkeypatch.setenv("ROUTE_PROXY_LOG_FILE", log_file)

        settings = ConfigLoader(tmp_path).load_config("test")

        assert settings.log_file == log_file

    def test_invalid_yaml_falls_back_to_defaults(self, tmp_path):
        (tmp_path / "proxy.yaml").write_text("log_level: [unclosed")

        settings = ConfigLoader(tmp_path).load_config("test")

        assert settings.log_level == "INFO"

    def test_get_config_is_cached(self):
        assert get_config() is get_config()

    def test_reload_config(self, tmp_path):
        write_yaml(tmp_path / "staging.yaml", {"upstream_base_url": "http://staging"})
        first = get_config()

        reloaded = reload_config("staging", config_dir=tmp_path)

        assert reloaded is not first
        assert get_config() is reloaded
        assert reloaded.upstream_base_url == "http://staging"


class TestLoggingConfig:
    """Test cases for the logging configuration."""

    def test_json_logging_config(self):
        config = get_logging_config(log_level="DEBUG", log_format="json")

        assert config["handlers"]["console"]["formatter"] == "json"
        assert config["formatters"]["json"]["()"] == "pythonjsonlogger.json.JsonFormatter"
        assert config["loggers"]["route_proxy"]["level"] == "DEBUG"
        assert "file" not in config["handlers"]

    def test_text_logging_config_with_file(self, tmp_path):
        log_file = str(tmp_path / "proxy.log")
        config = get_logging_config(log_format="text", log_file=log_file)

        assert config["handlers"]["console"]["formatter"] == "detailed"
        assert config["handlers"]["file"]["filename"] == log_file
        assert config["loggers"][""]["handlers"] == ["console", "file"]

    def test_structured_logger_level_follows_status(self, capture_logs):
        logger = StructuredLogger("route_proxy.tests")

        logger.log_proxy_request(method="GET", resource="/ok", status_code=200, response_time=1.0)
        logger.log_proxy_request(method="GET", resource="/fail", status_code=500, response_time=1.0)

        output = capture_logs.getvalue()
        assert output.count("Proxy request") == 2
