import os
import re
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from pydantic import BaseModel, Field, field_validator

from .logging import get_logger, setup_logging, StructuredLogger

logger = get_logger(__name__)

ENV_PREFIX = "ROUTE_PROXY_"


class TimeoutConfig(BaseModel):
    """Timeouts for the outbound call, in seconds."""
    connect: float = 5.0
    read: float = 30.0
    write: float = 5.0
    pool: float = 5.0


class ProxySettings(BaseModel):
    """Process-wide settings for the route proxy."""
    environment: str = "development"
    log_level: str = "INFO"
    log_format: str = "json"
    log_file: Optional[str] = None
    upstream_base_url: Optional[str] = None
    timeout: TimeoutConfig = Field(default_factory=TimeoutConfig)
    default_headers: Dict[str, str] = Field(default_factory=dict)
    default_params: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("log_format")
    @classmethod
    def _check_log_format(cls, value: str) -> str:
        if value not in ("json", "text"):
            raise ValueError("log_format must be 'json' or 'text'")
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()

    def extra_config(self) -> Dict[str, Any]:
        """
        Build the shared config merged into every forwarded request.

        Rule-built headers and params are laid over these defaults.
        """
        extra: Dict[str, Any] = {"timeout": self.timeout.model_dump()}
        if self.default_headers:
            extra["headers"] = dict(self.default_headers)
        if self.default_params:
            extra["params"] = dict(self.default_params)
        return extra


class ConfigLoader:
    """Configuration loader for YAML files with environment-specific overrides."""

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize the configuration loader.

        Args:
            config_dir: Directory containing configuration files.
                       Defaults to ROUTE_PROXY_CONFIG_DIR, then ./config.
        """
        if config_dir is None:
            config_dir = os.getenv(f"{ENV_PREFIX}CONFIG_DIR", "config")
        self.config_dir = Path(config_dir)

    def load_config(self, environment: Optional[str] = None) -> ProxySettings:
        """Load configuration for the specified environment.

        Args:
            environment: Environment name (development, production, etc.).
                        If None, will try to detect from ENVIRONMENT variable.

        Returns:
            Loaded and validated settings.
        """
        if environment is None:
            environment = os.getenv("ENVIRONMENT", "development")

        config_data = self._load_base_config()

        env_config = self._load_environment_config(environment)
        if env_config:
            config_data = self._merge_configs(config_data, env_config)

        config_data = self._substitute_env_vars(config_data)
        config_data = self._apply_env_overrides(config_data)
        config_data.setdefault("environment", environment)

        return ProxySettings(**config_data)

    def _load_base_config(self) -> Dict[str, Any]:
        """Load the base proxy configuration."""
        base_path = self.config_dir / "proxy.yaml"
        if base_path.exists():
            return self._load_yaml_file(base_path)
        return {}

    def _load_environment_config(self, environment: str) -> Optional[Dict[str, Any]]:
        """Load environment-specific configuration."""
        env_config_path = self.config_dir / f"{environment}.yaml"
        if env_config_path.exists():
            return self._load_yaml_file(env_config_path)
        return None

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """Load and parse a YAML file."""
        try:
            with open(file_path, 'r') as file:
                return yaml.safe_load(file) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(
                "Failed to load config file",
                extra={"path": str(file_path), "error": str(e)}
            )
            return {}

    def _merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge configuration dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    def _substitute_env_vars(self, config: Any) -> Any:
        """Substitute environment variables in configuration values."""
        if isinstance(config, dict):
            return {key: self._substitute_env_vars(value) for key, value in config.items()}
        elif isinstance(config, list):
            return [self._substitute_env_vars(item) for item in config]
        elif isinstance(config, str):
            return self._substitute_string_env_vars(config)
        else:
            return config

    def _substitute_string_env_vars(self, value: str) -> str:
        """Substitute ${VAR_NAME} and ${VAR_NAME:default} in a string value."""
        def replace_env_var(match):
            var_spec = match.group(1)
            if ':' in var_spec:
                var_name, default_value = var_spec.split(':', 1)
                return os.getenv(var_name, default_value)
            else:
                return os.getenv(var_spec, match.group(0))

        return re.sub(r'\$\{([^}]+)\}', replace_env_var, value)

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply ROUTE_PROXY_* environment variables over file values."""
        result = config.copy()
        for key in ("log_level", "log_format", "log_file", "upstream_base_url"):
            value = os.getenv(f"{ENV_PREFIX}{key.upper()}")
            if value:
                result[key] = value
        return result


# Global configuration instance
_proxy_settings: Optional[ProxySettings] = None


def get_config() -> ProxySettings:
    """Get the current proxy settings."""
    global _proxy_settings
    if _proxy_settings is None:
        _proxy_settings = ConfigLoader().load_config()
    return _proxy_settings


def reload_config(
    environment: Optional[str] = None,
    config_dir: Optional[Path] = None
) -> ProxySettings:
    """Reload the proxy settings."""
    global _proxy_settings
    _proxy_settings = ConfigLoader(config_dir).load_config(environment)
    return _proxy_settings


__all__ = [
    "ConfigLoader",
    "ProxySettings",
    "TimeoutConfig",
    "get_config",
    "reload_config",
    "get_logger",
    "setup_logging",
    "StructuredLogger",
]
