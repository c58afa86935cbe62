"""Configuration for validating and building services.

``ServiceConfiguration`` describes the organization a service belongs to and
the version being validated. It can be loaded from a YAML file::

    org_key: acme
    org_namespace: com.acme
    version: 1.2.0

Process-wide ``Settings`` are read from the environment with the
``API_JSON_`` prefix.
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigError(Exception):
    """Raised when a configuration file cannot be loaded."""


class ServiceConfiguration(BaseModel):
    org_key: str = "example"
    org_namespace: str = "com.example"
    version: str = "0.0.1-dev"

    @property
    def major_version(self) -> str:
        head = self.version.split(".", 1)[0]
        return head if head.isdigit() else "0"

    def application_namespace(self, key: str) -> str:
        return f"{self.org_namespace}.{key.replace('-', '_')}.v{self.major_version}"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="API_JSON_")

    http_timeout: float = 30
    user_agent: str = "api-json-validator"
    log_level: str = "WARNING"


def load_service_configuration(path: str | Path) -> ServiceConfiguration:
    """Load a ServiceConfiguration from a YAML file."""
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return ServiceConfiguration()
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    try:
        return ServiceConfiguration(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e
