"""
Application configuration.

Settings are read from YAML files in the configuration directory:
base.yaml first, then {APP_ENVIRONMENT}.yaml layered on top. Individual
values can be overridden with APP_<SECTION>__<KEY> environment variables,
e.g. APP_APPLICATION__BASE_URL or APP_EMAIL_CLIENT__AUTHORIZATION_TOKEN.
"""

import os
from contextvars import ContextVar
from enum import Enum
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, SecretStr, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG_DIR = PROJECT_ROOT / "configuration"

# YAML files for the settings being built, lowest precedence first
_yaml_layers: ContextVar[tuple[Path, ...]] = ContextVar("yaml_layers", default=())


class Environment(str, Enum):
    LOCAL = "local"
    PRODUCTION = "production"

    @classmethod
    def parse(cls, value: str) -> "Environment":
        try:
            return cls(value.lower())
        except ValueError:
            raise ValueError(
                f"{value} is not a supported environment. Use either 'local' or 'production'."
            ) from None


class ApplicationSettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8000
    base_url: str = "http://127.0.0.1:8000"


class DatabaseSettings(BaseModel):
    path: str = "./data/newsletter.db"
    timeout_seconds: float = 5.0
    run_migrations: bool = True


class EmailClientSettings(BaseModel):
    backend: Literal["dev", "postmark"] = "dev"
    base_url: str = "https://api.postmarkapp.com"
    sender_email: str = "newsletter@localhost.dev"
    authorization_token: SecretStr = SecretStr("")
    timeout_milliseconds: int = 10_000

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_milliseconds / 1000


class TelemetrySettings(BaseModel):
    name: str = "newsletter-service"
    level: str = "INFO"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    environment: Environment = Environment.LOCAL
    application: ApplicationSettings = ApplicationSettings()
    database: DatabaseSettings = DatabaseSettings()
    email_client: EmailClientSettings = EmailClientSettings()
    telemetry: TelemetrySettings = TelemetrySettings()

    @field_validator("environment", mode="before")
    @classmethod
    def parse_environment(cls, v: Any) -> Any:
        if isinstance(v, str):
            return Environment.parse(v)
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        yaml_settings = [
            YamlConfigSettingsSource(settings_cls, yaml_file=path)
            for path in reversed(_yaml_layers.get())
        ]
        return (init_settings, env_settings, *yaml_settings)


def load_settings(config_dir: Path | None = None) -> Settings:
    """
    Load and validate settings.

    Raises FileNotFoundError if base.yaml or the environment file is missing.
    Raises ValueError for an unknown environment, invalid YAML or an invalid schema.
    """
    directory = config_dir or Path(os.environ.get("APP_CONFIG_DIR", DEFAULT_CONFIG_DIR))
    environment = Environment.parse(os.environ.get("APP_ENVIRONMENT", Environment.LOCAL.value))

    layers = (directory / "base.yaml", directory / f"{environment.value}.yaml")
    for path in layers:
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found at: {path}")

    token = _yaml_layers.set(layers)
    try:
        return Settings(environment=environment)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in {directory}: {e}") from e
    except ValidationError as e:
        raise ValueError(f"Configuration validation failed:\n{e}") from e
    finally:
        _yaml_layers.reset(token)
