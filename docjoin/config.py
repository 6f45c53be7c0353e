"""
Configuration management for docjoin.

Loads and validates config.yaml:

    mongo:
      host: localhost
      port: 27017
      dbname: blog
    joins:
      - field: author
        to: _id
        from: authors
      - source_field: tags
        target_field: slug
        target_collection: tags
        result_field: tag_docs
    logging:
      level: INFO
      format: pretty

MongoDB settings can be overridden from the environment with MONGO_URI,
MONGO_HOST, MONGO_PORT, MONGO_DBNAME, MONGO_USERNAME and MONGO_PASSWORD.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from docjoin.errors import ConfigurationError
from docjoin.schemas import JoinSpecification

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("structured", "pretty")

# Environment variable -> MongoSettings field
MONGO_ENV_VARS = {
    "MONGO_URI": "uri",
    "MONGO_HOST": "host",
    "MONGO_PORT": "port",
    "MONGO_DBNAME": "dbname",
    "MONGO_USERNAME": "username",
    "MONGO_PASSWORD": "password",
}


def get_docjoin_home() -> Path:
    """Config directory: $DOCJOIN_HOME or ~/.config/docjoin."""
    home = os.environ.get("DOCJOIN_HOME")
    if home:
        return Path(home)
    return Path("~/.config/docjoin").expanduser()


@dataclass
class MongoSettings:
    """Connection settings for the MongoDB document store."""
    host: str = "localhost"
    port: int = 27017
    dbname: str = "test"
    username: Optional[str] = None
    password: Optional[str] = None
    uri: Optional[str] = None
    timeout_ms: int = 5000

    @classmethod
    def from_dict(
        cls, data: Optional[Mapping[str, Any]], environ: Optional[Mapping[str, str]] = None
    ) -> "MongoSettings":
        """
        Build settings from the 'mongo' section, then apply environment overrides.

        Raises:
            ConfigurationError: On unknown keys or a non-integer port/timeout
        """
        data = dict(data or {})
        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise ConfigurationError(f"Unknown mongo settings: {sorted(unknown)}")

        environ = os.environ if environ is None else environ
        for env_var, name in MONGO_ENV_VARS.items():
            if environ.get(env_var):
                data[name] = environ[env_var]

        for name in ("port", "timeout_ms"):
            if name in data:
                try:
                    data[name] = int(data[name])
                except (TypeError, ValueError):
                    raise ConfigurationError(f"mongo.{name} must be an integer, got {data[name]!r}")

        return cls(**data)

    def redacted(self) -> dict[str, Any]:
        """Settings as a dict with the password hidden, for display."""
        return {
            "host": self.host,
            "port": self.port,
            "dbname": self.dbname,
            "username": self.username,
            "password": "***" if self.password else None,
            "uri": "***" if self.uri else None,
            "timeout_ms": self.timeout_ms,
        }


@dataclass
class LoggingSettings:
    """Logging section of config.yaml."""
    level: str = "INFO"
    format: str = "pretty"
    file: Optional[str] = None
    console: bool = True

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "LoggingSettings":
        data = dict(data or {})
        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise ConfigurationError(f"Unknown logging settings: {sorted(unknown)}")

        settings = cls(**data)
        settings.level = str(settings.level).upper()
        if settings.level not in LOG_LEVELS:
            raise ConfigurationError(
                f"logging.level must be one of {', '.join(LOG_LEVELS)}, got '{settings.level}'"
            )
        if settings.format not in LOG_FORMATS:
            raise ConfigurationError(
                f"logging.format must be one of {', '.join(LOG_FORMATS)}, got '{settings.format}'"
            )
        return settings


@dataclass
class DocjoinConfig:
    """Complete docjoin configuration."""
    mongo: MongoSettings = field(default_factory=MongoSettings)
    joins: list[JoinSpecification] = field(default_factory=list)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    config_path: Optional[Path] = None

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        environ: Optional[Mapping[str, str]] = None,
        config_path: Optional[Path] = None,
    ) -> "DocjoinConfig":
        """
        Build a config from parsed YAML.

        Raises:
            ConfigurationError: If any section is invalid
        """
        known = {"mongo", "joins", "logging"}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown config sections: {sorted(unknown)}")

        joins_data = data.get("joins") or []
        if not isinstance(joins_data, list):
            raise ConfigurationError("'joins' must be a list of join specifications")

        joins = []
        for index, entry in enumerate(joins_data):
            try:
                joins.append(JoinSpecification.from_dict(entry))
            except ConfigurationError as e:
                raise ConfigurationError(f"joins[{index}]: {e}")

        return cls(
            mongo=MongoSettings.from_dict(data.get("mongo"), environ=environ),
            joins=joins,
            logging=LoggingSettings.from_dict(data.get("logging")),
            config_path=config_path,
        )

    def __repr__(self) -> str:
        return f"DocjoinConfig(dbname={self.mongo.dbname}, joins={len(self.joins)})"


def load_config(
    config_path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None
) -> DocjoinConfig:
    """
    Load docjoin configuration from YAML file.

    Args:
        config_path: Path to config file. Defaults to $DOCJOIN_HOME/config.yaml
        environ: Environment for MONGO_* overrides. Defaults to os.environ

    Returns:
        DocjoinConfig instance

    Raises:
        FileNotFoundError: If the config file does not exist
        ConfigurationError: If config is empty or invalid
    """
    if config_path is None:
        config_path = get_docjoin_home() / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"docjoin config.yaml not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML syntax: {e}")

    if not data:
        raise ConfigurationError("Configuration file is empty")
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration file must contain a mapping")

    return DocjoinConfig.from_dict(data, environ=environ, config_path=config_path)
