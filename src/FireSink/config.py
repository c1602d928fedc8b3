# ============================================================================
# FireSink - Configuration Management
#
# Purpose: Load and validate output settings from YAML, CLI args, and env vars
# Inputs: YAML files, mappings, environment variables
# Outputs: Immutable FirebaseOutputConfig inside a root Config
# Dependencies: pyyaml, pydantic, pathlib
# Usage: config = Config.from_yaml("firesink.yaml"); config.output.url
#
# Changelog:
#   2026-09-02: Initial configuration system
#   2026-09-11: firebase_pool_size for asynchronous writes
#   2026-09-24: Env overrides accept any declared field, not only keys present in YAML
# ============================================================================

import os
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlsplit

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from FireSink.errors import ConfigurationError

ENV_PREFIX = "FIRESINK_"


class FirebaseOutputConfig(BaseModel):
    """Settings of the Firebase output, resolved once at startup."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: str  # Firebase database URL, e.g. https://test.firebaseio.com
    secret: Optional[str] = None
    target: Optional[str] = None  # None = send the whole event
    firebase_timeout: float = Field(default=10, gt=0)
    firebase_retries: int = Field(default=3, ge=0)
    firebase_auth_ttl: float = 82800  # 23h; -1 disables auto-refresh
    firebase_pool_size: int = -1  # <= 0: write in the calling thread
    verb: str = "put"
    path: str

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        parts = urlsplit(value)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError(f"expected an absolute http(s) URL, got '{value}'")
        return value

    @field_validator("path", "verb")
    @classmethod
    def _check_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value

    @property
    def auth_refresh_interval(self) -> Optional[float]:
        """Refresh interval in seconds, or None when auto-refresh is disabled."""
        if self.firebase_auth_ttl < 0:
            return None
        return self.firebase_auth_ttl


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Config(BaseModel):
    """Root configuration object."""

    output: FirebaseOutputConfig
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(
        cls,
        data: Optional[Dict[str, Any]],
        apply_env: bool = True,
        overrides: Optional[Dict[str, Dict[str, Any]]] = None,
    ) -> "Config":
        """
        Validate a configuration mapping.

        Precedence: overrides (CLI flags) > FIRESINK_* env vars > data.

        Args:
            data: Mapping with ``output`` and optional ``logging`` sections
            apply_env: Apply FIRESINK_* environment overrides first
            overrides: Per-section values; None values are ignored

        Returns:
            Config instance

        Raises:
            ConfigurationError: If validation fails
        """
        data = dict(data or {})
        if apply_env:
            data = cls._apply_env_overrides(data)
        for section, values in (overrides or {}).items():
            section_data = dict(data.get(section) or {})
            section_data.update({key: value for key, value in values.items() if value is not None})
            data[section] = section_data
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError("Invalid FireSink configuration", details=str(e)) from e

    @classmethod
    def from_yaml(
        cls,
        path: str,
        apply_env: bool = True,
        overrides: Optional[Dict[str, Dict[str, Any]]] = None,
    ) -> "Config":
        """
        Load configuration from a YAML file with environment variable overrides.

        Args:
            path: Path to YAML configuration file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ConfigurationError: If YAML is invalid or fails validation
        """
        yaml_path = Path(path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        try:
            with open(yaml_path, "r") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Config file is not valid YAML: {path}", details=str(e)) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file must contain a mapping: {path}")

        return cls.from_dict(data, apply_env=apply_env, overrides=overrides)

    @classmethod
    def _apply_env_overrides(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply environment variable overrides to configuration.

        Environment variables follow the pattern:
        FIRESINK_<SECTION>_<FIELD>=value

        Field names contain underscores (firebase_auth_ttl), so the section is
        matched first and the remainder is checked against the section model's
        declared fields.

        Examples:
            FIRESINK_OUTPUT_SECRET=s3cr3t           → data["output"]["secret"]
            FIRESINK_OUTPUT_FIREBASE_RETRIES=5      → data["output"]["firebase_retries"]
            FIRESINK_LOGGING_LEVEL=DEBUG            → data["logging"]["level"]

        Args:
            data: Configuration dictionary

        Returns:
            Updated configuration dictionary
        """
        sections = {
            "output": FirebaseOutputConfig,
            "logging": LoggingConfig,
        }

        for env_key, env_value in os.environ.items():
            if not env_key.startswith(ENV_PREFIX):
                continue

            remainder = env_key[len(ENV_PREFIX) :].lower()

            for section, model in sections.items():
                section_prefix = section + "_"
                if not remainder.startswith(section_prefix):
                    continue

                field = remainder[len(section_prefix) :]
                if field not in model.model_fields:
                    break

                section_data = data.get(section)
                if section_data is None:
                    section_data = {}
                elif not isinstance(section_data, dict):
                    break
                else:
                    section_data = dict(section_data)
                if model.model_fields[field].annotation in (str, Optional[str]):
                    section_data[field] = env_value
                else:
                    section_data[field] = cls._parse_env_value(env_value)
                data[section] = section_data
                break

        return data

    @staticmethod
    def _parse_env_value(value: str) -> Any:
        """
        Parse environment variable value to appropriate type.

        Only true/yes/false/no count as booleans, so
        FIRESINK_OUTPUT_FIREBASE_RETRIES=1 stays an int.

        Args:
            value: String value from environment

        Returns:
            Parsed value (str, int, float, or bool)
        """
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value
