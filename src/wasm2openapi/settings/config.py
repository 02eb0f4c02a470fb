# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""Model and YAML loader for the wasm2openapi configuration file."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

# ###############
# Public Interface
# ###############

CONFIG_FILE_NAME = "wasm2openapi.yaml"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class ConfigError(Exception):
    """Raised when a configuration file cannot be read or is invalid."""


class InfoConfig(BaseModel):
    """The ``info`` object of the generated API description."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    title: str = "WASM Component API"
    version: str = "1.0"
    description: str = "OpenAPI definition of a WASM component."


class ServerConfig(BaseModel):
    """HTTP listener settings used by ``serve``."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    address: str = "127.0.0.1"
    port: int = Field(default=8080, ge=0, le=65535)
    docs: bool = False
    instances: int = Field(default=1, ge=1)


class RegistryConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    strict_paths: bool = Field(alias="strict-paths", default=False)


class Config(BaseModel):
    """Top-level configuration. Every section is optional."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    info: InfoConfig = Field(default_factory=InfoConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    log_level: LogLevel = Field(alias="log-level", default="INFO")


def load_config(path: Path) -> Config:
    """Load and validate a configuration file.

    An empty file yields the defaults.

    Raises:
        ConfigError: If the file cannot be read, contains invalid YAML, or does
            not conform to the expected schema.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {path}") from None
    except OSError as exc:
        raise ConfigError(f"Cannot read config file '{path}': {exc}") from exc
    return parse_config(raw, source_label=str(path))


def parse_config(text: str, *, source_label: str = "<string>") -> Config:
    """Parse configuration YAML text.

    Raises:
        ConfigError: If the YAML is invalid or does not match the schema.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {source_label}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"{source_label}: configuration must be a YAML mapping")

    try:
        return Config.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in {source_label}: {exc}") from exc


def find_config(directory: Path) -> Path | None:
    """Return the default configuration file in *directory*, if there is one."""
    candidate = directory / CONFIG_FILE_NAME
    return candidate if candidate.is_file() else None
