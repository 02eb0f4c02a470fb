# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""Configuration file support."""

from wasm2openapi.settings.config import (
    CONFIG_FILE_NAME,
    Config,
    ConfigError,
    InfoConfig,
    RegistryConfig,
    ServerConfig,
    find_config,
    load_config,
    parse_config,
)

__all__ = [
    "CONFIG_FILE_NAME",
    "Config",
    "ConfigError",
    "InfoConfig",
    "RegistryConfig",
    "ServerConfig",
    "find_config",
    "load_config",
    "parse_config",
]
