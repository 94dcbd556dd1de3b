"""Layered configuration for Evvl.

Loads and merges configuration from:
1. Default settings (built-in)
2. Config file (evvl.yaml)
3. CLI parameters (override)
"""

from __future__ import annotations

import copy
import logging
import os
from pathlib import Path
from typing import Mapping, Optional

import yaml

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = ("evvl.yaml", ".evvl/config.yaml")

DEFAULT_CONFIG: dict = {
    "runtime": "auto",
    "proxy": {
        "base_url": "http://127.0.0.1:3000",
        "timeout_seconds": 90,
    },
    "server": {
        "host": "127.0.0.1",
        "port": 3000,
    },
    "ai": {
        "timeout_seconds": 60,
        "openai": {},
        "anthropic": {"max_tokens": 4096},
        "gemini": {},
        "openrouter": {},
    },
    "local": {
        "model_cache_ttl_seconds": 60,
        "ollama": {
            "endpoint": "http://localhost:11434",
            "health_timeout_seconds": 3,
            "generation_timeout_seconds": 30,
        },
        "lmstudio": {
            "endpoint": "http://localhost:1234",
            "health_timeout_seconds": 3,
            "generation_timeout_seconds": 30,
        },
    },
    "keys": {
        "openai": {"api_key_env": "OPENAI_API_KEY"},
        "anthropic": {"api_key_env": "ANTHROPIC_API_KEY"},
        "gemini": {"api_key_env": "GEMINI_API_KEY"},
        "openrouter": {"api_key_env": "OPENROUTER_API_KEY"},
    },
    "validation": {
        "test_models": {
            "openai": "gpt-4o-mini",
            "anthropic": "claude-3-haiku-20240307",
            "gemini": "gemini-2.5-flash",
            "openrouter": "openai/gpt-4o-mini",
        },
    },
}


def deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dicts. Arrays are replaced, not merged."""
    result = {}
    for key in base:
        result[key] = base[key]
    for key, value in override.items():
        base_value = result.get(key)
        if isinstance(base_value, dict) and isinstance(value, dict):
            result[key] = deep_merge(base_value, value)
        else:
            result[key] = value
    return result


def find_config_file(start: Path) -> Optional[Path]:
    for name in CONFIG_FILENAMES:
        candidate = start / name
        if candidate.is_file():
            return candidate
    return None


def load_config_file(config_path: Optional[Path]) -> dict:
    """Load a YAML config file; missing or unreadable files yield {}."""
    if config_path is None or not config_path.exists():
        return {}
    try:
        content = config_path.read_text(encoding="utf-8-sig")  # utf-8-sig strips BOM
        loaded = yaml.safe_load(content) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Ignoring unreadable config %s: %s", config_path, e)
        return {}
    if not isinstance(loaded, dict):
        logger.warning("Ignoring config %s: top level is not a mapping", config_path)
        return {}
    return loaded


def get_effective_config(
    config_path: Optional[Path] = None,
    cli_overrides: Optional[dict] = None,
) -> dict:
    """Get the fully resolved configuration."""
    config = copy.deepcopy(DEFAULT_CONFIG)

    path = config_path if config_path is not None else find_config_file(Path.cwd())
    file_config = load_config_file(path)
    if file_config:
        config = deep_merge(config, file_config)

    if cli_overrides:
        config = deep_merge(config, cli_overrides)

    return config


def resolve_api_keys(
    config: dict,
    environ: Optional[Mapping[str, str]] = None,
) -> dict[str, str]:
    """Map provider -> API key from the environment variables named in config.

    A literal ``api_key`` in the config takes precedence. Local providers get
    a placeholder so requests to them pass validation.
    """
    env = os.environ if environ is None else environ
    keys: dict[str, str] = {}
    for provider, key_config in (config.get("keys") or {}).items():
        key_config = key_config or {}
        value = key_config.get("api_key") or env.get(key_config.get("api_key_env", ""), "")
        if value:
            keys[provider] = value
    for provider in (config.get("local") or {}):
        if isinstance(config["local"][provider], dict):
            keys.setdefault(provider, "local")
    return keys
