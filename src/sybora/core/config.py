"""3-layer configuration system for Sybora.

Loads and merges configuration from:
1. Default settings (built-in)
2. Config file (sybora.yaml, or an explicit path)
3. CLI parameters (override)
"""

from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Mapping, Optional

import yaml

CONFIG_FILENAME = "sybora.yaml"

DEFAULT_CONFIG: dict = {
    "server": {
        "host": "127.0.0.1",
        "port": 8888,
        "cors_origins": ["*"],
    },
    "ai": {
        "retry_attempts": 3,
        "retry_delay_seconds": 0.5,
        "timeout_seconds": 30,
        "chat_provider": "gemini",
        "chat_fallback": "openrouter",
        "openrouter": {
            "endpoint": "https://openrouter.ai/api/v1/chat/completions",
            "api_key_env": "OPENROUTER_API_KEY",
        },
        "gemini": {
            "endpoint": "https://generativelanguage.googleapis.com/v1beta",
            "model": "gemini-2.0-flash-exp",
            "api_key_env": "GEMINI_API_KEY",
        },
    },
    "tasks": {
        "rewrite": {"model": "openai/gpt-4o-mini", "temperature": 0.1, "max_tokens": 3000},
        "explain": {"model": "qwen/qwen3-coder:free", "temperature": 0.2, "max_tokens": 3000},
        "convert": {"model": "openai/gpt-4o-mini", "temperature": 0.1, "max_tokens": 4000},
        "chat": {"model": "qwen/qwen3-coder:free", "temperature": 0.7, "max_tokens": 500},
    },
}

PROVIDER_NAMES = ("openrouter", "gemini")


def deep_merge(base: dict, override: dict) -> dict:
    """Deep merge override into base without mutating either.

    Lists are replaced, not merged. None in override means "not set" and
    keeps the base value, so unset CLI options fall through to the file.
    """
    result = dict(base)
    for key, value in override.items():
        if value is None:
            continue
        base_value = result.get(key)
        if isinstance(base_value, dict) and isinstance(value, dict):
            result[key] = deep_merge(base_value, value)
        else:
            result[key] = value
    return result


def load_config_file(config_path: Path) -> dict:
    """Load a YAML config file. Missing or unreadable files yield {}."""
    if not config_path.exists():
        return {}
    try:
        content = config_path.read_text(encoding="utf-8-sig")  # utf-8-sig strips BOM
        data = yaml.safe_load(content)
    except (OSError, yaml.YAMLError):
        return {}
    return data if isinstance(data, dict) else {}


def get_effective_config(
    config_path: Optional[Path] = None,
    cli_overrides: Optional[dict] = None,
) -> dict:
    """Get the fully resolved configuration."""
    config = copy.deepcopy(DEFAULT_CONFIG)

    file_config = load_config_file(config_path or Path.cwd() / CONFIG_FILENAME)
    if file_config:
        config = deep_merge(config, file_config)

    if cli_overrides:
        config = deep_merge(config, cli_overrides)

    return config


def get_task_config(config: dict, task: str) -> dict:
    return dict(config.get("tasks", {}).get(task, {}))


def resolve_api_keys(
    config: dict, environ: Optional[Mapping[str, str]] = None
) -> dict[str, Optional[str]]:
    """Read each provider's API key from the environment variable its config names."""
    env = os.environ if environ is None else environ
    ai_config = config.get("ai", {})
    keys: dict[str, Optional[str]] = {}
    for name in PROVIDER_NAMES:
        env_var = ai_config.get(name, {}).get("api_key_env", "")
        keys[name] = (env.get(env_var) or None) if env_var else None
    return keys
