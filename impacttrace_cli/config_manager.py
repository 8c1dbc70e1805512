"""Configuration manager for ImpactTrace using TOML files."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import toml

from .config import (
    API_KEY_ENV_VAR,
    BASE_DIR,
    DEFAULT_SKIP_DIRS,
    DEFAULT_SOURCE_EXTENSIONS,
    DEFAULT_TEST_SUFFIXES,
    PROVIDER_KEY_ENV_VARS,
)

logger = logging.getLogger(__name__)

CONFIG_FILE = BASE_DIR / "config.toml"


# Default configurations for each provider
DEFAULT_CONFIGS = {
    "gemini": {
        "provider": "gemini",
        "model": "gemini-2.5-flash",
        "api_key": "",
    },
    "ollama": {
        "provider": "ollama",
        "model": "qwen2.5-coder:7b",
        "endpoint": "http://127.0.0.1:11434/api/generate",
    },
    "groq": {
        "provider": "groq",
        "model": "llama-3.3-70b-versatile",
        "api_key": "",
    },
    "openai": {
        "provider": "openai",
        "model": "gpt-4o",
        "api_key": "",
    },
    "anthropic": {
        "provider": "anthropic",
        "model": "claude-3-5-sonnet-20241022",
        "api_key": "",
    },
    "openrouter": {
        "provider": "openrouter",
        "model": "google/gemini-2.0-flash-exp:free",
        "api_key": "",
        "endpoint": "https://openrouter.ai/api/v1/chat/completions",
    },
}

DEFAULT_PROVIDER = "gemini"


@dataclass
class AnalysisSettings:
    """File classification rules and content source for an analysis run."""

    test_suffixes: Tuple[str, ...] = DEFAULT_TEST_SUFFIXES
    source_extensions: Tuple[str, ...] = DEFAULT_SOURCE_EXTENSIONS
    skip_dirs: Tuple[str, ...] = DEFAULT_SKIP_DIRS
    read_from_commit: bool = False


def load_full_config() -> Dict[str, Any]:
    """Load the entire TOML config (all sections)."""
    if not CONFIG_FILE.exists():
        return {}
    try:
        with open(CONFIG_FILE, "r") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as exc:
        logger.warning("Could not read %s: %s", CONFIG_FILE, exc)
        return {}


def load_config() -> Dict[str, Any]:
    """Load the ``[llm]`` section.

    Returns:
        Provider settings, or the Gemini defaults if nothing is configured.
    """
    llm = load_full_config().get("llm")
    if not llm:
        return DEFAULT_CONFIGS[DEFAULT_PROVIDER].copy()
    return llm


def _save_full_config(config: Dict[str, Any]) -> bool:
    """Write entire config dict to TOML file, preserving all sections."""
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    try:
        with open(CONFIG_FILE, "w") as f:
            toml.dump(config, f)
        return True
    except OSError as exc:
        logger.warning("Could not write %s: %s", CONFIG_FILE, exc)
        return False


def save_config(provider: str, model: str, api_key: str = "", endpoint: str = "") -> bool:
    """Save LLM configuration to TOML file.

    Preserves other sections (e.g. ``[analysis]``) in the file.
    """
    config = load_full_config()

    config["llm"] = {
        "provider": provider,
        "model": model,
    }
    if api_key:
        config["llm"]["api_key"] = api_key
    if endpoint:
        config["llm"]["endpoint"] = endpoint

    return _save_full_config(config)


def clear_config() -> bool:
    """Remove the ``[llm]`` section, resetting the provider to defaults."""
    config = load_full_config()
    config.pop("llm", None)
    return _save_full_config(config)


def get_provider_config(provider: str) -> Dict[str, Any]:
    """Get default configuration for a specific provider."""
    return DEFAULT_CONFIGS.get(provider, DEFAULT_CONFIGS[DEFAULT_PROVIDER]).copy()


def _as_tuple(value: Any, default: Tuple[str, ...]) -> Tuple[str, ...]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return default
    cleaned = tuple(str(v) for v in value if str(v).strip())
    return cleaned or default


def load_analysis_settings(read_from_commit: bool = False) -> AnalysisSettings:
    """Build :class:`AnalysisSettings` from the ``[analysis]`` section."""
    section = load_full_config().get("analysis", {})
    return AnalysisSettings(
        test_suffixes=_as_tuple(section.get("test_suffixes"), DEFAULT_TEST_SUFFIXES),
        source_extensions=_as_tuple(section.get("source_extensions"), DEFAULT_SOURCE_EXTENSIONS),
        skip_dirs=_as_tuple(section.get("skip_dirs"), DEFAULT_SKIP_DIRS),
        read_from_commit=read_from_commit,
    )


def api_key_env_vars(provider: str) -> Tuple[str, ...]:
    """Environment variables that may hold the API key for ``provider``, in order."""
    vendor = PROVIDER_KEY_ENV_VARS.get(provider)
    return (API_KEY_ENV_VAR, vendor) if vendor else (API_KEY_ENV_VAR,)


def resolve_llm_settings(
    provider: Optional[str] = None,
    model: Optional[str] = None,
    api_key: Optional[str] = None,
    endpoint: Optional[str] = None,
) -> Dict[str, str]:
    """Merge explicit overrides, the ``[llm]`` section, and environment keys.

    Explicit arguments win. When the provider is overridden to one that differs
    from the configured one, the configured model/endpoint are not carried over.
    """
    configured = load_config()
    name = (provider or configured.get("provider") or DEFAULT_PROVIDER).lower()
    base = configured if configured.get("provider", DEFAULT_PROVIDER) == name else get_provider_config(name)

    key = api_key or base.get("api_key") or ""
    if not key:
        key = next((os.environ[var] for var in api_key_env_vars(name) if os.environ.get(var)), "")

    return {
        "provider": name,
        "model": model or base.get("model") or get_provider_config(name).get("model", ""),
        "api_key": key,
        "endpoint": endpoint or base.get("endpoint", ""),
    }
