from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ideaforge.core.config.schema import AppConfig

# (env var, dotted config path)
_ENV_OVERRIDES: tuple[tuple[str, str], ...] = (
    ("IDEAFORGE_ENVIRONMENT", "environment"),
    ("IDEAFORGE_DATABASE_URL", "database.url"),
    ("IDEAFORGE_LOG_LEVEL", "telemetry.log_level"),
    ("PREFERRED_PROVIDER", "providers.preferred"),
    ("OLLAMA_URL", "providers.local.base_url"),
    ("OLLAMA_MODEL", "providers.local.model"),
    ("GEMINI_API_URL", "providers.cloud_primary.base_url"),
    ("GEMINI_MODEL", "providers.cloud_primary.model"),
    ("OPENAI_MODEL", "providers.cloud_secondary.model"),
    ("HF_MODEL", "providers.tertiary.model"),
)

_PROVIDER_NAMES = ("local", "cloud_primary", "cloud_secondary", "tertiary")

# Secondary env names accepted for a provider credential.
_CREDENTIAL_ALIASES: dict[str, tuple[str, ...]] = {"tertiary": ("GENAI",)}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    content = yaml.safe_load(path.read_text(encoding="utf-8"))
    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")
    return content


def load_env_file(path: Path) -> dict[str, str]:
    loaded: dict[str, str] = {}
    if not path.exists():
        return loaded
    for raw in path.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].strip()
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        loaded[key.strip()] = value.strip().strip('"').strip("'")
    return loaded


def _set_path(target: dict[str, Any], dotted: str, value: Any) -> None:
    node = target
    parts = dotted.split(".")
    for part in parts[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    node[parts[-1]] = value


def _resolve_credentials(merged: dict[str, Any], env: Mapping[str, str]) -> None:
    defaults = AppConfig().providers
    providers = merged.setdefault("providers", {})
    for name in _PROVIDER_NAMES:
        section = providers.setdefault(name, {})
        if section.get("api_key"):
            continue
        key_env = section.get("api_key_env", getattr(defaults, name).api_key_env)
        candidates = ((key_env,) if key_env else ()) + _CREDENTIAL_ALIASES.get(name, ())
        for env_name in candidates:
            value = env.get(env_name, "").strip()
            if value:
                section["api_key"] = value
                break


def config_from_mapping(data: dict[str, Any]) -> AppConfig:
    """Validate a partial mapping layered over the built-in defaults."""
    merged = _deep_merge(AppConfig().model_dump(), data)
    try:
        return AppConfig.model_validate(merged)
    except ValidationError as exc:
        raise ValueError(f"Invalid IdeaForge configuration: {exc}") from exc


def load_app_config(
    defaults_path: str | Path = "config/defaults.yaml",
    instance_path: str | Path | None = None,
    env_file: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    process_env = dict(os.environ if environ is None else environ)
    env_path = env_file or process_env.get("IDEAFORGE_ENV_FILE") or ".env"
    env = {**load_env_file(Path(env_path)), **process_env}

    defaults = _load_yaml(Path(defaults_path))

    explicit_instance = instance_path or env.get("IDEAFORGE_CONFIG_FILE")
    instance = _load_yaml(Path(explicit_instance)) if explicit_instance else {}

    merged = _deep_merge(defaults, instance)

    for env_name, dotted in _ENV_OVERRIDES:
        value = env.get(env_name, "").strip()
        if value:
            _set_path(merged, dotted, value)

    _resolve_credentials(merged, env)

    return config_from_mapping(merged)
