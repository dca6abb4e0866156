"""Configuration loading, validation, and defaults."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from .classifiers.keyword import GEO_STRATEGIES
from .types import (
    FieldwiseConfig,
    GenerativeConfig,
    OrchestratorConfig,
    RuleConfig,
)

CONFIG_FILENAMES = [
    "fieldwise.yaml",
    "fieldwise.yml",
    "fieldwise.json",
]

PROVIDER_TYPES = ("generic_openai", "anthropic")


def _discover_config() -> Path | None:
    """Search CWD then parent dirs up to home for a config file."""
    cwd = Path.cwd()
    home = Path.home()
    search = cwd
    while True:
        for name in CONFIG_FILENAMES:
            candidate = search / name
            if candidate.is_file():
                return candidate
        if search == home or search == search.parent:
            break
        search = search.parent
    return None


def _build_config(raw: dict[str, Any]) -> FieldwiseConfig:
    """Build a FieldwiseConfig from a raw dict."""
    rules_raw = raw.get("rules", {}) or {}
    rules = RuleConfig(
        geo_strategy=rules_raw.get("geo_strategy", "webview"),
    )

    gen_raw = raw.get("generative", {}) or {}
    providers = raw.get("providers", {}) or {}
    generative = GenerativeConfig(
        enabled=bool(gen_raw.get("enabled", True)),
        # Default to the only configured provider when there is exactly one
        provider=gen_raw.get("provider", next(iter(providers), "") if len(providers) == 1 else ""),
        max_tokens=gen_raw.get("max_tokens", 1024),
        max_turns=gen_raw.get("max_turns", 6),
    )

    orch_raw = raw.get("orchestrator", {}) or {}
    orchestrator = OrchestratorConfig(
        prefer_generative=bool(orch_raw.get("prefer_generative", True)),
    )

    return FieldwiseConfig(
        version=str(raw.get("version", "0.1")),
        rules=rules,
        generative=generative,
        orchestrator=orchestrator,
        providers=providers,
    )


def validate_config(config: FieldwiseConfig) -> list[str]:
    """Validate a config. Returns list of error strings (empty = valid)."""
    errors: list[str] = []

    if config.rules.geo_strategy not in GEO_STRATEGIES:
        errors.append(
            f"rules.geo_strategy must be one of {GEO_STRATEGIES}, "
            f"got {config.rules.geo_strategy!r}"
        )

    if config.generative.max_tokens <= 0:
        errors.append("generative.max_tokens must be > 0")

    if config.generative.max_turns is not None and config.generative.max_turns < 1:
        errors.append("generative.max_turns must be >= 1 (or null for unbounded)")

    if config.generative.provider and config.generative.provider not in config.providers:
        errors.append(
            f"Generative provider '{config.generative.provider}' "
            f"not found in providers section"
        )

    for name, pconf in config.providers.items():
        ptype = (pconf or {}).get("type", name)
        if ptype not in PROVIDER_TYPES:
            errors.append(f"Provider '{name}' has unknown type '{ptype}'")

    return errors


def load_config(
    config_path: str | Path | None = None,
    config_dict: dict | None = None,
) -> FieldwiseConfig:
    """Load config from dict, explicit path, or auto-discover."""
    if config_dict is not None:
        return _build_config(config_dict)

    if config_path is not None:
        path = Path(config_path)
    else:
        path = _discover_config()

    if path is None:
        # Return defaults
        return _build_config({})

    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    text = path.read_text()
    if path.suffix == ".json":
        raw = json.loads(text)
    else:
        raw = yaml.safe_load(text) or {}

    return _build_config(raw)
