from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

import yaml

_CONFIG_PATH = Path(__file__).resolve().parent / "config.yaml"

_DEFAULT_IDEA_CONTROLS = {
    "removal_window_ms": 5000,
}


def load_config() -> Dict[str, Any]:
    """Load the application config from YAML, returning an empty mapping on error."""
    try:
        with _CONFIG_PATH.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
            if isinstance(data, dict):
                return data
            logging.warning(
                "Config file %s is not a mapping; using defaults.", _CONFIG_PATH
            )
            return {}
    except FileNotFoundError:
        logging.warning(
            "Configuration file %s not found; using defaults.", _CONFIG_PATH
        )
        return {}
    except Exception as exc:  # noqa: BLE001
        logging.error("Failed to load configuration from %s: %s", _CONFIG_PATH, exc)
        return {}


def _section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = config.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        logging.warning(
            "Config section %r in %s is not a mapping; using defaults.",
            name,
            _CONFIG_PATH,
        )
        return {}
    return section


def _coerce_positive_int(value: Any, fallback: int) -> int:
    try:
        candidate = int(value)
        return candidate if candidate > 0 else fallback
    except Exception:  # noqa: BLE001
        return fallback


def get_idea_control_settings() -> Dict[str, int]:
    """Return idea control panel settings sourced from config with safe defaults."""
    section = _section(load_config(), "idea_controls")
    defaults = dict(_DEFAULT_IDEA_CONTROLS)
    return {
        "removal_window_ms": _coerce_positive_int(
            section.get("removal_window_ms"), defaults["removal_window_ms"]
        ),
    }
