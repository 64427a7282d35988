"""User settings loaded from ``config/settings.toml``.

Example:

    [documents]
    watermark_position = "bottom-right"
    watermark_opacity = 15

    [quotes]
    validity_days = 30

    [assistant]
    model = "gemini-3-flash-preview"

Missing files and missing keys fall back to defaults. The assistant API key
is read from the environment only (GEMINI_API_KEY or API_KEY).
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from orcamentor.runtime.logging import get_logger
from orcamentor.runtime.paths import get_paths

logger = get_logger(__name__)

WATERMARK_POSITIONS = ("center", "top-left", "top-right", "bottom-left", "bottom-right")


@dataclass(frozen=True)
class Settings:
    watermark_position: str = "center"
    watermark_opacity: int = 10
    quote_accent: str = "#2563EB"
    receipt_accent: str = "#10B981"
    validity_days: int = 15
    top_categories: int = 6
    low_stock_threshold: int = 2
    max_image_bytes: int = 10 * 1024 * 1024
    max_image_dimension: int = 1600
    assistant_model: str = "gemini-3-flash-preview"
    assistant_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    assistant_timeout: float = 30.0
    assistant_api_key: str | None = None


# TOML table/key -> Settings field
_TOML_KEYS: dict[tuple[str, str], str] = {
    ("documents", "watermark_position"): "watermark_position",
    ("documents", "watermark_opacity"): "watermark_opacity",
    ("documents", "quote_accent"): "quote_accent",
    ("documents", "receipt_accent"): "receipt_accent",
    ("quotes", "validity_days"): "validity_days",
    ("dashboard", "top_categories"): "top_categories",
    ("dashboard", "low_stock_threshold"): "low_stock_threshold",
    ("images", "max_bytes"): "max_image_bytes",
    ("images", "max_dimension"): "max_image_dimension",
    ("assistant", "model"): "assistant_model",
    ("assistant", "base_url"): "assistant_base_url",
    ("assistant", "timeout"): "assistant_timeout",
}


def _coerce(name: str, value: Any, default: Any) -> Any:
    expected = type(default)
    if expected is float and isinstance(value, int):
        return float(value)
    if not isinstance(value, expected) or isinstance(value, bool) != isinstance(default, bool):
        logger.warning("Ignoring setting %s=%r (expected %s)", name, value, expected.__name__)
        return default
    return value


def load_settings(config_path: Path | None = None) -> Settings:
    """Load settings from TOML, falling back to defaults.

    Args:
        config_path: Path to the TOML file. If None, uses the default location.

    Returns:
        Settings with file values applied and the API key taken from the environment.
    """
    if config_path is None:
        config_path = get_paths().settings

    defaults = Settings()
    values: dict[str, Any] = {}

    if config_path.exists():
        try:
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning("Could not read settings %s: %s", config_path, e)
            data = {}

        for (table, key), field_name in _TOML_KEYS.items():
            section = data.get(table)
            if not isinstance(section, dict) or key not in section:
                continue
            values[field_name] = _coerce(field_name, section[key], getattr(defaults, field_name))
    else:
        logger.debug("Settings file not found: %s", config_path)

    position = values.get("watermark_position")
    if position is not None and position not in WATERMARK_POSITIONS:
        logger.warning("Unknown watermark position %r; using center", position)
        values["watermark_position"] = "center"
    if "watermark_opacity" in values:
        values["watermark_opacity"] = min(100, max(0, values["watermark_opacity"]))

    api_key = os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY") or None
    values["assistant_api_key"] = api_key

    known = {f.name for f in fields(Settings)}
    return Settings(**{k: v for k, v in values.items() if k in known})
