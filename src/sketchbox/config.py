from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

import yaml

DEFAULT_CONFIG: Dict[str, Any] = {
    "data_root": "~/SketchBox",
    "canvas": {
        "width": 800,
        "height": 600,
    },
    "paint": {
        "default_tool": "pencil",
        "default_size": 5,
        "default_color": "#000000",
        "brush_sizes": [2, 5, 10, 20],
        "palette": [
            [0, 0, 0],
            [255, 255, 255],
            [220, 20, 60],
            [255, 127, 0],
            [255, 215, 0],
            [34, 139, 34],
            [0, 128, 128],
            [30, 144, 255],
            [138, 43, 226],
            [255, 105, 180],
            [210, 105, 30],
            [105, 105, 105],
        ],
    },
    "fill": {
        "tolerance": 30,
        "max_pixels": 1_000_000,
    },
    "logging": {
        "level": "INFO",
        "file": None,
    },
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if (
            key in merged
            and isinstance(merged[key], dict)
            and isinstance(value, dict)
        ):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _candidate_config_paths() -> list[Path]:
    env_path = os.environ.get("SKETCHBOX_CONFIG")
    paths = []
    if env_path:
        paths.append(Path(env_path))
    paths.extend([
        Path("config.yaml"),
        Path("~/.config/sketchbox/config.yaml").expanduser(),
    ])
    return paths


def load_config() -> Dict[str, Any]:
    config = dict(DEFAULT_CONFIG)
    for path in _candidate_config_paths():
        if path.exists():
            with path.open("r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle) or {}
            if isinstance(data, dict):
                config = _deep_merge(config, data)
            break
    return config


def coerce_int(value: Any, default: int, *, minimum: int = 0) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return max(minimum, parsed)


def canvas_size(config: Dict[str, Any]) -> tuple[int, int]:
    canvas = config.get("canvas", {})
    defaults = DEFAULT_CONFIG["canvas"]
    width = coerce_int(canvas.get("width"), defaults["width"], minimum=1)
    height = coerce_int(canvas.get("height"), defaults["height"], minimum=1)
    return width, height


def fill_settings(config: Dict[str, Any]) -> tuple[int, int]:
    """Return ``(tolerance, max_pixels)`` with tolerance clamped to 0..255."""
    fill = config.get("fill", {})
    defaults = DEFAULT_CONFIG["fill"]
    tolerance = min(255, coerce_int(fill.get("tolerance"), defaults["tolerance"]))
    max_pixels = coerce_int(fill.get("max_pixels"), defaults["max_pixels"], minimum=1)
    return tolerance, max_pixels
