from __future__ import annotations

from pathlib import Path
from typing import Dict, Any


def get_data_root(config: Dict[str, Any]) -> Path:
    root = config.get("data_root", "~/SketchBox")
    return Path(root).expanduser().resolve()


def ensure_directories(data_root: Path) -> Dict[str, Path]:
    exports_dir = data_root / "exports"

    exports_dir.mkdir(parents=True, exist_ok=True)

    return {
        "exports": exports_dir,
    }
