"""Cross-platform path management for reel-wheel.

Every persistent file location lives here so the rest of the package
imports one canonical set of paths.  Directories are created lazily by
the helpers below, keeping imports side-effect-free.
"""

from __future__ import annotations

import os
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "reel-wheel"

CONFIG_DIR: Path = Path(user_config_dir(APP_NAME))

TOKENS_FILE = CONFIG_DIR / "tokens.json"
SETTINGS_FILE = CONFIG_DIR / "settings.json"


def ensure_parents(path: Path) -> Path:
    """Create the parent directories of *path* and return it unchanged."""
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def atomic_write(path: Path, data: str) -> None:
    """Write *data* to *path* atomically (write-to-tmp then replace)."""
    tmp = path.with_suffix(path.suffix + ".tmp")
    ensure_parents(tmp)
    with tmp.open("w", encoding="utf-8") as fh:
        fh.write(data)
    try:
        os.replace(tmp, path)
    finally:
        if tmp.exists():
            tmp.unlink()
