"""Environment-driven configuration for the tree service."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .engine import DEFAULT_MAX_DEPTH

logger = logging.getLogger(__name__)

BACKEND_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_DATA_FILE = BACKEND_ROOT / "data" / "trees.json"
STORAGE_BACKENDS = ("file", "memory")


@dataclass
class TreeServiceSettings:
    data_file: Path = DEFAULT_DATA_FILE
    storage: str = "file"
    host: str = "127.0.0.1"
    port: int = 3000
    log_level: str = "info"
    # None lifts the depth cap.
    max_depth: Optional[int] = DEFAULT_MAX_DEPTH


def _read_int(env: str, default: int) -> int:
    raw = os.getenv(env)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid %s=%s; using %s", env, raw, default)
        return default


def load_settings() -> TreeServiceSettings:
    load_dotenv()

    storage = os.getenv("TREE_STORAGE", "file").strip().lower()
    if storage not in STORAGE_BACKENDS:
        logger.warning("Invalid TREE_STORAGE=%s; using file", storage)
        storage = "file"

    data_file = os.getenv("TREE_DATA_FILE")
    port = _read_int("TREE_API_PORT", 3000)
    # PORT overrides TREE_API_PORT.
    port = _read_int("PORT", port)
    max_depth = _read_int("TREE_MAX_DEPTH", DEFAULT_MAX_DEPTH)

    return TreeServiceSettings(
        data_file=Path(data_file) if data_file else DEFAULT_DATA_FILE,
        storage=storage,
        host=os.getenv("TREE_API_HOST", "127.0.0.1"),
        port=port,
        log_level=os.getenv("TREE_API_LOG_LEVEL", "info").strip().lower(),
        max_depth=max_depth if max_depth > 0 else None,
    )
