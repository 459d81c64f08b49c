"""Launch the tree service with Uvicorn.

Adds ``backend/`` to the import path so ``app.main:app`` resolves from a
source checkout, then reads host, port and log level from the environment
(see ``app.core.tree.settings``).
"""

from __future__ import annotations

import sys
from pathlib import Path

import uvicorn


def _prepare_backend_path() -> Path:
    backend_dir = Path(__file__).resolve().parents[1] / "backend"
    if not backend_dir.exists():
        raise RuntimeError(f"backend directory not found at {backend_dir}")

    backend_path = str(backend_dir)
    if backend_path not in sys.path:
        sys.path.insert(0, backend_path)
    return backend_dir


def main() -> None:
    _prepare_backend_path()

    from app.core.tree.settings import load_settings

    settings = load_settings()
    print(f">>> Tree service listening on http://{settings.host}:{settings.port}")
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
        workers=1,
    )


if __name__ == "__main__":
    main()
