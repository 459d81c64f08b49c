"""Persistence adapters for the tree document."""

from __future__ import annotations

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional

from .errors import PersistenceError

logger = logging.getLogger(__name__)


class TreeDocumentRepository(ABC):
    """Load/save a JSON-serializable document by key."""

    @abstractmethod
    def load(self, key: str) -> Optional[Dict[str, Any]]:
        """Return the stored document, ``None`` if nothing was stored yet."""

    @abstractmethod
    def save(self, key: str, document: Dict[str, Any]) -> None:
        ...


class JsonFileTreeRepository(TreeDocumentRepository):
    """Single JSON file on disk; parent directories are created on save."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._lock = Lock()

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        if not self._path.exists():
            return None
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                return json.load(handle)
        # ValueError covers JSONDecodeError and UnicodeDecodeError.
        except (OSError, ValueError, RecursionError) as exc:
            logger.warning("tree_repository_load_failed path=%s key=%s error=%s", self._path, key, exc)
            raise PersistenceError("Failed to load data") from exc

    def save(self, key: str, document: Dict[str, Any]) -> None:
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        with self._lock:
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                with tmp_path.open("w", encoding="utf-8") as handle:
                    json.dump(document, handle, ensure_ascii=False, indent=2)
                os.replace(tmp_path, self._path)
            except (OSError, TypeError, ValueError, RecursionError) as exc:
                logger.exception("tree_repository_save_failed path=%s key=%s", self._path, key)
                try:
                    tmp_path.unlink(missing_ok=True)
                except OSError:
                    logger.warning("tree_repository_tmp_cleanup_failed path=%s", tmp_path)
                raise PersistenceError("Failed to save data") from exc


class InMemoryTreeRepository(TreeDocumentRepository):
    """Keeps each document as JSON text, for tests and ephemeral runs."""

    def __init__(self, documents: Optional[Dict[str, Any]] = None) -> None:
        self._documents: Dict[str, str] = {}
        for key, document in (documents or {}).items():
            self.save(key, document)

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        text = self._documents.get(key)
        return json.loads(text) if text is not None else None

    def save(self, key: str, document: Dict[str, Any]) -> None:
        try:
            self._documents[key] = json.dumps(document, ensure_ascii=False)
        except (TypeError, ValueError, RecursionError) as exc:
            raise PersistenceError("Failed to save data") from exc
