"""In-memory forest with id allocation and persisted child insertion."""

from __future__ import annotations

import logging
from threading import Lock
from typing import List, Optional, Sequence, Tuple

from .errors import ParentNotFoundError, PersistenceError, TreeDepthExceededError, TreeValidationError
from .node import TreeDocument, TreeNode, copy_forest, iter_nodes, iter_nodes_with_depth
from .repository import TreeDocumentRepository

logger = logging.getLogger(__name__)

DOCUMENT_KEY = "trees"
# Keeps the nested JSON document well inside json's own nesting limits.
DEFAULT_MAX_DEPTH = 100


def find_node_by_id(forest: Sequence[TreeNode], node_id: int) -> Optional[TreeNode]:
    """Return the first node with ``node_id`` in depth-first order, else ``None``."""

    for node in iter_nodes(forest):
        if node.id == node_id:
            return node
    return None


def _find_with_depth(forest: Sequence[TreeNode], node_id: int) -> Tuple[Optional[TreeNode], int]:
    for node, depth in iter_nodes_with_depth(forest):
        if node.id == node_id:
            return node, depth
    return None, 0


class TreeStore:
    """Authoritative forest, loaded once and rewritten after every insertion.

    Insertions are serialized by a lock and applied to a copy of the forest;
    the copy replaces the published forest only after it has been saved, so a
    failed save leaves memory untouched. Allocated ids are never handed out
    again, even when the save fails.

    ``max_depth`` caps how deep a new node may sit (roots are depth 1);
    ``None`` disables the cap.
    """

    def __init__(
        self,
        repository: TreeDocumentRepository,
        key: str = DOCUMENT_KEY,
        max_depth: Optional[int] = DEFAULT_MAX_DEPTH,
    ) -> None:
        self._repository = repository
        self._key = key
        self._max_depth = max_depth
        self._lock = Lock()
        self._trees: List[TreeNode] = []
        self._next_id = 1
        self._load()

    def _load(self) -> None:
        try:
            raw = self._repository.load(self._key)
        except PersistenceError:
            logger.warning("tree_store_load_failed key=%s; starting empty", self._key)
            return
        if raw is None:
            logger.info("tree_store_empty key=%s", self._key)
            return
        try:
            document = TreeDocument.from_storage(raw)
        except ValueError as exc:
            logger.warning("tree_store_document_invalid key=%s error=%s; starting empty", self._key, exc)
            return
        self._trees = document.trees
        self._next_id = document.next_id
        logger.info("tree_store_loaded trees=%d next_id=%d", len(self._trees), self._next_id)

    @property
    def next_id(self) -> int:
        return self._next_id

    @property
    def max_depth(self) -> Optional[int]:
        return self._max_depth

    def get_all_trees(self) -> List[TreeNode]:
        return copy_forest(self._trees)

    def add_node(self, label: str, parent_id: int) -> TreeNode:
        if not isinstance(label, str) or not label:
            raise TreeValidationError("label must be a non-empty string")

        with self._lock:
            forest = copy_forest(self._trees)
            parent, parent_depth = _find_with_depth(forest, parent_id)
            if parent is None:
                raise ParentNotFoundError(parent_id)
            if self._max_depth is not None and parent_depth >= self._max_depth:
                raise TreeDepthExceededError(parent_id, self._max_depth)

            node_id = self._next_id
            self._next_id += 1
            node = TreeNode(id=node_id, label=label)
            parent.children.append(node)

            document = TreeDocument.model_construct(trees=forest, next_id=self._next_id)
            self._repository.save(self._key, document.to_storage_dict())
            self._trees = forest

        logger.info("tree_node_created id=%d parent=%s", node_id, parent_id)
        return copy_forest([node])[0]
