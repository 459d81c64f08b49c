"""Error kinds raised by the tree store and its persistence layer."""

from __future__ import annotations


class TreeStoreError(Exception):
    """Base class for tree store failures."""


class TreeValidationError(TreeStoreError, ValueError):
    """Input rejected before touching the forest."""


class ParentNotFoundError(TreeStoreError, LookupError):
    def __init__(self, parent_id: int) -> None:
        self.parent_id = parent_id
        super().__init__(f"Parent node with id {parent_id} not found")


class PersistenceError(TreeStoreError):
    """Reading or writing the persisted tree document failed."""


class TreeDepthExceededError(TreeValidationError):
    def __init__(self, parent_id: int, max_depth: int) -> None:
        self.parent_id = parent_id
        self.max_depth = max_depth
        super().__init__(f"Node with id {parent_id} is at the maximum depth of {max_depth}")
