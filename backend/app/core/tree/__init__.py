"""
Tree 模块
In-memory forest of labeled nodes persisted as one JSON document:
- TreeNode / TreeDocument models
- TreeStore (lookup, id allocation, child insertion)
- repositories that load/save the document
"""

from .engine import DEFAULT_MAX_DEPTH, TreeStore, find_node_by_id
from .errors import (
    ParentNotFoundError,
    PersistenceError,
    TreeDepthExceededError,
    TreeStoreError,
    TreeValidationError,
)
from .node import TreeDocument, TreeNode
from .repository import InMemoryTreeRepository, JsonFileTreeRepository, TreeDocumentRepository

__all__ = [
    "TreeStore",
    "DEFAULT_MAX_DEPTH",
    "find_node_by_id",
    "TreeNode",
    "TreeDocument",
    "TreeDocumentRepository",
    "JsonFileTreeRepository",
    "InMemoryTreeRepository",
    "TreeStoreError",
    "TreeValidationError",
    "TreeDepthExceededError",
    "ParentNotFoundError",
    "PersistenceError",
]
