"""Tree node and persisted document models.

Every walk over a forest here uses an explicit stack, so copying, exporting
and loading do not depend on the interpreter's recursion limit.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class TreeNode(BaseModel):
    """A labeled node owning an ordered list of children."""

    model_config = ConfigDict(extra="ignore")

    id: int
    label: str = Field(..., min_length=1)
    children: List[TreeNode] = Field(default_factory=list)

    def export(self) -> Dict[str, Any]:
        return export_forest([self])[0]


class _NodeFields(BaseModel):
    """One stored node, validated without descending into its children."""

    model_config = ConfigDict(extra="ignore")

    id: int
    label: str = Field(..., min_length=1)
    children: List[Any] = Field(default_factory=list)


class _DocumentFields(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    trees: List[Any] = Field(default_factory=list)
    next_id: int = Field(default=1, alias="nextId")


def _leaf(node: TreeNode) -> TreeNode:
    return TreeNode.model_construct(id=node.id, label=node.label, children=[])


def iter_nodes(forest: Sequence[TreeNode]) -> Iterator[TreeNode]:
    """Yield every node depth-first, parents before children, in stored order."""

    for node, _depth in iter_nodes_with_depth(forest):
        yield node


def iter_nodes_with_depth(forest: Sequence[TreeNode]) -> Iterator[Tuple[TreeNode, int]]:
    """Same order as ``iter_nodes``; roots are at depth 1."""

    stack: List[Tuple[TreeNode, int]] = [(node, 1) for node in reversed(forest)]
    while stack:
        node, depth = stack.pop()
        yield node, depth
        stack.extend((child, depth + 1) for child in reversed(node.children))


def copy_forest(forest: Sequence[TreeNode]) -> List[TreeNode]:
    copies = [_leaf(node) for node in forest]
    stack = list(zip(forest, copies))
    while stack:
        source, target = stack.pop()
        for child in source.children:
            clone = _leaf(child)
            target.children.append(clone)
            stack.append((child, clone))
    return copies


def export_forest(forest: Sequence[TreeNode]) -> List[Dict[str, Any]]:
    """Plain ``{"id", "label", "children"}`` dicts, ready for ``json.dump``."""

    exported: List[Dict[str, Any]] = []
    stack: List[Tuple[TreeNode, List[Dict[str, Any]]]] = [(node, exported) for node in reversed(forest)]
    while stack:
        node, siblings = stack.pop()
        entry: Dict[str, Any] = {"id": node.id, "label": node.label, "children": []}
        siblings.append(entry)
        stack.extend((child, entry["children"]) for child in reversed(node.children))
    return exported


def build_forest(raw_trees: Sequence[Any]) -> List[TreeNode]:
    """Validate stored nodes one at a time and rebuild the forest.

    Raises pydantic's ``ValidationError`` on the first node that does not match.
    """

    forest: List[TreeNode] = []
    stack: List[Tuple[Any, List[TreeNode]]] = [(raw, forest) for raw in reversed(raw_trees)]
    while stack:
        raw, siblings = stack.pop()
        fields = _NodeFields.model_validate(raw)
        node = TreeNode.model_construct(id=fields.id, label=fields.label, children=[])
        siblings.append(node)
        stack.extend((child, node.children) for child in reversed(fields.children))
    return forest


class TreeDocument(BaseModel):
    """Persisted shape: ``{"trees": [...], "nextId": n}``."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    trees: List[TreeNode] = Field(default_factory=list)
    next_id: int = Field(default=1, alias="nextId")

    def max_id(self) -> int:
        return max((node.id for node in iter_nodes(self.trees)), default=0)

    @classmethod
    def from_storage(cls, payload: Any) -> TreeDocument:
        """Validate a loaded blob and repair a stale ``nextId``.

        Raises ``ValueError`` (pydantic's ``ValidationError`` included) when the
        shape does not match or ids repeat.
        """

        fields = _DocumentFields.model_validate(payload)
        trees = build_forest(fields.trees)

        seen = set()
        for node in iter_nodes(trees):
            if node.id in seen:
                raise ValueError(f"duplicate node id {node.id}")
            seen.add(node.id)

        document = cls.model_construct(trees=trees, next_id=fields.next_id)
        floor = document.max_id() + 1
        if document.next_id < floor:
            logger.warning("tree_document_next_id_repaired stored=%s using=%s", document.next_id, floor)
            document.next_id = floor
        return document

    def to_storage_dict(self) -> Dict[str, Any]:
        return {"trees": export_forest(self.trees), "nextId": self.next_id}
