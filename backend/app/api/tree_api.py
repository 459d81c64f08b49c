"""HTTP endpoints for the labeled tree forest.

``GET /api/tree`` returns every root with its descendants; ``POST /api/tree``
appends a child under an existing node. The store itself is owned by the
application and reached through ``get_tree_store``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict

from app.core.tree import ParentNotFoundError, TreeStore, TreeValidationError
from app.core.tree.node import export_forest

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/api/tree", tags=["Tree"])


class AddNodeInput(BaseModel):
    """Raw request body; field types are checked by the handler."""

    model_config = ConfigDict(extra="ignore")

    label: Any = None
    parentId: Any = None


def get_tree_store(request: Request) -> TreeStore:
    return request.app.state.tree_store


def _error(status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "message": message})


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# Plain dicts through JSONResponse; jsonable_encoder recurses once per level.
@router.get("")
def get_trees(store: TreeStore = Depends(get_tree_store)):
    try:
        trees = export_forest(store.get_all_trees())
    except Exception:
        logger.exception("tree_api_get_failed")
        return _error(500, "Internal server error", "Failed to retrieve trees")
    return JSONResponse(content=trees)


@router.post("", status_code=201)
def add_node(
    payload: Optional[AddNodeInput] = Body(default=None),
    store: TreeStore = Depends(get_tree_store),
):
    label = payload.label if payload is not None else None
    has_parent = payload is not None and "parentId" in payload.model_fields_set

    if not label or not has_parent:
        return _error(400, "Invalid request", "Label and parentId are required")
    if not _is_number(payload.parentId):
        return _error(400, "Invalid request", "parentId must be a number")
    if not isinstance(label, str):
        return _error(400, "Invalid request", "label must be a string")

    try:
        node = store.add_node(label, payload.parentId)
    except ParentNotFoundError as exc:
        logger.info("tree_api_parent_missing parent=%s", exc.parent_id)
        return _error(404, "Parent not found", str(exc))
    except TreeValidationError as exc:
        logger.info("tree_api_add_rejected parent=%s reason=%s", payload.parentId, exc)
        return _error(400, "Invalid request", str(exc))
    except Exception:
        logger.exception("tree_api_add_failed parent=%s", payload.parentId)
        return _error(500, "Internal server error", "Failed to create node")
    return JSONResponse(status_code=201, content=node.export())
