# backend/app/main.py

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.tree_api import router as tree_router
from app.core.tree import InMemoryTreeRepository, JsonFileTreeRepository, TreeDocumentRepository, TreeStore
from app.core.tree.settings import TreeServiceSettings, load_settings

logger = logging.getLogger("uvicorn.error")


def build_repository(settings: TreeServiceSettings) -> TreeDocumentRepository:
    if settings.storage == "memory":
        return InMemoryTreeRepository()
    return JsonFileTreeRepository(settings.data_file)


def create_app(
    store: Optional[TreeStore] = None,
    settings: Optional[TreeServiceSettings] = None,
) -> FastAPI:
    settings = settings or load_settings()
    if store is None:
        store = TreeStore(build_repository(settings), max_depth=settings.max_depth)

    # -----------------------------
    # App 初始化
    # -----------------------------
    app = FastAPI(title="Tree Service")
    app.state.tree_store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(tree_router)

    # -----------------------------
    # 错误处理
    # -----------------------------
    @app.exception_handler(RequestValidationError)
    async def invalid_body_handler(request: Request, exc: RequestValidationError):
        logger.info("request_body_invalid path=%s errors=%d", request.url.path, len(exc.errors()))
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "message": "Malformed request body"},
        )

    @app.exception_handler(StarletteHTTPException)
    async def not_found_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return JSONResponse(
                status_code=404,
                content={"error": "Route not found", "path": request.url.path},
            )
        return await http_exception_handler(request, exc)

    logger.info(
        ">>> Tree service ready: storage=%s data_file=%s next_id=%d",
        settings.storage,
        settings.data_file if settings.storage == "file" else "-",
        store.next_id,
    )
    return app


app = create_app()
