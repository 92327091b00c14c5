"""FastAPI web application for Bookshelf."""

from __future__ import annotations

import os
from collections.abc import Callable
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path

import structlog
import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from ..core.commands import Bookshelf
from ..core.storage import KeyValueMedium, KeyValueStorage, Persistence
from ..core.store import Store

load_dotenv()

log = structlog.get_logger()

STATIC_DIR = Path(__file__).parent / "static"
MAX_BODY_BYTES = 50_000  # ~50 KB max request body
VERSION = "0.1.0"


async def _read_body(request: Request) -> dict | JSONResponse:
    """Parse a JSON object body; malformed or non-object bodies count as empty."""
    content_length = request.headers.get("content-length")
    if content_length and int(content_length) > MAX_BODY_BYTES:
        return JSONResponse({"error": "Request too large."}, status_code=413)
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _field(body: dict, name: str) -> str:
    value = body.get(name, "")
    return value if isinstance(value, str) else ""


def _shelf(request: Request) -> Bookshelf:
    return request.app.state.shelf


def create_app(storage_factory: Callable[[], KeyValueMedium] = KeyValueStorage) -> FastAPI:
    """Build the app. The store is opened at startup and closed at shutdown."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store = Store(Persistence(storage_factory()))
        store.initialize()
        app.state.shelf = Bookshelf(store)
        log.info("app_started", books=len(store.books))
        try:
            yield
        finally:
            store.close()
            log.info("app_stopped")

    app = FastAPI(title="Bookshelf", docs_url=None, redoc_url=None, lifespan=lifespan)

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response

    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    @app.get("/health")
    async def health(request: Request):
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": VERSION,
            "environment": os.environ.get("ENV", "dev"),
            "books": len(_shelf(request).store.books),
        }

    @app.get("/", response_class=HTMLResponse)
    async def index():
        return (STATIC_DIR / "index.html").read_text()

    @app.get("/api/state")
    async def state(request: Request):
        return asdict(_shelf(request).snapshot())

    @app.post("/api/search")
    async def search(request: Request):
        body = await _read_body(request)
        if isinstance(body, JSONResponse):
            return body
        return {"catalog": asdict(_shelf(request).search(_field(body, "query")))}

    @app.post("/api/category")
    async def category(request: Request):
        body = await _read_body(request)
        if isinstance(body, JSONResponse):
            return body
        return {"catalog": asdict(_shelf(request).select_category(_field(body, "category")))}

    @app.post("/api/filters/clear")
    async def clear_filters(request: Request):
        return {"catalog": asdict(_shelf(request).clear_filters())}

    @app.post("/api/books")
    async def add_book(request: Request):
        body = await _read_body(request)
        if isinstance(body, JSONResponse):
            return body
        result = _shelf(request).submit_book(
            _field(body, "title"),
            _field(body, "author"),
            _field(body, "category"),
            _field(body, "image"),
        )
        if result.error:
            return JSONResponse({"error": result.error}, status_code=400)
        return JSONResponse(asdict(result), status_code=201)

    @app.post("/api/books/{book_id}/toggle")
    async def toggle(request: Request, book_id: int):
        return asdict(_shelf(request).toggle(book_id))

    return app


app = create_app()


def main():
    port = int(os.environ.get("PORT", "8000"))
    is_dev = os.environ.get("ENV", "dev") == "dev"
    uvicorn.run(
        "booklib.web.app:app",
        host="0.0.0.0",
        port=port,
        reload=is_dev,
    )
