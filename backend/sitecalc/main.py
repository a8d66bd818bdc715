"""
SiteCalc Estimator API
FastAPI backend for construction bid calculators: projects, calculators
(square-footage, three-field, seven-field, measurement), product catalog.
"""
import os
import logging
import time
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse
from dotenv import load_dotenv

from sitecalc.config import APP_VERSION, store_backend
from sitecalc.services.calculator_service import CalculatorService
from sitecalc.services.document_store import DocumentStore, InMemoryDocumentStore
from sitecalc.services.errors import InvalidFieldError, NotFoundError, ValidationError
from sitecalc.services.logging_config import setup_logging
from sitecalc.services.middleware import RequestTimingMiddleware, SecurityHeadersMiddleware
from sitecalc.services.perf_monitor import tracker as perf_tracker
from sitecalc.services.product_catalog import ProductCatalog
from sitecalc.services.project_service import ProjectService

load_dotenv()

_log_level = os.getenv("LOG_LEVEL", "INFO")
_json_logs = os.getenv("LOG_FORMAT", "json").lower() != "text"
setup_logging(level=_log_level, json_output=_json_logs)
logger = logging.getLogger("sitecalc-api")

_PROCESS_START = time.monotonic()


def _build_store() -> DocumentStore:
    if store_backend() == "sql":
        from sitecalc.db import AsyncSessionLocal
        from sitecalc.services.document_store import SqlDocumentStore
        return SqlDocumentStore(AsyncSessionLocal)
    if not os.getenv("DATABASE_URL"):
        logger.warning("DATABASE_URL not set — using in-memory document store (dev mode)")
    return InMemoryDocumentStore()


@asynccontextmanager
async def lifespan(app: FastAPI):
    if isinstance(app.state.store, InMemoryDocumentStore):
        yield
        return
    from sitecalc.db import engine, init_db
    await init_db()
    yield
    await engine.dispose()


def create_app(store: Optional[DocumentStore] = None) -> FastAPI:
    app = FastAPI(
        title="SiteCalc Estimator API",
        version=APP_VERSION,
        description="Construction bid calculators with section and grand totals",
        lifespan=lifespan,
    )

    store = store if store is not None else _build_store()
    catalog = ProductCatalog(store)
    app.state.store = store
    app.state.catalog = catalog
    app.state.projects = ProjectService(store)
    app.state.calculators = CalculatorService(store, catalog)

    # ── Error mapping ────────────────────────────────────────────────────────
    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(InvalidFieldError)
    async def _invalid_field(request: Request, exc: InvalidFieldError):
        return JSONResponse(status_code=422, content={"detail": str(exc), "field": exc.field})

    @app.exception_handler(ValidationError)
    async def _invalid_input(request: Request, exc: ValidationError):
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    # ── Middleware ───────────────────────────────────────────────────────────
    _cors_default = "http://localhost:3000,http://localhost:8000"
    cors_origins = [o.strip() for o in os.getenv("CORS_ORIGINS", _cors_default).split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    # Outermost, so the timing covers every other middleware
    app.add_middleware(RequestTimingMiddleware)

    # ── Routers ──────────────────────────────────────────────────────────────
    from sitecalc.api.project_routes import router as project_router
    from sitecalc.api.calculator_routes import router as calculator_router
    from sitecalc.api.product_routes import router as product_router

    app.include_router(project_router)
    app.include_router(calculator_router)
    app.include_router(product_router)

    @app.get("/health")
    async def health_check():
        return {
            "status": "active",
            "version": APP_VERSION,
            "store": type(app.state.store).__name__,
        }

    @app.get("/metrics")
    async def metrics():
        """Mutation throughput, average duration and error counts per operation."""
        snapshot = perf_tracker.get_metrics()
        return {"uptime_seconds": round(time.monotonic() - _PROCESS_START, 1), **snapshot}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("sitecalc.main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
