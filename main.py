"""
Task board API — application entry point.
"""

from __future__ import annotations

import logging
import sys
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from api.auth import router as auth_router
from api.errors import register_exception_handlers
from api.routes import router as task_router
from auth.jwt import TokenService
from config.settings import Settings, config
from database.session import build_engine, build_session_factory, create_tables

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    stream=sys.stdout,
)
for _noisy in ("sqlalchemy.engine", "asyncio"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or config
    engine = build_engine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.auto_create_tables:
            await create_tables(engine)
        logger.info("Application ready (environment=%s)", settings.environment)
        yield
        await engine.dispose()

    app = FastAPI(
        title="Task Board API",
        version=settings.app_version,
        description="Task management API with account authentication.",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.token_service = TokenService(settings.jwt_secret, settings.jwt_expiry_seconds)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def access_log(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        logger.debug(
            "%s %s -> %d in %.3fs (account=%s)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed,
            getattr(request.state, "account_id", "-"),
        )
        return response

    register_exception_handlers(app)

    @app.get("/health")
    async def health():
        return {
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "environment": settings.environment,
        }

    @app.get("/")
    async def root():
        return {
            "message": "Welcome to the task management system!",
            "version": settings.app_version,
            "description": "Task management application with account authentication",
        }

    # Routes
    app.include_router(auth_router)
    app.include_router(task_router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
