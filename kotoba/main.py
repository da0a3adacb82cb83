from __future__ import annotations

import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from kotoba.ask_api import router as ask_router
from kotoba.config import Settings, get_settings
from kotoba.dispatch import close_providers
from kotoba.explain_api import router as explain_router
from kotoba.health import router as health_router
from kotoba.security.basic_auth import BasicAuthMiddleware
from kotoba.security.errors import NotFoundError, ProxyError, error_response, json_error
from kotoba.sound_api import router as sound_router


@asynccontextmanager
async def _lifespan(app: FastAPI):
    yield
    await close_providers()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="Kotoba Proxy", version="0.1.0", lifespan=_lifespan)
    # routes and providers read the same settings the authenticator checks
    app.dependency_overrides[get_settings] = lambda: settings

    # added last runs first: CORS answers preflight before the credential check
    app.add_middleware(BasicAuthMiddleware, credentials=settings.credentials)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_headers=["Authorization", "Content-Type", "Accept"],
        allow_methods=["GET", "OPTIONS"],
    )

    @app.exception_handler(ProxyError)
    async def _proxy_error_handler(request: Request, exc: ProxyError):
        return error_response(exc)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (404, 405):
            return error_response(NotFoundError("Not Found"))
        return json_error(exc.status_code, "HTTP_ERROR", str(exc.detail))

    app.include_router(health_router)
    app.include_router(ask_router)
    app.include_router(explain_router)
    app.include_router(sound_router)
    return app


def configure_logging(settings: Settings) -> None:
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level)


app = create_app()


def run() -> None:
    import uvicorn

    settings = get_settings()
    configure_logging(settings)
    logger.info("Starting Kotoba Proxy on {}:{}", settings.bind_host, settings.port)
    uvicorn.run(app, host=settings.bind_host, port=settings.port)


if __name__ == "__main__":
    run()

__all__ = ["app", "create_app", "run"]
