from fastapi import FastAPI
from fastapi.responses import HTMLResponse, Response
from prometheus_client import REGISTRY, CONTENT_TYPE_LATEST, generate_latest
from etag_interceptor.api import (
    setup_error_handlers,
    ETagMiddleware,
    RequestIDMiddleware,
    PrometheusMiddleware,
)
from etag_interceptor.core import setup_logging
from etag_interceptor.core.config import settings
from etag_interceptor.utils.etag import Fingerprint

HELLO_PAGE = "<h1>Hello</h1>"


def create_app(fingerprint: Fingerprint | None = None) -> FastAPI:
    setup_logging()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Example application served through the ETag interceptor",
        version=settings.VERSION,
        docs_url=f"{settings.API_V1_STR}/docs",
        redoc_url=f"{settings.API_V1_STR}/redoc",
    )

    # Set up error handlers
    setup_error_handlers(app)

    @app.get("/", response_class=HTMLResponse)
    async def hello() -> str:
        return HELLO_PAGE

    @app.get(f"{settings.API_V1_STR}/health")
    async def health() -> dict:
        return {"status": "ok", "version": settings.VERSION}

    @app.get("/metrics", include_in_schema=False)
    async def metrics():
        return Response(
            content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST
        )

    # Add middleware - order matters!
    # last added runs first: request ids wrap everything, ETag sits next to the routes
    app.add_middleware(ETagMiddleware, fingerprint=fingerprint)
    app.add_middleware(PrometheusMiddleware)
    app.add_middleware(RequestIDMiddleware)

    return app


app = create_app()
