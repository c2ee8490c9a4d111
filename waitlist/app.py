"""FastAPI application factory for the waitlist service."""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.settings import Settings, get_settings
from waitlist import __version__
from waitlist.api import waitlist_router

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI app.

    Args:
        settings: Settings to use instead of ``get_settings()``; also
            injected into every ``Depends(get_settings)``

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(title="Waitlist Signup API", version=__version__)
    app.include_router(waitlist_router, prefix=settings.server.route_prefix)
    app.dependency_overrides[get_settings] = lambda: settings

    cors_headers = settings.cors.headers()

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            {"success": False, "message": str(exc.detail)},
            status_code=exc.status_code,
            headers={**cors_headers, **(exc.headers or {})},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            {
                "success": False,
                "message": "Internal server error",
                "error_details": "Check server error logs for more information",
            },
            status_code=500,
            headers=cors_headers,
        )

    logger.info("Waitlist endpoint mounted at %s", settings.server.route_prefix)
    return app
