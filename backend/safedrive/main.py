"""
SafeDrive - FastAPI application

JSON API under /api/{API_VERSION}, liveness and readiness checks under
/health/live and /health/ready, and the server-rendered dashboard at the root.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded

from safedrive.core.config import settings
from safedrive.core.database import init_db, close_db
from safedrive.core.exceptions import SafeDriveError, safedrive_error_handler
from safedrive.core.logging_config import logger
from safedrive.core.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    RequestSizeLimitMiddleware,
)
from safedrive.core.rate_limiter import limiter, rate_limit_exceeded_handler
from safedrive.api.v1.router import api_router
from safedrive.api.v1.endpoints import health
from safedrive.web import pages


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME} {settings.APP_VERSION} ({settings.ENVIRONMENT})")
    try:
        await init_db()
    except Exception as e:
        logger.error(f"[Startup] Database unavailable: {e}")
        raise
    logger.info("[Startup] Database tables ready")

    yield

    await close_db()
    logger.info(f"{settings.APP_NAME} stopped")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.log_error_with_context(exc, context=f"{request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": str(exc) if settings.DEBUG else "Internal server error",
            "code": "INTERNAL_ERROR",
        }
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="Driver health and safety monitoring dashboard",
        version=settings.APP_VERSION,
        lifespan=lifespan,
        redirect_slashes=False
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(SafeDriveError, safedrive_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Last added runs first: CORS, size limit, security headers, logging
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestSizeLimitMiddleware, max_size=settings.MAX_REQUEST_SIZE)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Response-Time", "X-Window-Start", "X-Window-End", "X-Window-Total"],
    )

    app.mount("/static", StaticFiles(directory=str(settings.STATIC_DIR)), name="static")
    app.include_router(health.router)
    app.include_router(api_router, prefix=f"/api/{settings.API_VERSION}")
    app.include_router(pages.router, include_in_schema=False)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("safedrive.main:app", host=settings.SERVER_HOST, port=settings.SERVER_PORT, reload=settings.DEBUG)
