import time
import uuid
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from exceptions import ConversionError, UnsupportedFormatError
from routers import convert_router
from services.converter import FORMAT_EXTENSIONS
from utils.logging_utils import setup_logging, get_logger

setup_logging(level=settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events."""
    logger.info("=" * 60)
    logger.info("GRAPH CONVERTER STARTING UP")
    logger.info(f"App: {settings.APP_NAME} v{settings.APP_VERSION}")

    from services.health import run_health_checks
    health = run_health_checks()
    for check in health.checks:
        status_icon = "+" if check.status == "ok" else "!"
        detail = ""
        if check.message:
            detail += f" ({check.message})"
        if check.response_time_ms is not None:
            detail += f" [{check.response_time_ms:.1f}ms]"
        logger.info(f"  {status_icon} {check.name}: {check.status}{detail}")
    if health.status != "healthy":
        logger.warning(f"STARTUP HEALTH: {health.status.upper()} - some checks failed")

    logger.info("STARTUP COMPLETE - Ready to accept requests")
    logger.info("=" * 60)

    yield

    logger.info("GRAPH CONVERTER SHUTTING DOWN")


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    lifespan=lifespan,
)


# ── Custom validation error handler ───────────────────────────────────

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
):
    """
    Return user-friendly error messages when request validation fails.

    Instead of Pydantic's raw error output, this returns a structured
    response with per-field error messages.
    """
    errors = []
    for error in exc.errors():
        # Build a dotted field path (skip the top-level "body"/"query" prefix)
        loc_parts = [str(x) for x in error.get("loc", [])]
        if loc_parts and loc_parts[0] in ("body", "query", "path"):
            loc_parts = loc_parts[1:]
        field = ".".join(loc_parts) if loc_parts else "unknown"

        msg = error.get("msg", "Validation error")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]

        errors.append({
            "field": field,
            "message": msg,
            "type": error.get("type", "unknown"),
        })

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": "Validation failed",
            "errors": errors,
        },
    )


# ── Conversion error handler ──────────────────────────────────────────

@app.exception_handler(ConversionError)
async def conversion_exception_handler(request: Request, exc: ConversionError):
    """Report a failed conversion with the error class and its location."""
    if isinstance(exc, UnsupportedFormatError):
        status_code = status.HTTP_400_BAD_REQUEST
    else:
        status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    logger.warning(f"Conversion failed: {type(exc).__name__}: {exc}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


# ── Request ID + request logging middleware ───────────────────────────

@app.middleware("http")
async def request_lifecycle(request: Request, call_next):
    """Assign a request ID, log timing, and add the ID to response headers."""
    request_id = str(uuid.uuid4())

    start_time = time.perf_counter()
    logger.debug(f"→ {request.method} {request.url.path}")

    response = await call_next(request)

    duration_ms = (time.perf_counter() - start_time) * 1000
    status_indicator = "+" if response.status_code < 400 else "!"
    logger.info(
        f"{status_indicator} {request.method} {request.url.path} "
        f"[{response.status_code}] {duration_ms:.1f}ms rid={request_id[:8]}"
    )

    response.headers["X-Request-ID"] = request_id
    return response


# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)

# Include routers
app.include_router(convert_router)


@app.get("/health", tags=["health"])
async def health_check():
    """Health check endpoint with component status breakdown."""
    from services.health import run_health_checks
    health = run_health_checks()
    status_code = 200 if health.status in ("healthy", "degraded") else 503
    return JSONResponse(content=health.model_dump(), status_code=status_code)


@app.get("/api/info", tags=["info"])
async def get_app_info():
    """Get application version and supported formats."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "formats": sorted(set(FORMAT_EXTENSIONS.values())),
        "extensions": sorted(FORMAT_EXTENSIONS),
    }


@app.get("/api", tags=["root"])
async def api_root():
    """API root endpoint."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "openapi": "/openapi.json",
        "endpoints": {
            "convert": "/api/convert",
            "info": "/api/info",
            "health": "/health",
        }
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
