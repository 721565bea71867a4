import os

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .core.logging import configure_logging, get_logger, get_trace_id
from .core.middleware import TraceIDMiddleware
from .routes import ai, health, metrics
from .services.ai.facade import get_ai_service

# Configure structured logging
# Use JSON output in production (containerized), console output in development
log_level = os.getenv("LOG_LEVEL", "INFO")
json_output = os.getenv("LOG_JSON", "true").lower() == "true"
configure_logging(log_level=log_level, json_output=json_output)

logger = get_logger(__name__)

app = FastAPI(
    title="LivingWord AI API",
    description="Multi-provider AI orchestration for scripture study",
    version="1.0.0"
)

# CORS for local dev; restrict in production
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add trace ID middleware (must be after CORS middleware)
app.add_middleware(TraceIDMiddleware)


@app.on_event("startup")
async def startup_event():
    """Register and configure AI providers on application startup."""
    logger.info("app_startup_started")

    service = get_ai_service()
    if service.is_initialized():
        stats = service.registry.statistics()
        logger.info(
            "app_startup_ai_ready",
            available_providers=stats.available_providers,
            total_providers=stats.total_providers,
        )
    else:
        logger.warning(
            "app_startup_ai_unavailable",
            message=service.get_initialization_error(),
        )

    logger.info("app_startup_completed")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("app_shutdown_completed")


# Error handlers
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions (request metrics are recorded by TraceIDMiddleware)."""
    trace_id = get_trace_id()

    logger.warning(
        "http_exception",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
        method=request.method,
    )
    response = JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.detail,
            "status_code": exc.status_code,
            "trace_id": trace_id,
        }
    )
    if trace_id:
        response.headers["X-Trace-ID"] = trace_id
    return response


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions."""
    trace_id = get_trace_id()

    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
        exc_info=True,
    )
    response = JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "status_code": 500,
            "trace_id": trace_id,
        }
    )
    if trace_id:
        response.headers["X-Trace-ID"] = trace_id
    return response


# Include routers
app.include_router(health.router, prefix="/health", tags=["Health"])
app.include_router(ai.router, prefix="/ai", tags=["AI"])
app.include_router(metrics.router, prefix="/metrics", tags=["Metrics"])
