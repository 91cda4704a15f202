"""
EduTest Platform - FastAPI Application Entry Point.

`create_app()` builds the application from a Settings object:
1. Sets up structured JSON logging
2. Creates the database engine and session factory (on `app.state`)
3. Adds CORS and request ID middleware (X-Request-ID header)
4. Maps service errors onto HTTP responses
5. Registers all API route handlers and the health check

The application follows a modular architecture:
- routes/: API endpoint handlers
- models/: SQLAlchemy ORM models
- services/: Business logic (grading, eligibility, scoring, attempts, suspend)
- logging_config.py: Structured logging configuration
- database.py: Engine, sessions and transactions
"""

import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from edutest.config import Settings, get_settings
from edutest.database import create_tables, make_engine, make_session_factory
from edutest.errors import EduTestError, PolicyError
from edutest.logging_config import (
    setup_logging, get_logger, log_with_context,
    request_id_var, generate_request_id
)
from edutest.routes import attempts, sat_attempts, sat_tests, tests

SERVICE_NAME = "EduTest Platform"
VERSION = "1.0.0"

logger = get_logger("http")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI application for the given settings (env/.env when omitted)."""
    settings = settings or get_settings()

    # ──────────────────────────────────────────────────────────────
    # Initialize structured logging BEFORE anything else
    # ──────────────────────────────────────────────────────────────
    setup_logging(settings.LOG_LEVEL)

    engine = make_engine(settings)

    # Auto-create tables for SQLite local development
    if settings.DATABASE_URL.startswith("sqlite"):
        log_with_context(logger, "INFO", "Using SQLite, creating tables directly")
        create_tables(engine)

    app = FastAPI(
        title=SERVICE_NAME,
        description=(
            "Backend of an educational testing platform: timed tests with "
            "attempt limits, suspend/resume of in-progress answers, and "
            "sectioned SAT-style tests scored per section."
        ),
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)

    # ──────────────────────────────────────────────────────────────
    # CORS Middleware
    # ──────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"]
    )

    # ──────────────────────────────────────────────────────────────
    # Request ID Middleware
    #
    # Generates a unique UUID per incoming request and:
    # 1. Stores it in a context variable (available to all log entries)
    # 2. Returns it in the X-Request-ID response header
    # 3. Logs request start/end with latency measurement
    # ──────────────────────────────────────────────────────────────
    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        req_id = generate_request_id()
        request_id_var.set(req_id)
        start_time = time.time()

        log_with_context(logger, "INFO",
            f"Request started: {request.method} {request.url.path}",
            context={"request_id": req_id},
            extra_data={
                "ip": request.client.host if request.client else "unknown",
                "user_agent": request.headers.get("user-agent", ""),
                "query_params": dict(request.query_params)
            })

        response = await call_next(request)

        duration_ms = (time.time() - start_time) * 1000
        response.headers["X-Request-ID"] = req_id

        log_with_context(logger, "INFO",
            f"Request completed: {request.method} {request.url.path} → {response.status_code}",
            context={"request_id": req_id},
            extra_data={
                "duration_ms": round(duration_ms, 2),
                "status_code": response.status_code
            })

        return response

    # ──────────────────────────────────────────────────────────────
    # Error handlers
    # ──────────────────────────────────────────────────────────────
    @app.exception_handler(EduTestError)
    async def edutest_error_handler(request: Request, exc: EduTestError):
        extra = {"status_code": exc.status_code}
        if isinstance(exc, PolicyError):
            extra["reason"] = exc.reason
        level = "ERROR" if exc.status_code >= 500 else "WARNING"
        log_with_context(logger, level,
            f"{request.method} {request.url.path} failed: {exc.message}",
            extra_data=extra)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = jsonable_encoder(exc.errors())
        log_with_context(logger, "WARNING",
            f"Malformed request body: {request.method} {request.url.path}",
            extra_data={"errors": errors})
        return JSONResponse(status_code=400, content={"detail": "Invalid request body",
                                                      "errors": errors})

    # ──────────────────────────────────────────────────────────────
    # Register API routes
    # ──────────────────────────────────────────────────────────────
    app.include_router(tests.router, tags=["Tests"])
    app.include_router(attempts.router, tags=["Attempts"])
    app.include_router(sat_tests.router, tags=["SAT Tests"])
    app.include_router(sat_attempts.router, tags=["SAT Attempts"])

    # ──────────────────────────────────────────────────────────────
    # Health check endpoint
    # ──────────────────────────────────────────────────────────────
    @app.get("/health", tags=["Health"])
    def health_check():
        """Health check endpoint for Docker health checks and monitoring."""
        return {"status": "healthy", "service": "edutest-backend", "version": VERSION}

    @app.get("/", tags=["Root"])
    def root():
        """Root endpoint with API information."""
        return {
            "service": SERVICE_NAME,
            "version": VERSION,
            "docs": "/docs",
            "health": "/health",
            "endpoints": {
                "take": "GET /api/tests/{id}/take",
                "submit": "POST /api/tests/{id}/submit",
                "suspend": "POST /api/tests/{id}/suspend",
                "continue": "GET /api/tests/{id}/continue",
                "status": "GET /api/tests/{id}/status",
                "attempts_list": "GET /api/attempts/user/{user_id}",
                "attempt_review": "GET /api/attempts/{id}/answers",
                "sat_details": "GET /api/satTests/{id}/details",
                "sat_submit": "POST /api/satTests/{id}/submit",
                "sat_attempts_list": "GET /api/satAttempts/user/{user_id}",
                "sat_attempt_detail": "GET /api/satAttempts/{id}/user/{user_id}/answers",
                "sat_attempt_delete": "DELETE /api/satAttempts/{id}"
            }
        }

    return app


app = create_app()
