"""FastAPI application for the mmorpgapi backend"""
from fastapi import FastAPI, Request, Depends
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
import os
import logging

from core.config import SERVICE_NAME
from backend.dependencies import get_store
from backend.documents import DocumentStore, DocumentStoreError
from backend.routers import combat, config, enemies, general, leaderboard, players, progress, quests

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Environment check
IS_PRODUCTION = os.getenv("ENVIRONMENT", "development").lower() == "production"

# Request size limit (in bytes)
MAX_REQUEST_SIZE = 10 * 1024


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses"""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        # HSTS (only in production with HTTPS)
        if IS_PRODUCTION:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Limit request body size"""

    async def dispatch(self, request: Request, call_next):
        content_length = request.headers.get("content-length")

        if content_length and content_length.isdigit() and int(content_length) > MAX_REQUEST_SIZE:
            client = request.client.host if request.client else "unknown"
            logger.warning(
                f"Request too large: {content_length} bytes from {client} "
                f"to {request.url.path}"
            )
            return JSONResponse(
                status_code=413,
                content={"error": "request_too_large"}
            )

        return await call_next(request)


app = FastAPI(
    title="mmorpgapi",
    description="Backend API for an incremental game - global progress, players, quests, enemies and combat",
    version="1.0.0"
)


# CORS configuration - environment-based
def get_allowed_origins() -> list:
    """Get allowed CORS origins from environment"""
    if IS_PRODUCTION:
        origins_str = os.getenv("ALLOWED_ORIGINS", "")
        if origins_str:
            origins = [origin.strip() for origin in origins_str.split(",") if origin.strip()]
            logger.info(f"Production CORS origins: {origins}")
            return origins
        logger.warning("Production mode but no ALLOWED_ORIGINS set!")
        return []

    logger.info("Development mode: allowing common localhost origins")
    return [
        "http://localhost:3000",
        "http://localhost:5173",  # Vite default
        "http://localhost:8080",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:8080",
    ]


allowed_origins = get_allowed_origins()

app.add_middleware(RequestSizeLimitMiddleware)
app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "X-Admin-Secret"],
    max_age=3600,  # Cache preflight requests for 1 hour
)

# Include routers
app.include_router(general.router)
app.include_router(progress.router)
app.include_router(players.router)
app.include_router(leaderboard.router)
app.include_router(quests.router)
app.include_router(enemies.router)
app.include_router(combat.router)
app.include_router(config.router)


@app.get("/api/health")
async def health_check(store: DocumentStore = Depends(get_store)):
    """Health check endpoint"""
    try:
        store.ping()
        db_status = "connected"
    except DocumentStoreError as e:
        db_status = f"error: {str(e)}"

    return {
        "status": "healthy",
        "database": db_status
    }


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTP errors as {"error": <code>}"""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Missing or malformed input is a 400, not FastAPI's default 422"""
    logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={"error": "invalid_request"}
    )


@app.exception_handler(DocumentStoreError)
async def store_exception_handler(request: Request, exc: DocumentStoreError):
    """Document store failures"""
    logger.error(f"Store error on {request.url.path}: {str(exc)}")
    return JSONResponse(
        status_code=500,
        content={"error": "store_error"}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler - sanitizes errors in production.
    """
    logger.error(f"Unhandled exception on {request.url.path}: {str(exc)}", exc_info=True)

    if IS_PRODUCTION:
        return JSONResponse(
            status_code=500,
            content={"error": "internal_error"}
        )
    # Include error details in development
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_error",
            "detail": str(exc),
            "type": type(exc).__name__
        }
    )


def get_bind_address() -> tuple:
    """Host and port to serve on (PORT defaults to 8080)"""
    port = int(os.getenv("PORT") or 8080)
    host = os.getenv("HOST", "0.0.0.0")
    return host, port


if __name__ == "__main__":
    import uvicorn

    host, port = get_bind_address()
    logger.info(f"Starting {SERVICE_NAME} on {host}:{port}")
    uvicorn.run(app, host=host, port=port)
