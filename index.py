import os
import logging
from datetime import datetime

import httpx
from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.generation_options import get_option_info_for_frontend
from config.settings import get_settings
from routes.community import router as community_router
from routes.generation import router as generation_router
from services.exceptions import MetaphorError
from services.rate_limiter import RateLimiter


# Load environment variables
load_dotenv()

# Configure logging
log_handlers = [logging.StreamHandler()]
if os.getenv("LOG_FILE"):
    log_handlers.append(logging.FileHandler(os.getenv("LOG_FILE")))

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=log_handlers
)
logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}

# Initialize FastAPI app
app = FastAPI(
    title="Metaphor Backend",
    description="AI-assisted SVG visual metaphor generator with a shared community gallery",
    version="1.0.0"
)

# Include routers
app.include_router(generation_router)
app.include_router(community_router)

# One limiter per process; it starts empty whenever the process starts
settings = get_settings()
app.state.rate_limiter = RateLimiter(
    max_requests=settings.rate_limit_requests,
    window_seconds=settings.rate_limit_window,
)


@app.middleware("http")
async def add_cors_headers(request: Request, call_next):
    """Attach permissive CORS headers to every response."""
    response = await call_next(request)
    for header, value in CORS_HEADERS.items():
        response.headers.setdefault(header, value)
    return response


@app.exception_handler(MetaphorError)
async def metaphor_error_handler(request: Request, exc: MetaphorError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def describe_validation_error(exc: RequestValidationError) -> str:
    """Name the first offending field and the violated bound."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    error = errors[0]
    if error.get("type") == "json_invalid":
        return "Request body must be valid JSON"
    location = [str(part) for part in error.get("loc", ()) if part != "body"]
    if not location:
        return "Request body is required"
    field = ".".join(location)
    return f"{field}: {error.get('msg', 'invalid value')}"


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    message = describe_validation_error(exc)
    logger.info(f"Rejected {request.method} {request.url.path}: {message}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


@app.on_event("startup")
async def startup_event():
    """Open the shared upstream HTTP client."""
    app.state.http_client = httpx.AsyncClient(timeout=settings.upstream_timeout)
    logger.info("✅ Metaphor Backend started successfully")
    logger.info(f"✅ Default model: {settings.default_model}")
    logger.info(f"✅ Fallback model: {settings.fallback_model}")
    if not settings.openrouter_api_key:
        logger.warning("OPENROUTER_API_KEY is not set; only requests with their own apiKey will succeed")
    if not settings.github_token:
        logger.warning("GITHUB_TOKEN is not set; community saves are disabled")


@app.on_event("shutdown")
async def shutdown_event():
    await app.state.http_client.aclose()


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    logger.debug("Health check requested")
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "model": settings.default_model,
        "fallback_model": settings.fallback_model,
    }


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "message": "Metaphor Backend API",
        "version": "1.0.0",
        "model": settings.default_model,
        "endpoints": {
            "generate": "/generate",
            "save_community": "/save-community",
            "community": "/community",
            "health": "/health",
        },
        "options": get_option_info_for_frontend(),
        "rate_limit": f"{settings.rate_limit_requests} requests per {settings.rate_limit_window}s without an own API key",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
