"""
FastAPI web application for the Sales Dashboard API.

Run with:
    uvicorn web.main:app --host 0.0.0.0 --port 3001
    python -m web.main
"""
import os
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse, JSONResponse

from web.config import CORS_ORIGINS, VERSION, WEB_HOST, WEB_PORT
from web.routes import api
from web.routes.api.health import health_payload
from web.middleware import RequestLoggingMiddleware
from core.cache import ResponseCache
from core.config import validate_config, ConfigurationError
from core.exceptions import OCAPIError, TokenAcquisitionError, ValidationError
from core.observability import setup_logging, get_logger, get_correlation_id
from core.ocapi import get_client, close_client
from core.orders import OrderService
from core.scheduler import BackgroundScheduler
from core.tokens import TokenCache

# Configure structured logging
# Use JSON format in production (LOG_FORMAT=json), human-readable otherwise
log_format = os.getenv("LOG_FORMAT", "text")
log_level = os.getenv("LOG_LEVEL", "INFO")
setup_logging(level=log_level, json_format=(log_format == "json"))
logger = get_logger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Sales Dashboard API",
    description="Order analytics over the Commerce Cloud order_search API",
    version=VERSION,
    default_response_class=ORJSONResponse
)

# Shared state: one token cache, one response cache, one HTTP client
ocapi_client = get_client()
response_cache = ResponseCache()
token_cache = TokenCache(ocapi_client)
scheduler = BackgroundScheduler(response_cache)

app.state.response_cache = response_cache
app.state.order_service = OrderService(token_cache, response_cache, ocapi_client)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    logger.warning(f"Invalid request: {exc}", extra={"path": request.url.path})
    return JSONResponse(status_code=400, content={"error": exc.message})


@app.exception_handler(OCAPIError)
async def upstream_error_handler(request: Request, exc: OCAPIError):
    extra = {"path": request.url.path, "error_type": type(exc).__name__}
    if isinstance(exc, TokenAcquisitionError):
        extra["environment"] = exc.environment
    logger.error(f"Error in {request.url.path}: {exc}", extra=extra)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Failed to fetch order data.",
            "correlation_id": get_correlation_id(),
        },
    )


# Add request logging middleware (adds correlation IDs and timing)
app.add_middleware(RequestLoggingMiddleware)

# The dashboard frontend is served from another origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/", include_in_schema=False)
async def root():
    return health_payload()


# Include routers
app.include_router(api.router, prefix="/api")


@app.on_event("startup")
async def startup_event():
    logger.info("Sales Dashboard API starting...")

    # Validate configuration early - fail fast with clear errors
    try:
        for warning in validate_config():
            logger.warning(f"Environment not configured: {warning}")
    except ConfigurationError as e:
        logger.critical(f"Configuration error: {e}")
        raise SystemExit(1)

    scheduler.start()
    logger.info("Dashboard API ready")


@app.on_event("shutdown")
async def shutdown_event():
    try:
        scheduler.shutdown()
    except Exception as e:
        logger.warning(f"Error stopping scheduler: {e}")

    # Close OCAPI client (HTTP connection cleanup)
    try:
        await close_client()
    except Exception as e:
        logger.warning(f"Error closing OCAPI client: {e}")
    logger.info("Sales Dashboard API stopped")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("web.main:app", host=WEB_HOST, port=WEB_PORT)
