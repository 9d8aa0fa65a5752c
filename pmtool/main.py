# pmtool/main.py
"""
Main application file for PMTool.
"""

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
import logging
import json
from datetime import datetime

from pmtool.api.api import api_router
from pmtool.core.config import settings
from pmtool.core.events import setup_event_handlers
from pmtool.core.exceptions import (
    AuthenticationException,
    BusinessRuleException,
    DatabaseException,
    DuplicateEntityException,
    EntityNotFoundException,
    ForbiddenException,
    PMToolException,
    ValidationException,
)
from pmtool.db.session import init_db

# --- Logging Configuration ---
LOG_LEVEL = getattr(logging, settings.LOG_LEVEL, logging.INFO)

logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger("pmtool")
logger.setLevel(LOG_LEVEL)

# Initialize FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="API for projects, tasks and their dependencies",
    version="1.0.0",
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url=f"{settings.API_V1_STR}/docs",
    redoc_url=f"{settings.API_V1_STR}/redoc",
)

# Set up CORS
origins = [str(origin) for origin in settings.BACKEND_CORS_ORIGINS or [] if origin]
if not origins:
    origins = ["http://localhost:3000", "http://127.0.0.1:3000"]
    logger.warning(f"No CORS origins configured in settings, using development fallbacks: {origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=86400,
)

# Domain exception -> HTTP status, most specific first
EXCEPTION_STATUS_CODES = [
    (EntityNotFoundException, status.HTTP_404_NOT_FOUND),
    (DuplicateEntityException, status.HTTP_409_CONFLICT),
    (BusinessRuleException, status.HTTP_409_CONFLICT),
    (ValidationException, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (AuthenticationException, status.HTTP_401_UNAUTHORIZED),
    (ForbiddenException, status.HTTP_403_FORBIDDEN),
    (DatabaseException, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def status_code_for(exc: PMToolException) -> int:
    for exc_type, status_code in EXCEPTION_STATUS_CODES:
        if isinstance(exc, exc_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST


@app.exception_handler(PMToolException)
async def pmtool_exception_handler(request: Request, exc: PMToolException):
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"{exc.code} during {request.method} {request.url.path}: {exc.message}", exc_info=exc)
    else:
        logger.warning(f"{exc.code} during {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=status_code, content={"detail": jsonable_encoder(exc.to_dict())})


# --- Validation Error Handler ---
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    error_details = jsonable_encoder(exc.errors())
    logger.error(f"Request validation error: {request.method} {request.url}")
    try:
        body = await request.json()
        logger.error(f"Request Body: {json.dumps(body, indent=2)}")
    except json.JSONDecodeError:
        logger.error("Request Body: Could not parse as JSON (or empty body).")
    except Exception as e:
        logger.error(f"Request Body: Error reading body - {e}")
    logger.error(f"Validation Errors:\n{json.dumps(error_details, indent=2)}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": error_details},
    )


# Log requests
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = datetime.now()
    logger.info(f"-> Request: {request.method} {request.url.path}")
    try:
        response = await call_next(request)
        process_time = (datetime.now() - start_time).total_seconds()
        logger.info(f"<- Response: {response.status_code} ({process_time:.4f}s)")
        return response
    except Exception as e:
        process_time = (datetime.now() - start_time).total_seconds()
        logger.exception(
            f"!! Error during request processing for {request.method} {request.url.path} ({process_time:.4f}s): {e}"
        )
        raise


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        if request.method != "OPTIONS":
            response.headers["X-Content-Type-Options"] = "nosniff"
            response.headers["X-Frame-Options"] = "DENY"
            response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
            if settings.PRODUCTION and request.url.scheme == "https":
                response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


app.add_middleware(SecurityHeadersMiddleware)

# Set up event handlers
setup_event_handlers(app)


@app.on_event("startup")
async def create_tables_on_startup():
    """Create any missing tables."""
    if not init_db():
        logger.error("Database schema could not be initialized")


# Include the API router
app.include_router(api_router, prefix=settings.API_V1_STR)


# Root and Health Check Endpoints
@app.get("/", tags=["Root"], summary="API Root Endpoint")
def read_root():
    """Provides basic API information and links to documentation."""
    return {
        "message": "Welcome to PMTool API",
        "project_name": settings.PROJECT_NAME,
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT,
        "docs_url": app.docs_url,
        "openapi_url": app.openapi_url,
    }


@app.get("/health", tags=["Health"], summary="API Health Check")
def health_check():
    """Returns the operational status of the API."""
    return {"status": "ok", "timestamp": datetime.now().isoformat()}
