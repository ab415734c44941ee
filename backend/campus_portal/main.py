from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from .core.config import settings
from .core.database import create_db_and_tables
from .core.cache import cache
from .api.v1.api import api_router
from .middleware.performance import PerformanceMiddleware
from .middleware.rate_limiting import RateLimitMiddleware, credential_paths
from .middleware.timezone import TimezoneMiddleware
from .utils.file_paths import FileTypes, ensure_upload_directory, get_uploads_root

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Campus Portal API",
    description="Student, teacher, admin and doctor portal: elections, complaints, applications and disciplinary records",
    version="1.0.0",
    docs_url="/docs" if settings.environment == "development" else None,
    redoc_url="/redoc" if settings.environment == "development" else None
)

app.add_middleware(GZipMiddleware, minimum_size=1000)

app.add_middleware(TimezoneMiddleware)

app.add_middleware(
    PerformanceMiddleware,
    slow_request_threshold=settings.slow_request_threshold
)

app.add_middleware(
    RateLimitMiddleware,
    paths=credential_paths(settings.api_prefix),
    requests_per_minute=settings.auth_rate_limit_per_minute,
    enabled=settings.rate_limit_enabled
)

# Added last so it wraps everything, including rate-limited responses
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.mount("/uploads", StaticFiles(directory=get_uploads_root(), check_dir=False), name="uploads")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail), "detail": exc.detail},
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "message": "Invalid request",
            "errors": jsonable_encoder(exc.errors())
        }
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "message": "Internal server error",
            "request_id": getattr(request.state, "request_id", "unknown")
        }
    )


@app.on_event("startup")
async def startup_event():
    logger.info("Starting Campus Portal API...")

    for file_type in FileTypes.ALL:
        ensure_upload_directory(file_type)
    logger.info(f"Upload directories ready under {get_uploads_root()}")

    create_db_and_tables()
    logger.info("Database initialized")

    if await cache.ahealth_check():
        logger.info("Cache connection established")
    else:
        logger.warning("Cache connection failed - running without cache")


@app.on_event("shutdown")
async def shutdown_event():
    await cache.aclose()
    logger.info("Campus Portal API stopped")


@app.get("/health")
async def health_check():
    return {"status": "ok", "message": "API is healthy"}


app.include_router(api_router, prefix=settings.api_prefix)
